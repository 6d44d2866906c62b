"""Services backing the HTTP routes."""

from .badge_generator import BadgeGenerator, escape_xml, logo_data, text_width

__all__ = ["BadgeGenerator", "escape_xml", "logo_data", "text_width"]
