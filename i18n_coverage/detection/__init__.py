"""i18n layout detection."""

from .structure_detector import StructureDetector, classify_listing, select_base_language

__all__ = ["StructureDetector", "classify_listing", "select_base_language"]
