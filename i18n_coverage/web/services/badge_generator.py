"""SVG badge rendering."""

import base64
import html
import math
import string
from typing import Optional

from ...coverage.status import ERROR_COLOR
from ...errors import ErrorCode

NARROW_CHARS = frozenset("iIl1.,:;'\"`")
WIDE_CHARS = frozenset(string.ascii_uppercase + string.digits + "@#$%&*()_+={}|[]\\<>?/~")

STYLES = ("flat", "flat-square", "plastic")

LOGOS = {
    "translate": (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="#fff">'
        '<path d="M12 2C6.48 2 2 6.48 2 12s4.48 10 10 10 10-4.48 10-10S17.52 2 12 2zm-1 13h-1v1'
        "s0 1 -1 1h-2s-1 0-1-1v-1h-1s-1 0-1-1v-1s0-1 1-1h1v-1s0-1 1-1h2s1 0 1 1v1h1s1 0 1 1v1"
        "s0 1-1 1zm5-6h-1v1s0 1-1 1h-2s-1 0-1-1v-1h-1s-1 0-1-1v-1s0-1 1-1h2.5s1 0 1 1v1h1.5"
        's1 0 1 1v1s0 1-1 1z"/></svg>'
    ),
    "github": (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="#fff">'
        '<path d="M12 2A10 10 0 0 0 2 12c0 4.42 2.875 8.17 6.84 9.49l.5-.08c.3-.05.5-.27.5-.54'
        "v-1.95c-2.74 0-3.27-1.35-3.48-1.8a3 3 0 0 0-.88-1.58c-.3-.24-.7-.84-.01-.85 2.75 0 "
        "3.67 2.45 3.67 2.45s1.73 3.02 4 6 3-1.3 3-1.39c0-.14.1-.27.25-.36a3.18 3.18 0 0 0 "
        "1.69-1.1c-2.67 0-5.26-1.22-5.26-5.83 0-1.27.42-2.3 1.13-3.08-.11-.25-.49-1.3.11-2.71"
        ".1-.07.22-.11.34-.11h.11c2 0 3.3 1.27 3.3 1.27 1 2.08 3 2.23 4 2.23s3-.15 4-2.23"
        'c0-0 3.3-1.27 3.3-1.27h2.11c1 0 1 1 1 1"/></svg>'
    ),
}
DEFAULT_LOGO = "translate"

ERROR_MESSAGES = {
    ErrorCode.REPO_NOT_FOUND: "repository not found",
    ErrorCode.NO_I18N_FILES: "no translations found",
    ErrorCode.INVALID_PATH: "invalid path",
    ErrorCode.RATE_LIMITED: "rate limited",
    ErrorCode.UNAVAILABLE: "service unavailable",
    ErrorCode.LANGUAGE_NOT_FOUND: "language not found",
}
ERROR_LABEL = "i18n"


def escape_xml(text: str) -> str:
    """Escape the five XML special characters."""
    return html.escape(text, quote=True)


def text_width(text: str) -> int:
    """Approximate rendered width in pixels of text at 11px Verdana."""
    width = 0.0
    for char in text:
        if char in NARROW_CHARS:
            width += 4
        elif char in WIDE_CHARS or ord(char) > 127:
            width += 7.5
        else:
            width += 6
    return math.ceil(width)


def logo_data(name: Optional[str]) -> str:
    """Base64 payload of a named logo; unknown names get the default logo."""
    svg = LOGOS.get(name or DEFAULT_LOGO, LOGOS[DEFAULT_LOGO])
    return base64.b64encode(svg.encode("utf-8")).decode("ascii")


class BadgeGenerator:
    """Renders shields-style two-part badges as SVG."""

    height = 20
    font_size = 11
    font_family = "Verdana,Geneva,DejaVu Sans,sans-serif"
    default_style = "flat"

    def generate_svg(
        self,
        label: str,
        message: str,
        color: str,
        style: Optional[str] = None,
        logo: Optional[str] = None,
    ) -> str:
        """
        Render a badge.

        Args:
            label: Left-hand text
            message: Right-hand text
            color: Fill color of the message part
            style: One of flat, flat-square, plastic; flat has square corners
            logo: Optional logo name drawn before the label

        Returns:
            SVG document as a string
        """
        style = style if style in STYLES else self.default_style
        label_width = text_width(label)
        message_width = text_width(message)
        logo_width = 20 if logo else 0

        label_bg_width = label_width + logo_width + 12
        message_bg_width = message_width + 10
        total_width = label_width + message_width + logo_width + 24
        label_x = (label_width + logo_width) / 2 + 6
        message_x = label_width + logo_width + message_width / 2 + 12
        corner_radius = 0 if style == "flat" else 3

        label_text = escape_xml(label)
        message_text = escape_xml(message)

        logo_markup = ""
        if logo:
            logo_markup = (
                '\n    <image x="5" y="3" width="14" height="14" '
                f'xlink:href="data:image/svg+xml;base64,{logo_data(logo)}"/>'
            )

        return f"""<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="{total_width}" height="{self.height}" role="img" aria-label="{label_text}: {message_text}">
  <title>{label_text}: {message_text}</title>
  <linearGradient id="s" x2="0" y2="100%">
    <stop offset="0" stop-color="#bbb" stop-opacity=".1"/>
    <stop offset="1" stop-opacity=".1"/>
  </linearGradient>
  <clipPath id="r">
    <rect width="{total_width}" height="{self.height}" rx="{corner_radius}" fill="#fff"/>
  </clipPath>
  <g clip-path="url(#r)">
    <rect width="{label_bg_width}" height="{self.height}" fill="#555"/>
    <rect x="{label_bg_width}" width="{message_bg_width}" height="{self.height}" fill="{color}"/>
    <rect width="{label_bg_width + message_bg_width}" height="{self.height}" fill="url(#s)"/>{logo_markup}
    <g fill="#fff" text-anchor="middle" font-family="{self.font_family}" text-rendering="geometricPrecision" font-size="{self.font_size}">
      <text aria-hidden="true" x="{label_x:g}" y="15" fill="#010101" fill-opacity=".3">{label_text}</text>
      <text x="{label_x:g}" y="14" fill="#fff">{label_text}</text>
      <text aria-hidden="true" x="{message_x:g}" y="15" fill="#010101" fill-opacity=".3">{message_text}</text>
      <text x="{message_x:g}" y="14" fill="#fff">{message_text}</text>
    </g>
  </g>
</svg>"""

    def generate_error_badge(
        self,
        code: Optional[str] = None,
        style: Optional[str] = None,
    ) -> str:
        """Red 'i18n' badge describing an error code; unknown codes read 'error'."""
        try:
            message = ERROR_MESSAGES.get(ErrorCode(code), "error")
        except ValueError:
            message = "error"
        return self.generate_svg(ERROR_LABEL, message, ERROR_COLOR, style=style)
