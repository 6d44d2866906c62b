import base64
import re

import pytest

from i18n_coverage.errors import ErrorCode
from i18n_coverage.web.services.badge_generator import BadgeGenerator, escape_xml, logo_data, text_width


@pytest.fixture
def generator() -> BadgeGenerator:
    return BadgeGenerator()


def test_text_width() -> None:
    assert text_width("hello") > 0
    assert text_width("hello world") > text_width("hello")
    assert text_width("il") == 8
    assert text_width("AB") == 15
    assert text_width("ab") == 12
    assert text_width("한") == 8


def test_escape_xml() -> None:
    assert escape_xml('test & "quotes"') == "test &amp; &quot;quotes&quot;"
    assert escape_xml("<tag>") == "&lt;tag&gt;"
    assert escape_xml("it's") == "it&#x27;s"


def test_generate_svg(generator: BadgeGenerator) -> None:
    svg = generator.generate_svg("Korean", "95%", "#4c1")

    assert svg.startswith("<svg")
    assert 'xmlns="http://www.w3.org/2000/svg"' in svg
    assert "Korean" in svg
    assert "95%" in svg
    assert 'fill="#4c1"' in svg
    assert 'aria-label="Korean: 95%"' in svg
    assert svg.rstrip().endswith("</svg>")
    assert 'rx="0"' in svg


def test_generate_svg_with_options(generator: BadgeGenerator) -> None:
    svg = generator.generate_svg("test", "100%", "#4c1", style="flat-square", logo="github")

    assert 'rx="3"' in svg
    assert logo_data("github") in svg


def test_label_is_escaped(generator: BadgeGenerator) -> None:
    svg = generator.generate_svg("<b>&", "1%", "#e05d44")

    assert "<b>" not in svg
    assert "&lt;b&gt;&amp;" in svg


def test_logo_width_extends_badge(generator: BadgeGenerator) -> None:
    def width(svg: str) -> int:
        return int(re.search(r'<svg[^>]* width="(\d+)"', svg).group(1))

    plain = generator.generate_svg("ko", "50%", "#e05d44")
    with_logo = generator.generate_svg("ko", "50%", "#e05d44", logo="translate")

    assert width(with_logo) == width(plain) + 20


@pytest.mark.parametrize("code", [code.value for code in ErrorCode])
def test_error_badges(generator: BadgeGenerator, code: str) -> None:
    svg = generator.generate_error_badge(code)

    assert "<svg" in svg
    assert "i18n" in svg
    assert "#e05d44" in svg


def test_error_badge_messages(generator: BadgeGenerator) -> None:
    assert "repository not found" in generator.generate_error_badge("REPO_NOT_FOUND")
    assert "no translations found" in generator.generate_error_badge("NO_I18N_FILES")
    assert "rate limited" in generator.generate_error_badge("RATE_LIMITED")
    assert ">error<" in generator.generate_error_badge("UNKNOWN_ERROR")


def test_logo_data() -> None:
    translate = logo_data("translate")
    github = logo_data("github")

    assert re.fullmatch(r"[A-Za-z0-9+/=]+", translate)
    assert translate != github
    assert logo_data("unknown") == translate
    assert base64.b64decode(github).startswith(b"<svg")
