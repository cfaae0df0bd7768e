"""Unit tests for rendering.certificates.

Tests cover:
- Certificate name splitting into three slots
- Brand colour resolution
- Specialty domain rendered once when set, absent when not
- Fallback to the embedded template when the file template fails
- Escaping and determinism
"""

import pytest

from rendering.certificates import (
    DEFAULT_CERTIFICATE_NAME,
    SLOGAN,
    CertificateStyle,
    generate_certificate_svg,
    render_certificate,
    split_certificate_name,
)
from schemas import RenderConfig
from tests.factories import BadgeFactory

pytestmark = pytest.mark.unit


class TestSplitCertificateName:
    def test_pads_to_three_slots(self):
        assert split_certificate_name("Verified") == ["Verified", "", ""]

    def test_drops_words_beyond_three(self):
        assert split_certificate_name("One Two Three Four") == ["One", "Two", "Three"]

    def test_collapses_repeated_spaces(self):
        assert split_certificate_name("Self  Assessed") == ["Self", "Assessed", ""]

    def test_empty_name(self):
        assert split_certificate_name("") == ["", "", ""]


class TestCertificateStyle:
    def test_defaults_when_config_empty(self):
        assert CertificateStyle.from_config(RenderConfig()) == CertificateStyle()

    def test_overrides_only_given_colors(self):
        style = CertificateStyle.from_config(
            RenderConfig(background_color="#000000", border_color="")
        )
        assert style.background_color == "#000000"
        assert style.border_color == CertificateStyle().border_color


class TestRenderCertificate:
    def test_renders_name_words_and_slogan(self):
        badge = BadgeFactory.build(certificate_name="Self Assessed Dependencies")
        svg = render_certificate(badge, RenderConfig()).decode()

        assert svg.startswith("<svg")
        for word in ("Self", "Assessed", "Dependencies"):
            assert f">{word}</tspan>" in svg
        assert SLOGAN in svg

    def test_default_name_when_record_has_none(self):
        badge = BadgeFactory.build(certificate_name=None)
        svg = render_certificate(badge, RenderConfig()).decode()
        for word in DEFAULT_CERTIFICATE_NAME.split():
            assert f">{word}</tspan>" in svg

    def test_specialty_domain_appears_exactly_once(self):
        badge = BadgeFactory.build(specialty_domain="Software Licencing")
        svg = render_certificate(badge, RenderConfig()).decode()

        assert svg.count('id="specialty-domain"') == 1
        assert svg.count(">Software Licencing</text>") == 1

    def test_no_specialty_element_without_domain(self):
        badge = BadgeFactory.build(specialty_domain=None)
        svg = render_certificate(badge, RenderConfig()).decode()
        assert 'id="specialty-domain"' not in svg

    def test_brand_colors_are_applied(self):
        badge = BadgeFactory.build()
        svg = render_certificate(
            badge, RenderConfig(background_color="#0a0b0c", cert_name_color="#fefefe")
        ).decode()
        assert 'fill="#0a0b0c"' in svg
        assert 'fill="#fefefe"' in svg

    def test_escapes_record_text(self):
        badge = BadgeFactory.build(
            certificate_name="<b>Bold</b>", specialty_domain="R&D"
        )
        svg = render_certificate(badge, RenderConfig()).decode()
        assert "<b>" not in svg
        assert "R&amp;D" in svg

    def test_is_deterministic(self):
        badge = BadgeFactory.build()
        config = RenderConfig(gradient_start_color="#111111")
        assert render_certificate(badge, config) == render_certificate(badge, config)

    def test_has_no_xml_declaration(self):
        badge = BadgeFactory.build()
        assert not render_certificate(badge, RenderConfig()).startswith(b"<?xml")


class TestTemplateFallback:
    def test_missing_template_file_uses_embedded_template(self, tmp_path):
        badge = BadgeFactory.build(specialty_domain="Security")
        svg = generate_certificate_svg(
            badge, CertificateStyle(), template_path=tmp_path / "missing.svg.j2"
        )

        assert svg.startswith("<svg")
        assert svg.count('id="specialty-domain"') == 1

    def test_broken_template_file_uses_embedded_template(self, tmp_path):
        template = tmp_path / "broken.svg.j2"
        template.write_text("<svg>{% for x in %}</svg>", encoding="utf-8")
        badge = BadgeFactory.build()

        svg = generate_certificate_svg(
            badge, CertificateStyle(), template_path=template
        )

        assert SLOGAN in svg

    def test_custom_template_file_is_used(self, tmp_path):
        template = tmp_path / "custom.svg.j2"
        template.write_text(
            '<svg data-custom="yes">{{ record.software_name }}</svg>', encoding="utf-8"
        )
        badge = BadgeFactory.build(software_name="Catalogue")

        svg = generate_certificate_svg(
            badge, CertificateStyle(), template_path=template
        )

        assert svg == '<svg data-custom="yes">Catalogue</svg>'

    def test_template_is_read_on_every_render(self, tmp_path):
        template = tmp_path / "live.svg.j2"
        badge = BadgeFactory.build()

        template.write_text("<svg>first</svg>", encoding="utf-8")
        first = generate_certificate_svg(
            badge, CertificateStyle(), template_path=template
        )
        template.write_text("<svg>second</svg>", encoding="utf-8")
        second = generate_certificate_svg(
            badge, CertificateStyle(), template_path=template
        )

        assert first == "<svg>first</svg>"
        assert second == "<svg>second</svg>"
