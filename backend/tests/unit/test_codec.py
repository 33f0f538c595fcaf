# backend/tests/unit/test_codec.py
"""Unit tests for the page content codec."""
import json

import pytest

from composer.domain.codec import (
    ESCAPED_COMMENT_CLOSE,
    decode_components,
    encode_components,
)
from composer.domain.components import ComponentItem
from composer.domain.invariants.exceptions import InvariantViolation


BANNER_HELLO = '\n<!-- component:banner-1000:0:{"content":{"title":"Hello"},"settings":{}} -->'


class TestEncode:
    def test_single_banner_matches_persisted_format(self):
        """A banner encodes to the exact tag existing pages use."""
        banner = ComponentItem(
            id="banner-1000",
            type="banner",
            content={"title": "Hello"},
            settings={},
            order=0,
        )

        assert encode_components([banner]) == BANNER_HELLO

    def test_empty_list_encodes_to_empty_string(self):
        assert encode_components([]) == ""

    def test_components_are_written_in_order(self, component_factory):
        """Encoding sorts by order, not by list position."""
        late = component_factory("text", 2, order=10)
        early = component_factory("banner", 1, order=0)

        encoded = encode_components([late, early])

        assert encoded.index("banner-1") < encoded.index("text-2")
        assert encoded.count("\n<!-- component:") == 2

    def test_non_ascii_text_is_kept_verbatim(self, component_factory):
        banner = component_factory(content={"title": "Livraison offerte dès 50€"})

        assert "dès 50€" in encode_components([banner])

    def test_comment_close_inside_payload_is_escaped(self, component_factory):
        """'-->' in user content must not terminate the comment."""
        html = component_factory("html", 5, content={"html": "<!-- note -->"})

        encoded = encode_components([html])

        assert encoded.count("-->") == 1
        assert ESCAPED_COMMENT_CLOSE in encoded
        assert decode_components(encoded)[0].content == {"html": "<!-- note -->"}

    def test_id_must_start_with_type(self):
        """The type is recovered from the id, so a mismatch cannot be encoded."""
        broken = ComponentItem(id="hero-1", type="banner")

        with pytest.raises(InvariantViolation):
            encode_components([broken])

    def test_id_with_colon_is_rejected(self):
        broken = ComponentItem(id="banner-1:2", type="banner")

        with pytest.raises(InvariantViolation):
            encode_components([broken])


class TestDecode:
    def test_decodes_the_banner_example(self):
        """Type is re-derived from the id prefix."""
        components = decode_components(BANNER_HELLO)

        assert components == [
            ComponentItem(
                id="banner-1000",
                type="banner",
                content={"title": "Hello"},
                settings={},
                order=0,
            )
        ]

    @pytest.mark.parametrize("text", ["", None, "<p>No components here</p>"])
    def test_no_tags_decode_to_empty_list(self, text):
        assert decode_components(text) == []

    def test_truncated_json_is_skipped(self):
        """One well-formed tag and one truncated tag yield only the good one."""
        text = BANNER_HELLO + '\n<!-- component:text-2000:10:{"content":{"title":"Bro -->'

        components = decode_components(text)

        assert [c.id for c in components] == ["banner-1000"]

    def test_non_object_payload_is_skipped(self):
        text = "\n<!-- component:text-1:0:[1,2,3] -->" + BANNER_HELLO

        assert [c.id for c in decode_components(text)] == ["banner-1000"]

    def test_non_object_content_is_skipped(self):
        text = '\n<!-- component:text-1:0:{"content":"plain","settings":{}} -->'

        assert decode_components(text) == []

    def test_missing_payload_keys_default_to_empty(self):
        text = "\n<!-- component:video-7:0:{} -->"

        [video] = decode_components(text)

        assert video.type == "video"
        assert video.content == {}
        assert video.settings == {}

    def test_tags_surrounded_by_other_text(self):
        """Foreign markup between tags does not affect decoding."""
        text = "<h1>Intro</h1>" + BANNER_HELLO + "\n<p>footer</p>"

        assert len(decode_components(text)) == 1

    def test_result_is_sorted_by_order(self):
        text = (
            '\n<!-- component:text-2:20:{"content":{},"settings":{}} -->'
            '\n<!-- component:image-3:5:{"content":{},"settings":{}} -->'
        )

        assert [c.id for c in decode_components(text)] == ["image-3", "text-2"]

    def test_unknown_type_passes_through(self):
        """Types outside the palette are preserved."""
        text = '\n<!-- component:countdown-9:0:{"content":{"until":"2030-01-01"},"settings":{"x":1}} -->'

        [component] = decode_components(text)

        assert component.type == "countdown"
        assert encode_components([component]) == text


class TestRoundTrip:
    def test_round_trip_preserves_components(self, three_components):
        decoded = decode_components(encode_components(three_components))

        assert decoded == three_components

    def test_round_trip_keeps_relative_order_with_gaps(self, component_factory):
        components = [
            component_factory("banner", 1, order=3),
            component_factory("text", 2, order=40),
            component_factory("image", 3, order=41),
        ]

        decoded = decode_components(encode_components(components))

        assert [c.id for c in decoded] == ["banner-1", "text-2", "image-3"]

    def test_nested_payload_survives(self, component_factory):
        slider = component_factory(
            "slider",
            4,
            content={"slides": [{"title": "A", "tags": ["x", None, 1.5]}]},
            settings={"autoplay": True, "interval": 5000},
        )

        [decoded] = decode_components(encode_components([slider]))

        assert decoded.payload() == json.loads(json.dumps(slider.payload()))
