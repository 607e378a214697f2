"""Tests for SSML document construction and validation."""
from __future__ import annotations

import pytest

from tts_gateway.services.errors import MarkupValidationError
from tts_gateway.ssml import (
    SSML,
    BreakNode,
    EmphasisLevel,
    ExpressAsNode,
    SSMLBuilder,
    TextNode,
    build_utterance,
    from_string,
    is_speech_document,
    validate_speech_document,
)

SPEAK_OPEN = (
    '<speak xmlns="http://www.w3.org/2001/10/synthesis" '
    'xmlns:mstts="http://www.w3.org/2001/mstts" '
    'xmlns:emo="http://www.w3.org/2009/10/emotionml" '
    'version="1.0" xml:lang="{lang}">'
)


class TestBuildUtterance:
    """Test the direct single-utterance builder."""

    def test_prosody_document(self):
        """Exact framing and volume, rate, pitch attribute order."""
        doc = build_utterance("Hi", "v1", volume=80, rate=-10, pitch=5)
        assert doc == (
            SPEAK_OPEN.format(lang="en-US")
            + '<voice name="v1"><prosody volume="80%" rate="-10%" pitch="5%">Hi</prosody></voice></speak>'
        )

    def test_defaults(self):
        doc = build_utterance("Hi", "v1")
        assert '<prosody volume="100%" rate="0%" pitch="0%">' in doc

    def test_float_percent(self):
        """Whole floats drop the fraction; others keep it."""
        doc = build_utterance("Hi", "v1", rate=10.0, pitch=2.5)
        assert 'rate="10%"' in doc
        assert 'pitch="2.5%"' in doc

    def test_express_as_wraps_prosody(self):
        doc = build_utterance("Hi", "v1", style="cheerful", style_degree=1.5, role="Girl")
        assert (
            '<voice name="v1"><mstts:express-as style="cheerful" styledegree="1.5" role="Girl">'
            '<prosody volume="100%" rate="0%" pitch="0%">Hi</prosody>'
            "</mstts:express-as></voice>"
        ) in doc

    def test_express_as_without_degree(self):
        doc = build_utterance("Hi", "v1", style="sad")
        assert '<mstts:express-as style="sad">' in doc
        assert "styledegree" not in doc

    def test_empty_style_means_no_wrapper(self):
        assert "express-as" not in build_utterance("Hi", "v1", style="")

    def test_text_is_escaped(self):
        doc = build_utterance('Tom & "Jerry" <3', "v1")
        assert '>Tom &amp; "Jerry" &lt;3</prosody>' in doc

    def test_voice_attribute_is_escaped(self):
        doc = build_utterance("Hi", 'v"1')
        assert '<voice name="v&quot;1">' in doc

    def test_ssml_object(self):
        """SSML renders the same document as build_utterance."""
        assert str(SSML("Hi", "v1", rate=10)) == build_utterance("Hi", "v1", rate=10)
        assert SSML("Hi", "v1").to_string() == build_utterance("Hi", "v1")


class TestSSMLBuilder:
    """Test the fluent builder."""

    def test_empty_document(self):
        doc = SSMLBuilder("v1", "de-DE").build()
        assert doc == SPEAK_OPEN.format(lang="de-DE") + '<voice name="v1"></voice></speak>'

    def test_default_voice_and_language(self):
        doc = SSMLBuilder().build()
        assert 'xml:lang="en-US"' in doc
        assert '<voice name="zh-CN-XiaoxiaoNeural">' in doc

    def test_nodes_in_insertion_order(self):
        doc = (
            SSMLBuilder("v1")
            .text("Hello")
            .break_("500ms")
            .prosody("slow", rate=-20)
            .emphasis("now", "strong")
            .build()
        )
        assert (
            '<voice name="v1">Hello<break time="500ms"/><prosody rate="-20%">slow</prosody>'
            '<emphasis level="strong">now</emphasis></voice>'
        ) in doc

    def test_prosody_attribute_order(self):
        """Fluent prosody writes rate, pitch, volume and omits unset ones."""
        doc = SSMLBuilder("v1").prosody("x", volume=50, pitch="+2st", rate="x-slow").build()
        assert '<prosody rate="x-slow" pitch="+2st" volume="50%">x</prosody>' in doc

    def test_express_as(self):
        doc = SSMLBuilder("v1").express_as("Yay", "cheerful", style_degree=2).build()
        assert '<mstts:express-as style="cheerful" styledegree="2">Yay</mstts:express-as>' in doc

    def test_express_as_requires_style(self):
        with pytest.raises(MarkupValidationError):
            SSMLBuilder("v1").express_as("Yay", "")

    def test_phoneme_and_say_as(self):
        doc = (
            SSMLBuilder("v1")
            .phoneme("tomato", "təˈmeɪtoʊ")
            .say_as("2026-01-15", "date", format="ymd")
            .build()
        )
        assert '<phoneme alphabet="ipa" ph="təˈmeɪtoʊ">tomato</phoneme>' in doc
        assert '<say-as interpret-as="date" format="ymd">2026-01-15</say-as>' in doc

    def test_pause_alias(self):
        assert SSMLBuilder("v1").pause("1s").nodes == [BreakNode("1s")]

    def test_nodes_snapshot(self):
        builder = SSMLBuilder("v1").text("a")
        snapshot = builder.nodes
        builder.text("b")
        assert snapshot == [TextNode("a")]

    @pytest.mark.parametrize("call", [
        lambda b: b.emphasis("x", "loud"),
        lambda b: b.phoneme("x", "y", alphabet="x-sampa"),
        lambda b: b.say_as("x", "currency"),
    ])
    def test_invalid_enum_values(self, call):
        """Values outside the closed sets are markup errors."""
        with pytest.raises(MarkupValidationError):
            call(SSMLBuilder("v1"))

    def test_enum_values_accepted(self):
        doc = SSMLBuilder("v1").emphasis("x", EmphasisLevel.REDUCED).build()
        assert '<emphasis level="reduced">x</emphasis>' in doc

    def test_text_escaped(self):
        assert "a &lt; b" in SSMLBuilder("v1").text("a < b").build()

    def test_nested_express_as_node(self):
        node = ExpressAsNode(content=TextNode("<hi>"), style="calm")
        assert node.to_xml() == '<mstts:express-as style="calm">&lt;hi&gt;</mstts:express-as>'


class TestSpeechDocument:
    """Test structural validation of caller-supplied SSML."""

    @pytest.mark.parametrize("doc", [
        "<speak>hi</speak>",
        '  <speak version="1.0">hi</speak>\n',
        "<speak/></speak>",
    ])
    def test_accepted(self, doc):
        assert is_speech_document(doc)

    @pytest.mark.parametrize("doc", [
        None,
        "",
        "hello",
        "<voice>hi</voice>",
        "<speak>hi",
        "hi</speak>",
        "<?xml version='1.0'?><speak>hi</speak>",
    ])
    def test_rejected(self, doc):
        assert not is_speech_document(doc)

    def test_from_string(self):
        assert from_string("<speak>x</speak>") == "<speak>x</speak>"
        assert SSML.is_ssml("<speak>x</speak>")
        with pytest.raises(MarkupValidationError) as exc_info:
            SSML.from_string("nope")
        assert exc_info.value.message == "Invalid SSML format. Must start with <speak> and end with </speak>"

    def test_length_ceiling(self):
        doc = "<speak>" + "a" * 100 + "</speak>"
        assert validate_speech_document(doc, max_length=len(doc)) == doc
        with pytest.raises(MarkupValidationError) as exc_info:
            validate_speech_document(doc, max_length=50)
        assert exc_info.value.message == "SSML too long (max 50 characters)"

    def test_structure_checked_before_length(self):
        with pytest.raises(MarkupValidationError, match="Invalid SSML format"):
            validate_speech_document("x" * 100, max_length=10)
