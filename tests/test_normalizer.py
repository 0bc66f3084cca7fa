import json

import pytest

from research_assistant.errors import EmptyOutput
from research_assistant.normalizer import EXTRACTORS, extract_text, parse_json_payload


def candidate_envelope(*texts):
    return {"candidates": [{"content": {"parts": [{"text": text} for text in texts]}}]}


def test_output_field_takes_precedence():
    envelope = {"output": "from output", "text": "from text", **candidate_envelope("from candidates")}
    assert extract_text(envelope) == "from output"


def test_text_field_used_when_output_missing():
    envelope = {"text": "  from text  ", **candidate_envelope("from candidates")}
    assert extract_text(envelope) == "from text"


def test_blank_output_falls_through_to_next_shape():
    envelope = {"output": "   ", "text": "", **candidate_envelope("from candidates")}
    assert extract_text(envelope) == "from candidates"


def test_candidate_parts_are_joined():
    assert extract_text(candidate_envelope("Part one. ", "Part two.")) == "Part one. Part two."


def test_shape_mismatch_does_not_raise_until_nothing_matches():
    envelope = {"output": 42, "text": ["not", "a", "string"], "candidates": [{"content": "oops"}]}
    with pytest.raises(EmptyOutput):
        extract_text(envelope)


@pytest.mark.parametrize("envelope", [{}, {"text": "   \n"}, {"candidates": []}, None, "raw string"])
def test_empty_envelopes_raise_empty_output(envelope):
    with pytest.raises(EmptyOutput):
        extract_text(envelope)


def test_custom_extractor_order():
    envelope = {"output": "from output", "text": "from text"}
    assert extract_text(envelope, extractors=list(reversed(EXTRACTORS))) == "from text"


def test_parse_json_payload_plain():
    assert parse_json_payload('[{"title": "A"}]') == [{"title": "A"}]


def test_parse_json_payload_strips_code_fence():
    fenced = '```json\n{"summary": "ok"}\n```'
    assert parse_json_payload(fenced) == {"summary": "ok"}


def test_parse_json_payload_rejects_prose():
    with pytest.raises(json.JSONDecodeError):
        parse_json_payload('Here is your result: {"summary": "ok"}')


@pytest.mark.parametrize("text", ["[Infinity]", '{"year": -Infinity}', "[NaN]"])
def test_parse_json_payload_rejects_non_finite_constants(text):
    with pytest.raises(ValueError):
        parse_json_payload(text)
