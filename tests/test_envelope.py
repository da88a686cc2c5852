"""Tests for pbj envelope decoding."""

import json

import pytest

from tubepipe.core.errors import ParsingError
from tubepipe.extractors.envelope import (
    initial_data,
    parse_envelope,
    player_response_from_envelope,
    response_at,
    strip_jsonp,
)

# --- parse_envelope / response_at ---


def test_parse_envelope_requires_array():
    with pytest.raises(ParsingError) as exc:
        parse_envelope(json.dumps({"response": {}}))
    assert exc.value.kind == ParsingError.WRONG_TYPE


def test_response_at_index():
    envelope = parse_envelope(json.dumps([{}, {"response": {"a": 1}}]))
    assert response_at(envelope, 1) == {"a": 1}


def test_response_at_missing_index():
    with pytest.raises(ParsingError) as exc:
        response_at([{}], 1)
    assert exc.value.kind == ParsingError.MISSING


def test_response_at_missing_key():
    with pytest.raises(ParsingError):
        response_at([{}, {"other": {}}], 1)


# --- initial_data ---


def test_initial_data_normal_shape():
    envelope = [{}, {}, {"playerResponse": {}}, {"response": {"x": 1}}]
    assert initial_data(envelope) == ({"x": 1}, False)


def test_initial_data_restricted_shape():
    envelope = [{}, {}, {"response": {"x": 2}}]
    assert initial_data(envelope) == ({"x": 2}, True)


def test_initial_data_missing_index_three():
    with pytest.raises(ParsingError):
        initial_data([{}, {}, {"playerResponse": {}}])


def test_initial_data_short_envelope():
    with pytest.raises(ParsingError):
        initial_data([{}])


# --- player_response_from_envelope ---


def test_player_response_inlined():
    player = {"streamingData": {"formats": []}, "videoDetails": {}}
    envelope = [{}, {}, {"playerResponse": player}, {"response": {}}]
    assert player_response_from_envelope(envelope) == player


def test_player_response_without_streaming_data():
    envelope = [{}, {}, {"playerResponse": {"videoDetails": {}}}, {"response": {}}]
    assert player_response_from_envelope(envelope) is None


def test_player_response_absent():
    assert player_response_from_envelope([{}, {}, {}, {"response": {}}]) is None


# --- strip_jsonp ---


def test_strip_jsonp():
    assert strip_jsonp('jp(["q",[["a",0]]])') == '["q",[["a",0]]]'


def test_strip_jsonp_not_wrapped():
    with pytest.raises(ParsingError):
        strip_jsonp('["q"]')
