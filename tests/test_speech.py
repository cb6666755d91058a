"""Tests for speech error descriptions."""

import pytest

from fluent_tutor.speech.errors import (
    SPEECH_ERROR_MESSAGES,
    UNKNOWN_SPEECH_ERROR,
    describe_speech_error,
)


@pytest.mark.parametrize("code", ["not-allowed", "no-speech", "network"])
def test_known_codes(code):
    assert describe_speech_error(code) == SPEECH_ERROR_MESSAGES[code]


def test_code_normalized():
    assert describe_speech_error(" No-Speech ") == SPEECH_ERROR_MESSAGES["no-speech"]


@pytest.mark.parametrize("code", [None, "", "bad-grammar"])
def test_unknown_codes(code):
    assert describe_speech_error(code) == UNKNOWN_SPEECH_ERROR
