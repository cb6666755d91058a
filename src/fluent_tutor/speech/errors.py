"""User-facing messages for browser speech recognition and synthesis errors."""

SPEECH_ERROR_MESSAGES: dict[str, str] = {
    "not-allowed": "Microphone permission was denied. Allow microphone access and try again.",
    "service-not-allowed": "Speech recognition is blocked in this browser.",
    "no-speech": "No speech was detected. Please try speaking again.",
    "audio-capture": "No microphone was found. Check that one is connected.",
    "network": "Speech recognition needs a network connection.",
    "aborted": "Listening was stopped.",
    "language-not-supported": "Speech recognition does not support this language.",
    "not-supported": "Speech recognition is not supported in this browser.",
    "synthesis-failed": "The reply could not be read aloud.",
}

UNKNOWN_SPEECH_ERROR = "Something went wrong with speech. You can keep typing instead."


def describe_speech_error(code: str | None) -> str:
    """Map a Web Speech API error code to a message for the learner."""
    if not code:
        return UNKNOWN_SPEECH_ERROR
    return SPEECH_ERROR_MESSAGES.get(code.strip().lower(), UNKNOWN_SPEECH_ERROR)
