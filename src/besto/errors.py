"""Exception types for Besto."""


class BestoError(Exception):
    """Base class for Besto errors."""


class StorageError(BestoError):
    """A storage slot could not be written."""


class SpeechUnavailableError(BestoError):
    """Speech capture is not supported on this machine."""


class LLMError(BestoError):
    """The hosted chat-completion API failed."""


class LLMConfigError(LLMError):
    """The chat-completion client is missing configuration (API key)."""


class ClassificationFailed(BestoError):
    """Intent classification could not reach the LLM."""
