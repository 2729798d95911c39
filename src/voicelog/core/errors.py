from typing import Optional


class TranscriptionError(Exception):
    """Base exception for every transcription failure."""


class DisabledError(TranscriptionError):
    """Raised when transcription is requested while the feature is switched off."""

    def __init__(self, message: str = "transcription is disabled"):
        super().__init__(message)


class NoDefaultProviderError(TranscriptionError):
    """Raised when no provider was named and no default is configured."""

    def __init__(self, message: str = "no default provider configured"):
        super().__init__(message)


class UnknownProviderError(TranscriptionError):
    """Raised when a provider name is not in the registry."""

    def __init__(self, name: str):
        super().__init__(f"provider not found: {name}")
        self.name = name


class ProviderUnavailableError(TranscriptionError):
    """Raised when a provider cannot run right now (missing binary, key, script)."""

    def __init__(self, name: str, reason: str = ""):
        message = f"provider not available: {name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.name = name


class ProviderConfigError(TranscriptionError):
    """Raised when a provider rejects a configuration option."""


class ExternalProcessError(TranscriptionError):
    """Raised when an external tool exits non-zero or its output cannot be read."""

    def __init__(
        self, message: str, output: str = "", returncode: Optional[int] = None
    ):
        if output:
            message = f"{message}\nOutput: {output}"
        super().__init__(message)
        self.output = output
        self.returncode = returncode


class PersistenceError(TranscriptionError):
    """Raised when the transcription config cannot be read, parsed or written."""
