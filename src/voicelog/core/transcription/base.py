"""
Transcription provider contract.

Every speech-to-text engine is wrapped by an adapter satisfying
``TranscriptionProvider`` so the manager can swap engines without knowing
how each one is discovered or invoked. Adapters are independent classes;
they share only the helpers in this module.
"""

import shutil
import subprocess
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import (
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from ...utils.logger import get_logger
from ..errors import ExternalProcessError, ProviderConfigError

logger = get_logger(__name__)

PYTHON_INTERPRETERS = ("python3", "python", "py")


@runtime_checkable
class TranscriptionProvider(Protocol):
    """
    Capability contract for a transcription engine.

    Attributes:
        name: Stable identifier, used as the registry key.
    """

    name: str

    def is_available(self) -> bool:
        """Return True if ``transcribe`` can run now. Never raises."""
        ...

    def configure(self, options: Mapping[str, str]) -> None:
        """
        Apply recognized options and ignore unknown keys.

        Raises:
            ProviderConfigError: If a recognized option has an invalid value.
        """
        ...

    def transcribe(self, audio_path: str) -> str:
        """
        Transcribe the audio file and return its text.

        Raises:
            ProviderUnavailableError: If the engine cannot run.
            ExternalProcessError: If the engine fails.
        """
        ...


@dataclass
class TranscriptionResult:
    """
    Result of a single transcription.

    Attributes:
        text: The transcribed text
        provider: Name of the provider that produced it
        transcribed_at: RFC 3339 completion timestamp
        memo_id: Correlation id attached by the caller
        confidence: Optional confidence score, unset by all current providers
        language: Optional detected language, unset by all current providers
    """

    text: str
    provider: str
    transcribed_at: str
    memo_id: Optional[str] = None
    confidence: Optional[float] = None
    language: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("confidence", "language"):
            if data[key] is None:
                del data[key]
        return data


def rfc3339_now() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def find_executable(candidates: Iterable[str]) -> Optional[str]:
    """Return the first candidate resolvable on the search path."""
    for candidate in candidates:
        if shutil.which(candidate):
            return candidate
    return None


def find_interpreter() -> Optional[str]:
    return find_executable(PYTHON_INTERPRETERS)


def get_string_option(
    options: Mapping[str, str], key: str, provider_name: str
) -> Optional[str]:
    """Fetch ``key`` from ``options``, rejecting non-string values."""
    if key not in options:
        return None
    value = options[key]
    if not isinstance(value, str):
        raise ProviderConfigError(
            f"{provider_name}: option '{key}' must be a string, "
            f"got {type(value).__name__}"
        )
    return value


def run_command(
    args: Sequence[str],
    tool_name: str,
    env: Optional[Dict[str, str]] = None,
) -> str:
    """
    Run an external tool to completion and return its combined output.

    Raises:
        ExternalProcessError: If the tool cannot be launched or exits non-zero.
    """
    cmd: List[str] = [str(arg) for arg in args]
    logger.debug(f"Running {tool_name}: {cmd}")

    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            env=env,
            check=False,
        )
    except OSError as e:
        logger.error(f"Failed to launch {tool_name}: {e}")
        raise ExternalProcessError(f"{tool_name} failed to start: {e}") from e

    output = (result.stdout or b"").decode("utf-8", errors="replace")

    if result.returncode != 0:
        logger.error(f"{tool_name} exited with status {result.returncode}")
        raise ExternalProcessError(
            f"{tool_name} failed: exit status {result.returncode}",
            output=output,
            returncode=result.returncode,
        )

    return output
