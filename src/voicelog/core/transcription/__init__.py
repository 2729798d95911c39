from .base import (
    PYTHON_INTERPRETERS,
    TranscriptionProvider,
    TranscriptionResult,
    find_executable,
    find_interpreter,
)
from ..errors import (
    DisabledError,
    ExternalProcessError,
    NoDefaultProviderError,
    PersistenceError,
    ProviderConfigError,
    ProviderUnavailableError,
    TranscriptionError,
    UnknownProviderError,
)
from .manager import TranscriptionManager
from .providers import (
    OpenAIWhisperProvider,
    PythonScriptProvider,
    VoskProvider,
    WhisperCppProvider,
    create_default_providers,
)
from .setup_guide import get_setup_instructions, print_setup_instructions

__all__ = [
    "TranscriptionProvider",
    "TranscriptionResult",
    "TranscriptionManager",
    "WhisperCppProvider",
    "VoskProvider",
    "PythonScriptProvider",
    "OpenAIWhisperProvider",
    "create_default_providers",
    "find_executable",
    "find_interpreter",
    "PYTHON_INTERPRETERS",
    "get_setup_instructions",
    "print_setup_instructions",
    "TranscriptionError",
    "DisabledError",
    "NoDefaultProviderError",
    "UnknownProviderError",
    "ProviderUnavailableError",
    "ProviderConfigError",
    "ExternalProcessError",
    "PersistenceError",
]
