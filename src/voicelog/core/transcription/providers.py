"""
Built-in transcription providers.

Each provider shells out to an external engine:
- whisper.cpp: local binary writing a text sidecar file
- Vosk: lightweight offline binary printing to stdout
- Python script: user-supplied script printing to stdout
- OpenAI Whisper API: generated helper script calling the cloud endpoint
"""

import os
import tempfile
from pathlib import Path
from typing import List, Mapping, Optional

from ...utils.logger import get_logger
from .base import (
    TranscriptionProvider,
    find_executable,
    find_interpreter,
    get_string_option,
    run_command,
)
from ..errors import ExternalProcessError, ProviderConfigError, ProviderUnavailableError

logger = get_logger(__name__)


class WhisperCppProvider:
    name = "whisper.cpp"

    COMMON_PATHS = (
        "whisper",
        "./whisper",
        "/usr/local/bin/whisper",
        "/usr/bin/whisper",
        "whisper.exe",  # Windows
        "./whisper.exe",
    )

    def __init__(self):
        self._exec_path: Optional[str] = None
        self._model_path: Optional[str] = None
        self._language = "en"

    @property
    def exec_path(self) -> Optional[str]:
        return self._exec_path

    @property
    def model_path(self) -> Optional[str]:
        return self._model_path

    @property
    def language(self) -> str:
        return self._language

    def is_available(self) -> bool:
        if self._exec_path and os.path.exists(self._exec_path):
            return True

        found = find_executable(self.COMMON_PATHS)
        if found:
            self._exec_path = found
            return True
        return False

    def configure(self, options: Mapping[str, str]) -> None:
        exec_path = get_string_option(options, "exec_path", self.name)
        model_path = get_string_option(options, "model_path", self.name)
        language = get_string_option(options, "language", self.name)

        if language is not None and not language.strip():
            raise ProviderConfigError(f"{self.name}: language must not be empty")

        if exec_path is not None:
            self._exec_path = exec_path or None
        if model_path is not None:
            self._model_path = model_path or None
        if language is not None:
            self._language = language.strip()

    def build_command(self, audio_path: str) -> List[str]:
        args = [self._exec_path, "-f", audio_path]
        if self._model_path:
            args += ["-m", self._model_path]
        args += ["-l", self._language]
        args.append("-otxt")
        return args

    @staticmethod
    def sidecar_path(audio_path: str) -> Path:
        return Path(audio_path).with_suffix(".txt")

    def transcribe(self, audio_path: str) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(self.name, "whisper.cpp not found in PATH")

        output = run_command(self.build_command(audio_path), self.name)

        txt_file = self.sidecar_path(audio_path)
        try:
            text = txt_file.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"whisper.cpp produced no transcript at {txt_file}: {e}")
            raise ExternalProcessError(
                f"failed to read transcription {txt_file}: {e}", output=output
            ) from e

        txt_file.unlink(missing_ok=True)
        return text.strip()


class VoskProvider:
    name = "vosk"

    COMMON_PATHS = (
        "vosk-transcriber",
        "vosk",
        "./vosk-transcriber",
        "vosk-transcriber.exe",  # Windows
    )

    def __init__(self):
        self._exec_path: Optional[str] = None
        self._model_path: Optional[str] = None

    @property
    def exec_path(self) -> Optional[str]:
        return self._exec_path

    @property
    def model_path(self) -> Optional[str]:
        return self._model_path

    def is_available(self) -> bool:
        if self._exec_path and os.path.exists(self._exec_path):
            return True

        found = find_executable(self.COMMON_PATHS)
        if found:
            self._exec_path = found
            return True
        return False

    def configure(self, options: Mapping[str, str]) -> None:
        exec_path = get_string_option(options, "exec_path", self.name)
        model_path = get_string_option(options, "model_path", self.name)

        if exec_path is not None:
            self._exec_path = exec_path or None
        if model_path is not None:
            self._model_path = model_path or None

    def build_command(self, audio_path: str) -> List[str]:
        args = [self._exec_path]
        if self._model_path:
            args += ["-m", self._model_path]
        args.append(audio_path)
        return args

    def transcribe(self, audio_path: str) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(self.name, "vosk not found")

        output = run_command(self.build_command(audio_path), self.name)
        return output.strip()


class PythonScriptProvider:
    """Runs a user script as ``<python> <script> <audio>`` and reads stdout."""

    name = "python_script"

    def __init__(self):
        self._script_path: Optional[str] = None

    @property
    def script_path(self) -> Optional[str]:
        return self._script_path

    def is_available(self) -> bool:
        if not self._script_path or not os.path.exists(self._script_path):
            return False
        return find_interpreter() is not None

    def configure(self, options: Mapping[str, str]) -> None:
        script_path = get_string_option(options, "script_path", self.name)
        if script_path is not None:
            self._script_path = script_path or None

    def transcribe(self, audio_path: str) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(
                self.name, "python script not configured or python not found"
            )

        interpreter = find_interpreter()
        if interpreter is None:
            raise ProviderUnavailableError(self.name, "no python interpreter found")

        output = run_command(
            [interpreter, self._script_path, audio_path], "python script"
        )
        return output.strip()


OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
OPENAI_MODEL_ENV = "VOICELOG_OPENAI_MODEL"

# Fixed source; the key and model reach the child through its environment only.
OPENAI_HELPER_SCRIPT = f"""\
import os
import sys

from openai import OpenAI


def main():
    api_key = os.environ.get("{OPENAI_API_KEY_ENV}")
    if not api_key:
        print("Error: {OPENAI_API_KEY_ENV} is not set", file=sys.stderr)
        return 1

    client = OpenAI(api_key=api_key)
    try:
        with open(sys.argv[1], "rb") as audio_file:
            transcript = client.audio.transcriptions.create(
                model=os.environ.get("{OPENAI_MODEL_ENV}", "whisper-1"),
                file=audio_file,
            )
    except Exception as e:
        print(f"Error: {{e}}", file=sys.stderr)
        return 1

    print(transcript.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
"""


class OpenAIWhisperProvider:
    name = "openai_whisper"

    DEFAULT_MODEL = "whisper-1"

    def __init__(self):
        self._api_key: Optional[str] = None
        self._python_path: Optional[str] = None
        self._model = self.DEFAULT_MODEL

    @property
    def model(self) -> str:
        return self._model

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key or os.environ.get(OPENAI_API_KEY_ENV))

    def _resolve_interpreter(self) -> Optional[str]:
        if self._python_path and os.path.exists(self._python_path):
            return self._python_path
        return find_interpreter()

    def is_available(self) -> bool:
        if not self.has_api_key:
            return False
        return self._resolve_interpreter() is not None

    def configure(self, options: Mapping[str, str]) -> None:
        api_key = get_string_option(options, "api_key", self.name)
        python_path = get_string_option(options, "python_path", self.name)
        model = get_string_option(options, "model", self.name)

        if model is not None and not model.strip():
            raise ProviderConfigError(f"{self.name}: model must not be empty")

        if api_key is not None:
            self._api_key = api_key.strip() or None
        if python_path is not None:
            self._python_path = python_path or None
        if model is not None:
            self._model = model.strip()

    def build_env(self) -> dict:
        env = dict(os.environ)
        if self._api_key:
            env[OPENAI_API_KEY_ENV] = self._api_key
        env[OPENAI_MODEL_ENV] = self._model
        return env

    def transcribe(self, audio_path: str) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(
                self.name, "OpenAI Whisper API not configured"
            )

        interpreter = self._resolve_interpreter()

        try:
            fd, path = tempfile.mkstemp(suffix=".py", prefix="voicelog_openai_")
        except OSError as e:
            raise ExternalProcessError(f"failed to create temp script: {e}") from e

        script_path = Path(path)
        try:
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(OPENAI_HELPER_SCRIPT)
            except OSError as e:
                raise ExternalProcessError(f"failed to write temp script: {e}") from e

            output = run_command(
                [interpreter, str(script_path), audio_path],
                "OpenAI Whisper API",
                env=self.build_env(),
            )
        finally:
            script_path.unlink(missing_ok=True)

        return output.strip()


def create_default_providers() -> List[TranscriptionProvider]:
    return [
        WhisperCppProvider(),
        VoskProvider(),
        PythonScriptProvider(),
        OpenAIWhisperProvider(),
    ]
