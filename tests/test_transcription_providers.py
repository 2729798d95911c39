"""
Tests for the built-in transcription providers.

External tools are never launched: shutil.which and subprocess.run are mocked.
"""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from src.voicelog.core.transcription import (
    ExternalProcessError,
    OpenAIWhisperProvider,
    ProviderConfigError,
    ProviderUnavailableError,
    PythonScriptProvider,
    TranscriptionProvider,
    VoskProvider,
    WhisperCppProvider,
    create_default_providers,
)
from src.voicelog.core.transcription.providers import (
    OPENAI_API_KEY_ENV,
    OPENAI_MODEL_ENV,
)

WHICH = "src.voicelog.core.transcription.base.shutil.which"
RUN = "src.voicelog.core.transcription.base.subprocess.run"


def which_only(*names):
    return lambda cmd: f"/usr/bin/{cmd}" if cmd in names else None


def completed(cmd, returncode=0, output=b""):
    return subprocess.CompletedProcess(cmd, returncode, stdout=output)


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "memo.wav"
    path.write_bytes(b"RIFF....WAVE")
    return path


@pytest.fixture
def fake_exe(tmp_path):
    path = tmp_path / "bin" / "engine"
    path.parent.mkdir()
    path.write_text("")
    return path


class TestProviderContract:
    def test_default_providers_satisfy_protocol(self):
        providers = create_default_providers()
        assert all(isinstance(p, TranscriptionProvider) for p in providers)

    def test_default_provider_names_are_unique(self):
        names = [p.name for p in create_default_providers()]
        assert names == ["whisper.cpp", "vosk", "python_script", "openai_whisper"]
        assert len(set(names)) == len(names)

    @pytest.mark.parametrize(
        "provider_cls",
        [WhisperCppProvider, VoskProvider, PythonScriptProvider, OpenAIWhisperProvider],
    )
    def test_unknown_options_are_ignored(self, provider_cls):
        provider = provider_cls()
        provider.configure({"unknown_option": "value", "another": ""})

    @pytest.mark.parametrize(
        "provider_cls, key",
        [
            (WhisperCppProvider, "model_path"),
            (VoskProvider, "exec_path"),
            (PythonScriptProvider, "script_path"),
            (OpenAIWhisperProvider, "api_key"),
        ],
    )
    def test_non_string_option_rejected(self, provider_cls, key):
        with pytest.raises(ProviderConfigError):
            provider_cls().configure({key: 42})


class TestWhisperCppProvider:
    def test_default_language_is_english(self):
        assert WhisperCppProvider().language == "en"

    def test_configured_exec_path_must_exist(self, tmp_path):
        provider = WhisperCppProvider()
        provider.configure({"exec_path": str(tmp_path / "missing")})

        with patch(WHICH, return_value=None):
            assert provider.is_available() is False

    def test_configured_exec_path_used_when_present(self, fake_exe):
        provider = WhisperCppProvider()
        provider.configure({"exec_path": str(fake_exe)})

        with patch(WHICH, return_value=None) as mock_which:
            assert provider.is_available() is True
            mock_which.assert_not_called()

    def test_discovery_first_hit_wins_and_is_cached(self):
        provider = WhisperCppProvider()

        with patch(WHICH, side_effect=which_only("whisper", "/usr/bin/whisper")):
            assert provider.is_available() is True

        assert provider.exec_path == "whisper"

    def test_discovery_follows_candidate_order(self):
        provider = WhisperCppProvider()
        seen = []

        def fake_which(cmd):
            seen.append(cmd)
            return "/usr/bin/whisper" if cmd == "/usr/bin/whisper" else None

        with patch(WHICH, side_effect=fake_which):
            assert provider.is_available() is True

        assert seen == ["whisper", "./whisper", "/usr/local/bin/whisper", "/usr/bin/whisper"]
        assert provider.exec_path == "/usr/bin/whisper"

    def test_not_available_without_binary(self):
        with patch(WHICH, return_value=None):
            assert WhisperCppProvider().is_available() is False

    def test_empty_language_rejected(self):
        provider = WhisperCppProvider()
        with pytest.raises(ProviderConfigError):
            provider.configure({"language": "  "})
        assert provider.language == "en"

    def test_rejected_options_leave_state_untouched(self):
        provider = WhisperCppProvider()
        with pytest.raises(ProviderConfigError):
            provider.configure({"model_path": "/models/x.bin", "language": ""})
        assert provider.model_path is None

    def test_transcribe_builds_command_and_consumes_sidecar(self, audio_file, fake_exe):
        provider = WhisperCppProvider()
        provider.configure(
            {
                "exec_path": str(fake_exe),
                "model_path": "/models/x.bin",
                "language": "fr",
            }
        )
        sidecar = audio_file.with_suffix(".txt")

        def fake_run(cmd, **kwargs):
            sidecar.write_text("  Bonjour tout le monde.\n\n", encoding="utf-8")
            return completed(cmd, output=b"whisper_init: loading model\n")

        with patch(RUN, side_effect=fake_run) as mock_run:
            text = provider.transcribe(str(audio_file))

        assert text == "Bonjour tout le monde."
        assert not sidecar.exists()

        cmd = mock_run.call_args[0][0]
        assert cmd == [
            str(fake_exe),
            "-f",
            str(audio_file),
            "-m",
            "/models/x.bin",
            "-l",
            "fr",
            "-otxt",
        ]
        assert mock_run.call_args[1]["stderr"] == subprocess.STDOUT

    def test_transcribe_without_model_omits_model_flag(self, audio_file, fake_exe):
        provider = WhisperCppProvider()
        provider.configure({"exec_path": str(fake_exe)})

        def fake_run(cmd, **kwargs):
            audio_file.with_suffix(".txt").write_text("hello")
            return completed(cmd)

        with patch(RUN, side_effect=fake_run) as mock_run:
            provider.transcribe(str(audio_file))

        cmd = mock_run.call_args[0][0]
        assert "-m" not in cmd
        assert cmd[-3:] == ["-l", "en", "-otxt"]

    def test_non_zero_exit_carries_output(self, audio_file, fake_exe):
        provider = WhisperCppProvider()
        provider.configure({"exec_path": str(fake_exe)})

        with patch(RUN, return_value=completed([], 3, b"error: failed to load model")):
            with pytest.raises(ExternalProcessError) as exc_info:
                provider.transcribe(str(audio_file))

        assert exc_info.value.returncode == 3
        assert "failed to load model" in str(exc_info.value)
        assert exc_info.value.output == "error: failed to load model"

    def test_missing_sidecar_fails_with_output(self, audio_file, fake_exe):
        provider = WhisperCppProvider()
        provider.configure({"exec_path": str(fake_exe)})

        with patch(RUN, return_value=completed([], 0, b"nothing written")):
            with pytest.raises(ExternalProcessError) as exc_info:
                provider.transcribe(str(audio_file))

        assert "nothing written" in str(exc_info.value)

    def test_unavailable_fails_before_spawning(self, audio_file):
        with patch(WHICH, return_value=None), patch(RUN) as mock_run:
            with pytest.raises(ProviderUnavailableError):
                WhisperCppProvider().transcribe(str(audio_file))
        mock_run.assert_not_called()

    def test_launch_failure_is_external_process_error(self, audio_file, fake_exe):
        provider = WhisperCppProvider()
        provider.configure({"exec_path": str(fake_exe)})

        with patch(RUN, side_effect=PermissionError("Permission denied")):
            with pytest.raises(ExternalProcessError) as exc_info:
                provider.transcribe(str(audio_file))

        assert "Permission denied" in str(exc_info.value)


class TestVoskProvider:
    def test_discovery_uses_vosk_candidates(self):
        provider = VoskProvider()
        with patch(WHICH, side_effect=which_only("vosk")):
            assert provider.is_available() is True
        assert provider.exec_path == "vosk"

    def test_transcribe_model_flag_precedes_audio(self, audio_file, fake_exe):
        provider = VoskProvider()
        provider.configure({"exec_path": str(fake_exe), "model_path": "/models/vosk-en"})

        with patch(RUN, return_value=completed([], 0, b"  hello from vosk \n")) as mock_run:
            text = provider.transcribe(str(audio_file))

        assert text == "hello from vosk"
        assert mock_run.call_args[0][0] == [
            str(fake_exe),
            "-m",
            "/models/vosk-en",
            str(audio_file),
        ]

    def test_transcribe_without_model(self, audio_file, fake_exe):
        provider = VoskProvider()
        provider.configure({"exec_path": str(fake_exe)})

        with patch(RUN, return_value=completed([], 0, b"text")) as mock_run:
            provider.transcribe(str(audio_file))

        assert mock_run.call_args[0][0] == [str(fake_exe), str(audio_file)]

    def test_non_zero_exit_carries_output(self, audio_file, fake_exe):
        provider = VoskProvider()
        provider.configure({"exec_path": str(fake_exe)})

        with patch(RUN, return_value=completed([], 1, b"model not found")):
            with pytest.raises(ExternalProcessError) as exc_info:
                provider.transcribe(str(audio_file))

        assert "model not found" in str(exc_info.value)


class TestPythonScriptProvider:
    def test_missing_script_unavailable_even_with_interpreter(self, tmp_path):
        provider = PythonScriptProvider()
        provider.configure({"script_path": str(tmp_path / "nope.py")})

        with patch(WHICH, side_effect=which_only("python3")):
            assert provider.is_available() is False

    def test_unconfigured_is_unavailable(self):
        with patch(WHICH, side_effect=which_only("python3")):
            assert PythonScriptProvider().is_available() is False

    def test_requires_interpreter(self, tmp_path):
        script = tmp_path / "transcribe.py"
        script.write_text("print('hi')")
        provider = PythonScriptProvider()
        provider.configure({"script_path": str(script)})

        with patch(WHICH, return_value=None):
            assert provider.is_available() is False

    def test_transcribe_uses_first_available_interpreter(self, tmp_path, audio_file):
        script = tmp_path / "transcribe.py"
        script.write_text("print('hi')")
        provider = PythonScriptProvider()
        provider.configure({"script_path": str(script)})

        with patch(WHICH, side_effect=which_only("python", "py")), patch(
            RUN, return_value=completed([], 0, b"custom transcript\n")
        ) as mock_run:
            text = provider.transcribe(str(audio_file))

        assert text == "custom transcript"
        assert mock_run.call_args[0][0] == ["python", str(script), str(audio_file)]

    def test_script_failure_carries_output(self, tmp_path, audio_file):
        script = tmp_path / "transcribe.py"
        script.write_text("raise SystemExit(2)")
        provider = PythonScriptProvider()
        provider.configure({"script_path": str(script)})

        with patch(WHICH, side_effect=which_only("python3")), patch(
            RUN, return_value=completed([], 2, b"Traceback: boom")
        ):
            with pytest.raises(ExternalProcessError) as exc_info:
                provider.transcribe(str(audio_file))

        assert "Traceback: boom" in str(exc_info.value)
        assert exc_info.value.returncode == 2


class TestOpenAIWhisperProvider:
    def test_unavailable_without_key(self, monkeypatch, audio_file):
        monkeypatch.delenv(OPENAI_API_KEY_ENV, raising=False)
        provider = OpenAIWhisperProvider()

        with patch(WHICH, side_effect=which_only("python3")), patch(RUN) as mock_run:
            assert provider.is_available() is False
            with pytest.raises(ProviderUnavailableError):
                provider.transcribe(str(audio_file))

        mock_run.assert_not_called()

    def test_available_with_env_key(self, monkeypatch):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-env")
        with patch(WHICH, side_effect=which_only("python3")):
            assert OpenAIWhisperProvider().is_available() is True

    def test_available_with_configured_key(self, monkeypatch):
        monkeypatch.delenv(OPENAI_API_KEY_ENV, raising=False)
        provider = OpenAIWhisperProvider()
        provider.configure({"api_key": "sk-config"})
        with patch(WHICH, side_effect=which_only("py")):
            assert provider.is_available() is True

    def test_unavailable_without_interpreter(self, monkeypatch):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-env")
        with patch(WHICH, return_value=None):
            assert OpenAIWhisperProvider().is_available() is False

    def test_configured_python_path_preferred(self, monkeypatch, fake_exe):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-env")
        provider = OpenAIWhisperProvider()
        provider.configure({"python_path": str(fake_exe)})

        with patch(WHICH, return_value=None):
            assert provider.is_available() is True

    def test_empty_model_rejected(self):
        provider = OpenAIWhisperProvider()
        with pytest.raises(ProviderConfigError):
            provider.configure({"model": ""})
        assert provider.model == "whisper-1"

    def test_key_travels_through_environment_only(self, monkeypatch, audio_file):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-from-env")
        secret = "sk-'quoted\"secret"
        provider = OpenAIWhisperProvider()
        provider.configure({"api_key": secret, "model": "gpt-4o-transcribe"})
        seen = {}

        def fake_run(cmd, **kwargs):
            script = cmd[1]
            with open(script, encoding="utf-8") as f:
                seen["script_text"] = f.read()
            seen["cmd"] = cmd
            seen["env"] = kwargs["env"]
            return completed(cmd, 0, b"Hello from the cloud.\n")

        with patch(WHICH, side_effect=which_only("python3")), patch(
            RUN, side_effect=fake_run
        ):
            text = provider.transcribe(str(audio_file))

        assert text == "Hello from the cloud."
        assert seen["cmd"][0] == "python3"
        assert seen["cmd"][2] == str(audio_file)
        assert secret not in seen["script_text"]
        assert "from openai import OpenAI" in seen["script_text"]
        assert seen["env"][OPENAI_API_KEY_ENV] == secret
        assert seen["env"][OPENAI_MODEL_ENV] == "gpt-4o-transcribe"

    def test_env_key_passed_through_when_not_configured(self, monkeypatch, audio_file):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-from-env")
        seen = {}

        def fake_run(cmd, **kwargs):
            seen["env"] = kwargs["env"]
            return completed(cmd, 0, b"ok")

        with patch(WHICH, side_effect=which_only("python3")), patch(
            RUN, side_effect=fake_run
        ):
            OpenAIWhisperProvider().transcribe(str(audio_file))

        assert seen["env"][OPENAI_API_KEY_ENV] == "sk-from-env"

    def test_temp_script_removed_on_success(self, monkeypatch, audio_file):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-env")
        scripts = []

        def fake_run(cmd, **kwargs):
            scripts.append(cmd[1])
            return completed(cmd, 0, b"ok")

        with patch(WHICH, side_effect=which_only("python3")), patch(
            RUN, side_effect=fake_run
        ):
            OpenAIWhisperProvider().transcribe(str(audio_file))

        assert len(scripts) == 1
        assert not Path(scripts[0]).exists()

    def test_temp_script_removed_on_failure(self, monkeypatch, audio_file):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-env")
        scripts = []

        def fake_run(cmd, **kwargs):
            scripts.append(cmd[1])
            return completed(cmd, 1, b"Error: Incorrect API key provided")

        with patch(WHICH, side_effect=which_only("python3")), patch(
            RUN, side_effect=fake_run
        ):
            with pytest.raises(ExternalProcessError) as exc_info:
                OpenAIWhisperProvider().transcribe(str(audio_file))

        assert "Incorrect API key" in str(exc_info.value)
        assert not Path(scripts[0]).exists()

    def test_temp_script_removed_on_unexpected_error(self, monkeypatch, audio_file):
        monkeypatch.setenv(OPENAI_API_KEY_ENV, "sk-env")
        scripts = []

        def fake_run(cmd, **kwargs):
            scripts.append(cmd[1])
            raise KeyboardInterrupt

        with patch(WHICH, side_effect=which_only("python3")), patch(
            RUN, side_effect=fake_run
        ):
            with pytest.raises(KeyboardInterrupt):
                OpenAIWhisperProvider().transcribe(str(audio_file))

        assert not Path(scripts[0]).exists()
