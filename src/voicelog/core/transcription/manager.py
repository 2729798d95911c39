"""
Transcription manager.

Owns the provider registry and the persisted TranscriptionConfig. Selects a
provider for each request, gates it on the enabled flag and availability,
and writes every config change straight back to disk.
"""

import copy
import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Set, Union

from ...utils.logger import get_logger
from ..settings.settings import TranscriptionConfig, get_transcription_config_file
from .base import TranscriptionProvider, TranscriptionResult, rfc3339_now
from ..errors import (
    DisabledError,
    NoDefaultProviderError,
    ProviderConfigError,
    ProviderUnavailableError,
    UnknownProviderError,
)
from .providers import create_default_providers

logger = get_logger(__name__)


class TranscriptionManager:
    """
    Registry of transcription providers plus their persisted configuration.

    Not thread-safe: a single owner must serialize calls that mutate config.
    Long transcriptions should run through TranscriptionWorkerThread.

    Example:
        manager = TranscriptionManager(get_config_dir())
        manager.set_enabled(True)
        manager.set_default_provider("whisper.cpp")
        result = manager.transcribe("/path/to/memo.wav")
    """

    def __init__(
        self,
        config_dir: Union[str, os.PathLike],
        providers: Optional[Iterable[TranscriptionProvider]] = None,
    ):
        """
        Build the registry and load saved configuration.

        Args:
            config_dir: Directory holding the transcription config file
            providers: Providers to register; the four built-in ones if omitted

        Raises:
            PersistenceError: If the saved config exists but cannot be parsed.
        """
        self._config_dir = Path(config_dir)
        self._providers: Dict[str, TranscriptionProvider] = {}
        self._config = TranscriptionConfig()

        for provider in (
            providers if providers is not None else create_default_providers()
        ):
            self.register_provider(provider)

        self._config = TranscriptionConfig.load(self._config_dir)
        self._apply_saved_provider_configs()

    def _apply_saved_provider_configs(self) -> None:
        for name, options in self._config.provider_configs.items():
            provider = self._providers.get(name)
            if provider is None:
                logger.debug(f"Saved config for unregistered provider '{name}' kept")
                continue
            try:
                provider.configure(options)
            except ProviderConfigError as e:
                logger.warning(f"Ignoring saved config for '{name}': {e}")

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def config_file(self) -> Path:
        return get_transcription_config_file(self._config_dir)

    def register_provider(self, provider: TranscriptionProvider) -> None:
        if provider.name in self._providers:
            logger.info(f"Replacing transcription provider '{provider.name}'")
        self._providers[provider.name] = provider

    def get_provider(self, name: str) -> TranscriptionProvider:
        provider = self._providers.get(name)
        if provider is None:
            raise UnknownProviderError(name)
        return provider

    def available_providers(self) -> Set[str]:
        return {
            name
            for name, provider in self._providers.items()
            if provider.is_available()
        }

    def all_providers(self) -> Set[str]:
        return set(self._providers)

    def is_provider_available(self, name: str) -> bool:
        provider = self._providers.get(name)
        if provider is None:
            return False
        return provider.is_available()

    def transcribe(
        self, audio_path: Union[str, os.PathLike], provider_name: str = ""
    ) -> TranscriptionResult:
        """
        Transcribe an audio file with the named or default provider.

        Args:
            audio_path: Path to a completed audio recording
            provider_name: Provider to use; the configured default if empty

        Returns:
            TranscriptionResult with text, provider name and timestamp.

        Raises:
            DisabledError: If transcription is switched off.
            NoDefaultProviderError: If no provider was named or configured.
            UnknownProviderError: If the provider is not registered.
            ProviderUnavailableError: If the provider cannot run right now.
            TranscriptionError: Anything the provider itself raises.
        """
        if not self._config.enabled:
            raise DisabledError()

        if not provider_name:
            provider_name = self._config.default_provider
        if not provider_name:
            raise NoDefaultProviderError()

        provider = self.get_provider(provider_name)

        if not provider.is_available():
            logger.warning(f"Provider '{provider_name}' is not available")
            raise ProviderUnavailableError(provider_name)

        logger.info(f"Transcribing {audio_path} with '{provider_name}'")
        text = provider.transcribe(str(audio_path))
        logger.info(f"Transcription complete: {len(text)} chars via '{provider_name}'")

        return TranscriptionResult(
            text=text,
            provider=provider_name,
            transcribed_at=rfc3339_now(),
        )

    def _commit(self, config: TranscriptionConfig) -> None:
        config.save(self._config_dir)
        self._config = config

    def configure_provider(self, name: str, options: Mapping[str, str]) -> None:
        """
        Apply options to a provider and persist them.

        Options are tried on a copy of the provider first, so a rejected
        option or a failed write leaves the provider, the in-memory config
        and the file as they were.

        Raises:
            UnknownProviderError: If the provider is not registered.
            ProviderConfigError: If an option is not a string pair or the
                provider rejects it.
            PersistenceError: If the config cannot be written.
        """
        provider = self.get_provider(name)

        for key, value in options.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ProviderConfigError(
                    f"{name}: option {key!r}={value!r} must map a string to a string"
                )
        options = dict(options)

        copy.deepcopy(provider).configure(options)

        config = self._config.model_copy(deep=True)
        merged = config.get_provider_options(name)
        merged.update(options)
        config.provider_configs[name] = merged
        self._commit(config)

        provider.configure(options)
        logger.info(f"Updated config for provider '{name}': {sorted(options)}")

    def set_enabled(self, enabled: bool) -> None:
        self._commit(self._config.model_copy(update={"enabled": bool(enabled)}))
        logger.info(f"Transcription {'enabled' if enabled else 'disabled'}")

    def set_default_provider(self, name: str) -> None:
        if name not in self._providers:
            raise UnknownProviderError(name)
        self._commit(self._config.model_copy(update={"default_provider": name}))
        logger.info(f"Default transcription provider set to '{name}'")

    def set_auto_transcribe(self, auto: bool) -> None:
        self._commit(self._config.model_copy(update={"auto_transcribe": bool(auto)}))

    def get_config(self) -> TranscriptionConfig:
        return self._config.model_copy(deep=True)
