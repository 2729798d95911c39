"""
Transcription settings with JSON persistence.

Handles loading, saving, and validating the transcription configuration.
Uses platformdirs for cross-platform directory resolution.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...utils.logger import get_logger
from ..errors import PersistenceError
from .config import TRANSCRIPTION_CONFIG_FILENAME

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


def get_transcription_config_file(config_dir: PathLike) -> Path:
    return Path(config_dir) / TRANSCRIPTION_CONFIG_FILENAME


class TranscriptionConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=False)

    enabled: bool = False
    default_provider: str = ""
    auto_transcribe: bool = False
    provider_configs: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    def get_provider_options(self, provider_name: str) -> Dict[str, str]:
        return dict(self.provider_configs.get(provider_name, {}))

    @classmethod
    def load(cls, config_dir: PathLike) -> "TranscriptionConfig":
        """
        Load the config stored in ``config_dir``.

        A missing file yields defaults. A file that is not valid JSON or does
        not match the schema raises PersistenceError instead of being dropped.
        """
        config_file = get_transcription_config_file(config_dir)

        if not config_file.exists():
            logger.debug(f"No transcription config at {config_file}, using defaults")
            return cls()

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                f"Corrupt transcription config {config_file}: {e}"
            ) from e
        except OSError as e:
            raise PersistenceError(
                f"Failed to read transcription config {config_file}: {e}"
            ) from e

        if data is None:
            return cls()

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(
                f"Invalid transcription config {config_file}: {e}"
            ) from e

        logger.debug(f"Loaded transcription config from {config_file}")
        return config

    def save(self, config_dir: PathLike) -> None:
        """Write the config to ``config_dir``, replacing the file atomically."""
        config_file = get_transcription_config_file(config_dir)
        payload = json.dumps(self.model_dump(), indent=2)

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f"{config_file.name}.", suffix=".tmp", dir=config_file.parent
            )
            tmp_path = Path(tmp_name)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, config_file)
            finally:
                tmp_path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(
                f"Failed to write transcription config {config_file}: {e}"
            ) from e

        logger.debug(f"Saved transcription config to {config_file}")
