from .config import APP_NAME, get_config_dir, get_data_dir
from .settings import TranscriptionConfig, get_transcription_config_file

__all__ = [
    "APP_NAME",
    "TranscriptionConfig",
    "get_config_dir",
    "get_data_dir",
    "get_transcription_config_file",
]
