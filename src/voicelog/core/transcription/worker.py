import time
from typing import Optional

from PySide6.QtCore import QThread, Signal

from ...utils.logger import get_logger
from ..errors import TranscriptionError
from .manager import TranscriptionManager

logger = get_logger(__name__)


class TranscriptionWorkerThread(QThread):
    """
    Background thread for a single transcription.

    The external engine blocks until it exits, so the UI hands the request
    to this thread instead of calling the manager directly. There is no
    cancellation: once started, the child process runs to completion.

    Signals:
        finished: Emitted with the TranscriptionResult on success
        error: Emitted with the error message on failure
    """

    finished = Signal(object)
    error = Signal(str)

    def __init__(
        self,
        manager: TranscriptionManager,
        audio_path: str,
        provider_name: str = "",
        memo_id: Optional[str] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._manager = manager
        self._audio_path = audio_path
        self._provider_name = provider_name
        self._memo_id = memo_id

    def run(self):
        start_time = time.time()
        logger.info(f"Background transcription started: {self._audio_path}")

        try:
            result = self._manager.transcribe(self._audio_path, self._provider_name)
        except TranscriptionError as e:
            logger.error(f"Background transcription failed: {e}")
            self.error.emit(str(e))
            return
        except Exception as e:
            logger.exception(f"Unexpected error during background transcription: {e}")
            self.error.emit(str(e))
            return

        result.memo_id = self._memo_id

        duration = time.time() - start_time
        logger.info(
            f"Transcription completed in {duration:.2f}s: "
            f"'{result.text[:50]}{'...' if len(result.text) > 50 else ''}'"
        )
        self.finished.emit(result)
