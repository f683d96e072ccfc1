"""Background worker tasks used by the main GUI window."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QRunnable, Signal

from policy_portal.services.extraction_client import ExtractionError

if TYPE_CHECKING:
    from policy_portal.services.extraction_client import ExtractionClient


class ExtractSignals(QObject):
    """Signals for background extraction tasks."""

    done = Signal(object)
    error = Signal(str)


class ExtractPolicyTask(QRunnable):
    """Send a document image to the extraction proxy without blocking the UI thread."""

    def __init__(self, extraction_client: ExtractionClient, file_path: str):
        super().__init__()
        self.extraction_client = extraction_client
        self.file_path = file_path
        self.signals = ExtractSignals()

    def run(self) -> None:
        try:
            partial = self.extraction_client.extract_file(self.file_path)
            self.signals.done.emit(partial)
        except ExtractionError as error:
            self.signals.error.emit(str(error))
        except Exception as error:  # pylint: disable=broad-except
            # Worker boundary: convert any failure to a user-visible message.
            self.signals.error.emit(str(error) or "An unknown error occurred.")
