"""Application entry point."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from policy_portal.core.config import configure_logging
from policy_portal.core.container import build_container
from policy_portal.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def run() -> None:
    """Launch the GUI application."""
    container = build_container()
    configure_logging(container.config.logging.level)
    removed = container.audit_repo.cleanup_old_logs(container.config.logging.retention_days)
    if removed:
        logger.info("Cleaned old audit logs: %d", removed)

    app = QApplication(sys.argv)
    window = MainWindow(
        container.controller,
        container.export_service,
        container.extraction_client,
        toast_seconds=container.config.ui.toast_seconds,
    )
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    run()
