"""Export policies to CSV, XLSX and PDF files."""

from __future__ import annotations

import csv
import html
import io
import logging
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from PySide6.QtCore import QBuffer, QIODevice, QMarginsF
from PySide6.QtGui import QGuiApplication, QPageLayout, QPageSize, QPdfWriter, QTextDocument

from policy_portal.models.policy import PolicyRecord

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "xlsx", "pdf")
SHEET_TITLE = "Policies"
PDF_HEADER_FILL = "#16a085"


def export_headers(records: list[PolicyRecord]) -> list[str]:
    """Header row is the field names of the first record."""
    if not records:
        return []
    return list(records[0].to_dict())


def export_rows(records: list[PolicyRecord]) -> list[list[Any]]:
    return [list(record.to_dict().values()) for record in records]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class ExportService:
    """Serializes records exactly as given: no filtering, sorting or validation."""

    def to_csv(self, records: list[PolicyRecord]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(export_headers(records))
        for row in export_rows(records):
            writer.writerow([_text(value) for value in row])
        return buffer.getvalue().encode("utf-8")

    def to_xlsx(self, records: list[PolicyRecord]) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_TITLE
        sheet.append(export_headers(records))
        for row in export_rows(records):
            sheet.append(row)

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def to_pdf(self, records: list[PolicyRecord]) -> bytes:
        """Render a landscape A4 table; requires a Qt GUI application instance."""
        if QGuiApplication.instance() is None:
            raise RuntimeError("PDF export needs a running Qt application.")

        document = QTextDocument()
        document.setHtml(self._pdf_html(records))

        buffer = QBuffer()
        buffer.open(QIODevice.OpenModeFlag.WriteOnly)
        writer = QPdfWriter(buffer)
        writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
        writer.setPageOrientation(QPageLayout.Orientation.Landscape)
        writer.setPageMargins(QMarginsF(14, 20, 14, 14), QPageLayout.Unit.Point)
        document.print_(writer)
        buffer.close()
        return bytes(buffer.data())

    def render(self, records: list[PolicyRecord], fmt: str) -> bytes:
        if fmt == "csv":
            return self.to_csv(records)
        if fmt == "xlsx":
            return self.to_xlsx(records)
        if fmt == "pdf":
            return self.to_pdf(records)
        raise ValueError(f"Unsupported export format: {fmt}")

    def export_to_file(self, records: list[PolicyRecord], path: str | Path, fmt: str) -> Path:
        """Render ``records`` and write them to ``path``."""
        target = Path(path)
        payload = self.render(records, fmt)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)
        logger.info("Exported %d policies to %s", len(records), target)
        return target

    @staticmethod
    def _pdf_html(records: list[PolicyRecord]) -> str:
        header_cells = "".join(
            f'<th style="background-color:{PDF_HEADER_FILL}; color:#ffffff; font-size:7pt;">'
            f"{html.escape(name)}</th>"
            for name in export_headers(records)
        )
        body_rows = "".join(
            "<tr>"
            + "".join(f"<td>{html.escape(_text(value))}</td>" for value in row)
            + "</tr>"
            for row in export_rows(records)
        )
        return (
            '<table border="1" cellspacing="0" cellpadding="2" width="100%" '
            'style="font-size:6pt; border-collapse:collapse;">'
            f"<thead><tr>{header_cells}</tr></thead>"
            f"<tbody>{body_rows}</tbody>"
            "</table>"
        )
