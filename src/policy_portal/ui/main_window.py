"""Main GUI window for policy data entry."""

from __future__ import annotations

from PySide6.QtCore import QThreadPool, QTimer, Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QFrame,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QRadioButton,
    QScrollArea,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from policy_portal.models.app_state import THEMES, Severity, ViewMode
from policy_portal.models.lookup import partners
from policy_portal.models.policy import FIELD_LABELS, GENDERS, NOMINEE_RELATIONSHIPS
from policy_portal.services.app_controller import AppController
from policy_portal.services.export_service import EXPORT_FORMATS, ExportService
from policy_portal.services.extraction_client import ExtractionClient
from policy_portal.services.form_engine import PolicyFormEngine
from policy_portal.ui.tasks import ExtractPolicyTask

TABLE_COLUMNS = [
    ("customer_name", "Customer Name"),
    ("partner_name", "Partner"),
    ("product_name", "Product"),
    ("premium", "Premium"),
    ("enrolment_date", "Enrolment Date"),
    ("mobile_number", "Mobile"),
]

TEXT_FIELDS = [
    "tenure",
    "agent_name",
    "branch_name",
    "branch_code",
    "region",
    "customer_name",
    "date_of_birth",
    "mobile_number",
    "customer_id",
    "enrolment_date",
    "savings_account_no",
    "csb_code",
    "d2c_code",
    "nominee_name",
    "nominee_dob",
    "nominee_mobile_number",
]

DATE_FIELDS = {"date_of_birth", "enrolment_date", "nominee_dob"}

DARK_THEMES = {
    "dark",
    "synthwave",
    "halloween",
    "forest",
    "black",
    "luxury",
    "dracula",
    "business",
    "night",
    "coffee",
}

TOAST_STYLES = {
    Severity.SUCCESS: "background-color: #36d399; color: #003320;",
    Severity.ERROR: "background-color: #f87272; color: #470000;",
    Severity.INFO: "background-color: #3abff8; color: #002b3d;",
}


class MainWindow(QMainWindow):
    """GUI for policy list and entry form."""

    def __init__(
        self,
        controller: AppController,
        export_service: ExportService,
        extraction_client: ExtractionClient,
        toast_seconds: float = 4,
    ):
        super().__init__()
        self.controller = controller
        self.export_service = export_service
        self.extraction_client = extraction_client
        self.toast_ms = int(toast_seconds * 1000)
        self.thread_pool = QThreadPool.globalInstance()

        self._image_path: str | None = None
        self._syncing = False
        self.text_inputs: dict[str, QLineEdit] = {}
        self.gender_groups: dict[str, QButtonGroup] = {}

        self.setWindowTitle("Mswasth Data Entry Portal")
        self.resize(1400, 900)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addLayout(self._build_header())

        self.pages = QStackedWidget()
        self.pages.addWidget(self._build_list_page())
        self.pages.addWidget(self._build_form_page())
        layout.addWidget(self.pages)

        self.toast_label = QLabel()
        self.toast_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.toast_label.setContentsMargins(12, 8, 12, 8)
        self.toast_label.mousePressEvent = lambda _event: self._dismiss_toast()
        self.toast_label.hide()
        layout.addWidget(self.toast_label)

        self.setCentralWidget(central)
        self._apply_theme(self.controller.state.theme)
        self.refresh()

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        title = QLabel("<b>Mswasth Data Entry Portal</b>")
        self.theme_selector = QComboBox()
        for theme in THEMES:
            self.theme_selector.addItem(theme.capitalize(), theme)
        index = self.theme_selector.findData(self.controller.state.theme)
        self.theme_selector.setCurrentIndex(max(index, 0))
        self.theme_selector.activated.connect(self._on_theme_selected)

        header.addWidget(title)
        header.addStretch(1)
        header.addWidget(QLabel("Theme"))
        header.addWidget(self.theme_selector)
        return header

    def _build_list_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        top_row = QHBoxLayout()
        top_row.addWidget(QLabel("<h2>Policy Entries</h2>"))
        top_row.addStretch(1)
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search entries...")
        self.search_input.textChanged.connect(self._on_search_changed)
        add_button = QPushButton("Add New")
        add_button.clicked.connect(self.add_new)
        top_row.addWidget(self.search_input)
        top_row.addWidget(add_button)

        action_row = QHBoxLayout()
        export_button = QPushButton("Export Data")
        export_menu = QMenu(export_button)
        for fmt in EXPORT_FORMATS:
            action = export_menu.addAction(f"Export as {fmt.upper()}")
            action.triggered.connect(lambda _checked=False, f=fmt: self.export_policies(f))
        export_button.setMenu(export_menu)
        self.delete_all_button = QPushButton("Delete All Entries")
        self.delete_all_button.clicked.connect(self.delete_all)
        action_row.addWidget(export_button)
        action_row.addStretch(1)
        action_row.addWidget(self.delete_all_button)

        self.policies_table = QTableWidget(0, len(TABLE_COLUMNS) + 1)
        self.policies_table.setHorizontalHeaderLabels(
            [label for _, label in TABLE_COLUMNS] + ["Actions"]
        )
        self.policies_table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.policies_table.horizontalHeader().sectionClicked.connect(self._on_header_clicked)

        self.empty_label = QLabel("No entries found.")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        pager = QHBoxLayout()
        self.prev_button = QPushButton("«")
        self.prev_button.clicked.connect(self.previous_page)
        self.page_label = QLabel()
        self.next_button = QPushButton("»")
        self.next_button.clicked.connect(self.next_page)
        pager.addStretch(1)
        pager.addWidget(self.prev_button)
        pager.addWidget(self.page_label)
        pager.addWidget(self.next_button)
        pager.addStretch(1)

        layout.addLayout(top_row)
        layout.addLayout(action_row)
        layout.addWidget(self.policies_table)
        layout.addWidget(self.empty_label)
        layout.addLayout(pager)
        return page

    def _build_form_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        self.form_title = QLabel()
        layout.addWidget(self.form_title)

        autofill = QGroupBox("AI Autofill")
        autofill_row = QHBoxLayout(autofill)
        choose_button = QPushButton("Choose Image")
        choose_button.clicked.connect(self.choose_image)
        self.image_label = QLabel("No image selected")
        self.image_preview = QLabel()
        self.image_preview.setFixedSize(64, 64)
        self.image_preview.setFrameShape(QFrame.Shape.StyledPanel)
        self.autofill_button = QPushButton("Autofill from Image")
        self.autofill_button.clicked.connect(self.autofill_from_image)
        autofill_row.addWidget(choose_button)
        autofill_row.addWidget(self.image_label)
        autofill_row.addWidget(self.image_preview)
        autofill_row.addWidget(self.autofill_button)
        autofill_row.addStretch(1)
        layout.addWidget(autofill)

        form = QFormLayout()
        form.addRow(QLabel("<b>Policy Information</b>"))

        self.partner_input = QComboBox()
        self.partner_input.activated.connect(self._on_partner_selected)
        self.product_input = QComboBox()
        self.product_input.activated.connect(self._on_product_selected)
        self.premium_input = QComboBox()
        self.premium_input.activated.connect(self._on_premium_selected)
        form.addRow(FIELD_LABELS["partner_name"], self.partner_input)
        form.addRow(FIELD_LABELS["product_name"], self.product_input)
        form.addRow(FIELD_LABELS["premium"], self.premium_input)

        for name in TEXT_FIELDS:
            widget = QLineEdit()
            widget.setPlaceholderText("YYYY-MM-DD" if name in DATE_FIELDS else FIELD_LABELS[name])
            widget.textEdited.connect(lambda text, field=name: self._on_text_edited(field, text))
            self.text_inputs[name] = widget

        for name in ("tenure", "agent_name"):
            form.addRow(FIELD_LABELS[name], self.text_inputs[name])

        form.addRow(QLabel("<b>Branch & Customer Information</b>"))
        for name in ("branch_name", "branch_code", "region", "customer_name"):
            form.addRow(FIELD_LABELS[name], self.text_inputs[name])
        form.addRow(FIELD_LABELS["gender"], self._build_gender_group("gender"))
        for name in (
            "date_of_birth",
            "mobile_number",
            "customer_id",
            "enrolment_date",
            "savings_account_no",
            "csb_code",
            "d2c_code",
        ):
            form.addRow(FIELD_LABELS[name], self.text_inputs[name])

        form.addRow(QLabel("<b>Nominee Details</b>"))
        form.addRow(FIELD_LABELS["nominee_name"], self.text_inputs["nominee_name"])
        form.addRow(FIELD_LABELS["nominee_dob"], self.text_inputs["nominee_dob"])
        self.relationship_input = QComboBox()
        self.relationship_input.addItem("Select Relationship", "")
        for relationship in NOMINEE_RELATIONSHIPS:
            self.relationship_input.addItem(relationship, relationship)
        self.relationship_input.activated.connect(self._on_relationship_selected)
        form.addRow(FIELD_LABELS["nominee_relationship"], self.relationship_input)
        form.addRow(
            FIELD_LABELS["nominee_mobile_number"], self.text_inputs["nominee_mobile_number"]
        )
        form.addRow(FIELD_LABELS["nominee_gender"], self._build_gender_group("nominee_gender"))

        form.addRow(QLabel("<b>Remarks</b>"))
        self.remarks_input = QPlainTextEdit()
        self.remarks_input.setPlaceholderText("Any additional remarks...")
        self.remarks_input.textChanged.connect(self._on_remarks_changed)
        form.addRow(self.remarks_input)

        wrapper = QWidget()
        wrapper.setLayout(form)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(wrapper)
        layout.addWidget(scroll)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        cancel_button = QPushButton("Cancel")
        cancel_button.clicked.connect(self.cancel_form)
        self.save_button = QPushButton()
        self.save_button.clicked.connect(self.save_form)
        buttons.addWidget(cancel_button)
        buttons.addWidget(self.save_button)
        layout.addLayout(buttons)
        return page

    def _build_gender_group(self, name: str) -> QWidget:
        container = QWidget()
        row = QHBoxLayout(container)
        row.setContentsMargins(0, 0, 0, 0)
        group = QButtonGroup(container)
        for index, gender in enumerate(GENDERS):
            button = QRadioButton(gender)
            group.addButton(button, index)
            row.addWidget(button)
        row.addStretch(1)
        group.idClicked.connect(lambda button_id, field=name: self._on_gender_clicked(field, button_id))
        self.gender_groups[name] = group
        return container

    def refresh(self) -> None:
        """Re-render whichever page the controller says is current."""
        state = self.controller.state
        if state.view is ViewMode.FORM and self.controller.form is not None:
            self.pages.setCurrentIndex(1)
            self._load_form_from_engine()
        else:
            self.pages.setCurrentIndex(0)
            self._render_list()
        self._render_toast()

    def _render_list(self) -> None:
        page = self.controller.visible_page()
        self.policies_table.setRowCount(len(page.items))
        for row_index, policy in enumerate(page.items):
            for column, (name, _label) in enumerate(TABLE_COLUMNS):
                self.policies_table.setItem(
                    row_index, column, QTableWidgetItem(policy.display_value(name))
                )
            self.policies_table.setCellWidget(
                row_index, len(TABLE_COLUMNS), self._row_actions(policy.id)
            )

        sort = self.controller.state.list_view.sort
        for column, (name, label) in enumerate(TABLE_COLUMNS):
            marker = ""
            if sort.key == name:
                marker = " ▼" if sort.descending else " ▲"
            self.policies_table.horizontalHeaderItem(column).setText(label + marker)

        self.empty_label.setVisible(not page.items)
        self.delete_all_button.setVisible(bool(self.controller.policies))
        self.page_label.setText(f"Page {page.page} of {page.total_pages}")
        self.prev_button.setEnabled(page.page > 1)
        self.next_button.setEnabled(page.page < page.total_pages)

    def _row_actions(self, policy_id: str) -> QWidget:
        container = QWidget()
        row = QHBoxLayout(container)
        row.setContentsMargins(2, 0, 2, 0)
        edit_button = QPushButton("Edit")
        edit_button.clicked.connect(lambda _checked=False: self.edit_policy(policy_id))
        delete_button = QPushButton("Delete")
        delete_button.clicked.connect(lambda _checked=False: self.delete_policy(policy_id))
        row.addWidget(edit_button)
        row.addWidget(delete_button)
        return container

    def _load_form_from_engine(self) -> None:
        engine = self.controller.form
        if engine is None:
            return
        record = engine.record
        self._syncing = True
        try:
            is_edit = self.controller.state.editing is not None
            self.form_title.setText(f"<h2>{'Edit Policy' if is_edit else 'Add New Policy'}</h2>")
            self.save_button.setText("Update Entry" if is_edit else "Save Entry")

            self._fill_combo(self.partner_input, "Select Partner", partners(), record.partner_name)
            self._fill_combo(
                self.product_input,
                "Select Product",
                engine.product_options,
                record.product_name,
            )
            self.product_input.setEnabled(bool(record.partner_name))
            self._fill_combo(
                self.premium_input,
                "Select Premium",
                [str(option.premium) for option in engine.premium_options],
                record.display_value("premium"),
            )
            self.premium_input.setEnabled(bool(record.product_name))

            for name, widget in self.text_inputs.items():
                value = record.display_value(name)
                if widget.text() != value:
                    widget.setText(value)

            for name, group in self.gender_groups.items():
                value = getattr(record, name)
                group.setExclusive(False)
                for index, button in enumerate(group.buttons()):
                    button.setChecked(GENDERS[index] == value)
                group.setExclusive(True)

            index = self.relationship_input.findData(record.nominee_relationship)
            if index < 0 and record.nominee_relationship:
                self.relationship_input.addItem(
                    record.nominee_relationship, record.nominee_relationship
                )
                index = self.relationship_input.count() - 1
            self.relationship_input.setCurrentIndex(max(index, 0))

            if self.remarks_input.toPlainText() != record.remarks:
                self.remarks_input.setPlainText(record.remarks)

            self.autofill_button.setEnabled(bool(self._image_path) and not engine.extracting)
            self.autofill_button.setText("Processing..." if engine.extracting else "Autofill from Image")
        finally:
            self._syncing = False

    @staticmethod
    def _fill_combo(combo: QComboBox, placeholder: str, options: list[str], current: str) -> None:
        combo.blockSignals(True)
        combo.clear()
        combo.addItem(placeholder, "")
        for option in options:
            combo.addItem(option, option)
        if current and current not in options:
            # Extracted values outside the lookup table stay visible but inert.
            combo.addItem(current, current)
        index = combo.findData(current) if current else 0
        combo.setCurrentIndex(max(index, 0))
        combo.blockSignals(False)

    def _render_toast(self) -> None:
        toast = self.controller.state.toast
        if toast is None:
            self.toast_label.hide()
            return
        self.toast_label.setText(f"{toast.message}   ✕")
        self.toast_label.setStyleSheet(TOAST_STYLES[toast.severity] + " border-radius: 6px;")
        self.toast_label.show()
        QTimer.singleShot(self.toast_ms, lambda toast_id=toast.id: self._expire_toast(toast_id))

    def _expire_toast(self, toast_id: int) -> None:
        if self.controller.expire_toast(toast_id):
            self._render_toast()

    def _dismiss_toast(self) -> None:
        self.controller.dismiss_toast()
        self._render_toast()

    def _apply_theme(self, theme: str) -> None:
        if theme in DARK_THEMES:
            self.setStyleSheet(
                "QWidget { background-color: #1d232a; color: #a6adbb; }"
                "QLineEdit, QComboBox, QPlainTextEdit, QTableWidget { background-color: #2a323c; }"
            )
        else:
            self.setStyleSheet("")

    def _on_theme_selected(self, _index: int) -> None:
        theme = self.theme_selector.currentData()
        try:
            self.controller.set_theme(theme)
            self._apply_theme(theme)
        except Exception as error:  # pylint: disable=broad-except
            self.controller.show_toast(str(error), Severity.ERROR)
            self._render_toast()

    def _on_search_changed(self, text: str) -> None:
        self.controller.set_search(text)
        self._render_list()

    def _on_header_clicked(self, column: int) -> None:
        if column >= len(TABLE_COLUMNS):
            return
        self.controller.request_sort(TABLE_COLUMNS[column][0])
        self._render_list()

    def next_page(self) -> None:
        self.controller.next_page()
        self._render_list()

    def previous_page(self) -> None:
        self.controller.previous_page()
        self._render_list()

    def add_new(self) -> None:
        self._reset_image()
        self.controller.start_new()
        self.refresh()

    def edit_policy(self, policy_id: str) -> None:
        try:
            self._reset_image()
            self.controller.start_edit(policy_id)
        except Exception as error:  # pylint: disable=broad-except
            self.controller.show_toast(str(error), Severity.ERROR)
        self.refresh()

    def cancel_form(self) -> None:
        self.controller.cancel_form()
        self.refresh()

    def save_form(self) -> None:
        try:
            self.controller.save_form()
        except Exception as error:  # pylint: disable=broad-except
            self.controller.show_toast(str(error), Severity.ERROR)
        self.refresh()

    def delete_policy(self, policy_id: str) -> None:
        self.controller.request_delete(policy_id)
        self._resolve_confirmation("Are you sure you want to delete this entry?")

    def delete_all(self) -> None:
        self.controller.request_delete_all()
        self._resolve_confirmation(
            "Are you sure you want to delete ALL entries? This action cannot be undone."
        )

    def _resolve_confirmation(self, question: str) -> None:
        confirm = QMessageBox.question(self, "Confirm", question)
        if confirm == QMessageBox.StandardButton.Yes:
            self.controller.confirm_pending()
        else:
            self.controller.cancel_pending()
        self.refresh()

    def export_policies(self, fmt: str) -> None:
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            f"Export policies as {fmt.upper()}",
            f"policies.{fmt}",
            f"{fmt.upper()} Files (*.{fmt})",
        )
        if not file_path:
            return
        try:
            policies = self.controller.policies
            self.export_service.export_to_file(policies, file_path, fmt)
            self.controller.show_toast(f"Exported {len(policies)} policies.", Severity.SUCCESS)
        except Exception as error:  # pylint: disable=broad-except
            self.controller.show_toast(str(error), Severity.ERROR)
        self._render_toast()

    def choose_image(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Select document image",
            "",
            "Images (*.png *.jpg *.jpeg *.webp *.bmp *.gif)",
        )
        if not file_path:
            return
        self._image_path = file_path
        self.image_label.setText(file_path.rsplit("/", 1)[-1])
        pixmap = QPixmap(file_path)
        if not pixmap.isNull():
            self.image_preview.setPixmap(
                pixmap.scaled(
                    64,
                    64,
                    Qt.AspectRatioMode.KeepAspectRatio,
                    Qt.TransformationMode.SmoothTransformation,
                )
            )
        self.autofill_button.setEnabled(True)

    def _reset_image(self) -> None:
        self._image_path = None
        self.image_label.setText("No image selected")
        self.image_preview.clear()

    def autofill_from_image(self) -> None:
        form = self.controller.form
        if not self.controller.begin_autofill(bool(self._image_path)):
            self._render_toast()
            return

        self.autofill_button.setEnabled(False)
        self.autofill_button.setText("Processing...")
        task = ExtractPolicyTask(self.extraction_client, self._image_path or "")
        task.signals.done.connect(lambda partial, origin=form: self._on_extraction_done(partial, origin))
        task.signals.error.connect(lambda message, origin=form: self._on_extraction_failed(message, origin))
        self.thread_pool.start(task)

    def _on_extraction_done(self, partial: dict, form: PolicyFormEngine) -> None:
        if self.controller.complete_autofill(partial, form):
            self.refresh()

    def _on_extraction_failed(self, message: str, form: PolicyFormEngine) -> None:
        if self.controller.fail_autofill(message, form):
            self.refresh()

    def _on_partner_selected(self, _index: int) -> None:
        self._set_form_field("partner_name", self.partner_input.currentData() or "")

    def _on_product_selected(self, _index: int) -> None:
        self._set_form_field("product_name", self.product_input.currentData() or "")

    def _on_premium_selected(self, _index: int) -> None:
        self._set_form_field("premium", self.premium_input.currentData() or "")

    def _on_relationship_selected(self, _index: int) -> None:
        self._set_form_field("nominee_relationship", self.relationship_input.currentData() or "")

    def _on_gender_clicked(self, field: str, button_id: int) -> None:
        self._set_form_field(field, GENDERS[button_id])

    def _on_text_edited(self, field: str, text: str) -> None:
        if self._syncing or self.controller.form is None:
            return
        self.controller.form.set_field(field, text)

    def _on_remarks_changed(self) -> None:
        if self._syncing or self.controller.form is None:
            return
        self.controller.form.set_field("remarks", self.remarks_input.toPlainText())

    def _set_form_field(self, field: str, value: str) -> None:
        if self._syncing or self.controller.form is None:
            return
        self.controller.form.set_field(field, value)
        self._load_form_from_engine()
