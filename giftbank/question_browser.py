from PySide6.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QTableWidget,
                               QTableWidgetItem, QHeaderView, QLineEdit, QLabel,
                               QAbstractItemView, QComboBox, QMessageBox)
from PySide6.QtCore import Qt

ALL_TYPES = "All"


def _truncate(text, limit=100):
    text = text.replace("\n", " ")
    return text[:limit] + "..." if len(text) > limit else text


class QuestionBrowser(QDialog):
    def __init__(self, parent, questions, title="Question Browser"):
        super().__init__(parent)
        self.questions = questions
        self.setWindowTitle(title)
        self.resize(1100, 700)
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout(self)

        # Search bar and filters
        search_layout = QHBoxLayout()

        # Type filter
        search_layout.addWidget(QLabel("Type:"))
        self.type_combo = QComboBox()
        self.type_combo.addItem(ALL_TYPES)
        self.type_combo.addItems(sorted({q.type.value for q in self.questions}))
        self.type_combo.currentTextChanged.connect(self.apply_filters)
        search_layout.addWidget(self.type_combo)

        search_layout.addSpacing(20)

        # Text search
        search_layout.addWidget(QLabel("Search:"))
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Type to filter by title, text or answers...")
        self.search_input.textChanged.connect(self.apply_filters)
        search_layout.addWidget(self.search_input)

        layout.addLayout(search_layout)

        # Table
        self.table = QTableWidget()
        self.table.setColumnCount(4)
        self.table.setHorizontalHeaderLabels(["Title", "Type", "Question", "Answers"])
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.ResizeToContents)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        header.setSectionResizeMode(2, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(3, QHeaderView.ResizeMode.Stretch)
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.doubleClicked.connect(self.on_row_double_clicked)

        layout.addWidget(self.table)

        self.count_lbl = QLabel()
        self.count_lbl.setStyleSheet("color: gray; font-style: italic;")
        layout.addWidget(self.count_lbl)

        self.populate_table()

    def populate_table(self):
        self.table.setRowCount(len(self.questions))
        for i, q in enumerate(self.questions):
            item_title = QTableWidgetItem(q.title)
            self.table.setItem(i, 0, item_title)
            self.table.setItem(i, 1, QTableWidgetItem(q.type.value))
            self.table.setItem(i, 2, QTableWidgetItem(_truncate(q.question_text)))
            answers = "; ".join(("✓ " if a.correct else "") + a.text for a in q.answers)
            self.table.setItem(i, 3, QTableWidgetItem(_truncate(answers)))

            # Guarda a pergunta completa no primeiro item
            item_title.setData(Qt.ItemDataRole.UserRole, q)
        self._update_count()

    def apply_filters(self):
        text = self.search_input.text().lower()
        qtype = self.type_combo.currentText()

        for row in range(self.table.rowCount()):
            show = qtype == ALL_TYPES or self.table.item(row, 1).text() == qtype

            if show and text:
                show = any(
                    text in self.table.item(row, col).text().lower()
                    for col in range(self.table.columnCount())
                    if self.table.item(row, col)
                )

            self.table.setRowHidden(row, not show)
        self._update_count()

    def _update_count(self):
        visible = sum(1 for row in range(self.table.rowCount()) if not self.table.isRowHidden(row))
        self.count_lbl.setText(f"{visible} of {len(self.questions)} questions. "
                               "Double-click a row to see the GIFT source.")

    def on_row_double_clicked(self, index):
        item = self.table.item(index.row(), 0)
        question = item.data(Qt.ItemDataRole.UserRole)
        if question:
            QMessageBox.information(self, question.title, f"::{question.title}::{question.raw_content}")
