"""
Ecrã de apresentação de perguntas.
"""

import random

from PySide6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit,
                               QPushButton, QRadioButton, QGroupBox, QButtonGroup,
                               QMessageBox, QComboBox, QTextEdit, QFormLayout)

from .gift_parser import QuestionType
from .simulation import is_choice_gap


class QuestionScreen:
    """Gere o ecrã de apresentação de perguntas."""

    def __init__(self, app):
        self.app = app
        self._collect = lambda: None

    @property
    def simulation(self):
        return self.app.simulation

    def show(self):
        """Mostra a pergunta atual."""
        if self.app.current_question_index >= len(self.simulation):
            self.app.show_results()
            return

        self.app.clear_window()

        index = self.app.current_question_index
        question = self.simulation.questions[index]

        # Widget central
        central = QWidget()
        self.app.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(20, 20, 20, 20)

        # Progresso
        progress_label = QLabel(f"Question {index + 1} of {len(self.simulation)}  ·  {question.type}")
        progress_font = progress_label.font()
        progress_font.setItalic(True)
        progress_label.setFont(progress_font)
        main_layout.addWidget(progress_label)

        # Categoria
        if question.category:
            category_label = QLabel(f"Category: {question.category}")
            category_font = category_label.font()
            category_font.setItalic(True)
            category_label.setFont(category_font)
            main_layout.addWidget(category_label)
            main_layout.addSpacing(10)

        # Pergunta
        question_grp = QGroupBox(question.title)
        question_layout = QVBoxLayout()
        question_label = QLabel(question.question_text)
        question_label.setWordWrap(True)
        question_layout.addWidget(question_label)
        question_grp.setLayout(question_layout)
        main_layout.addWidget(question_grp)
        main_layout.addSpacing(15)

        # Resposta
        answer_grp = QGroupBox("Your answer")
        answer_layout = QVBoxLayout()
        if self.simulation.is_multi_gap(index):
            self._collect = self._build_gaps(answer_layout, central, index)
        elif question.type is QuestionType.MULTIPLE_CHOICE:
            self._collect = self._build_choices(answer_layout, central, question.answers,
                                                self.simulation.response(index))
        elif question.type is QuestionType.TRUE_FALSE:
            self._collect = self._build_true_false(answer_layout, central, self.simulation.response(index))
        elif question.type is QuestionType.MATCHING:
            self._collect = self._build_matching(answer_layout, question, self.simulation.response(index))
        elif question.type is QuestionType.ESSAY:
            self._collect = self._build_essay(answer_layout, self.simulation.response(index))
        else:
            self._collect = self._build_text(answer_layout, self.simulation.response(index))
        answer_grp.setLayout(answer_layout)
        main_layout.addWidget(answer_grp)
        main_layout.addSpacing(15)

        # Botões
        button_widget = QWidget()
        button_layout = QHBoxLayout(button_widget)
        button_layout.setContentsMargins(0, 0, 0, 0)

        if index > 0:
            prev_btn = QPushButton("← Previous")
            prev_btn.clicked.connect(self.previous_question)
            button_layout.addWidget(prev_btn)

        next_btn = QPushButton("Next →" if index < len(self.simulation) - 1 else "Finish")
        next_btn.clicked.connect(self.next_question)
        button_layout.addWidget(next_btn)

        finish_btn = QPushButton("Finish now")
        finish_btn.clicked.connect(self.finish_early)
        finish_btn.setStyleSheet("color: #d32f2f;")
        button_layout.addSpacing(20)
        button_layout.addWidget(finish_btn)

        button_layout.addStretch()
        main_layout.addWidget(button_widget)
        main_layout.addStretch()

    # ---- Widgets de resposta ----
    # Cada _build_* devolve uma função que lê a resposta dos widgets.

    def _build_choices(self, layout, parent, answers, current):
        group = QButtonGroup(parent)
        for i, answer in enumerate(answers):
            rb = QRadioButton(answer.text)
            rb.setChecked(current == i)
            group.addButton(rb, i)
            layout.addWidget(rb)

        def collect():
            checked = group.checkedId()
            return checked if checked >= 0 else None
        return collect

    def _build_true_false(self, layout, parent, current):
        group = QButtonGroup(parent)
        for i, label in enumerate(("True", "False")):
            rb = QRadioButton(label)
            rb.setChecked(current is (i == 0))
            group.addButton(rb, i)
            layout.addWidget(rb)

        def collect():
            checked = group.checkedId()
            return None if checked < 0 else checked == 0
        return collect

    def _build_text(self, layout, current):
        line = QLineEdit()
        line.setPlaceholderText("Type your answer...")
        if current is not None:
            line.setText(str(current))
        layout.addWidget(line)
        return lambda: line.text().strip() or None

    def _build_essay(self, layout, current):
        text = QTextEdit()
        if current is not None:
            text.setPlainText(str(current))
        layout.addWidget(text)
        note = QLabel("Essay questions are not graded.")
        note.setStyleSheet("color: gray; font-style: italic;")
        layout.addWidget(note)
        return lambda: text.toPlainText().strip() or None

    def _build_matching(self, layout, question, current):
        form = QFormLayout()
        targets = [pair.target for pair in question.pairs]
        random.shuffle(targets)
        current = current or {}
        combos = {}
        for pair in question.pairs:
            combo = QComboBox()
            combo.addItem("")
            combo.addItems(targets)
            if pair.prompt in current:
                combo.setCurrentText(current[pair.prompt])
            form.addRow(QLabel(pair.prompt), combo)
            combos[pair.prompt] = combo
        layout.addLayout(form)

        def collect():
            chosen = {prompt: combo.currentText() for prompt, combo in combos.items() if combo.currentText()}
            return chosen or None
        return collect

    def _build_gaps(self, layout, parent, index):
        collectors = {}
        for gap in self.simulation.gaps_for(index):
            gap_grp = QGroupBox(f"Gap {gap.index}")
            gap_layout = QVBoxLayout()
            current = self.simulation.gap_response(index, gap.index)
            if is_choice_gap(gap):
                collectors[gap.index] = self._build_choices(gap_layout, parent, gap.answers, current)
            else:
                collectors[gap.index] = self._build_text(gap_layout, current)
            gap_grp.setLayout(gap_layout)
            layout.addWidget(gap_grp)

        def collect():
            return {gap_index: read() for gap_index, read in collectors.items()}
        return collect

    # ---- Navegação ----

    def _store_answer(self):
        """Guarda a resposta atual na simulação; retorna False se estiver vazia."""
        index = self.app.current_question_index
        response = self._collect()
        if self.simulation.is_multi_gap(index):
            for gap_index, value in response.items():
                if value is not None:
                    self.simulation.answer_gap(index, gap_index, value)
            return all(value is not None for value in response.values())
        if response is not None:
            self.simulation.answer(index, response)
        return response is not None

    def finish_early(self):
        """Termina a simulação antes da última pergunta."""
        response = QMessageBox.question(
            self.app,
            "Finish exam",
            "Are you sure you want to finish now?\n\nUnanswered questions count as wrong.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if response == QMessageBox.StandardButton.Yes:
            self._store_answer()
            self.app.show_results()

    def next_question(self):
        """Vai para a próxima pergunta."""
        if not self._store_answer():
            response = QMessageBox.question(
                self.app,
                "Warning",
                "You have not answered this question. Continue anyway?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
            )
            if response != QMessageBox.StandardButton.Yes:
                return

        self.app.current_question_index += 1
        self.show()

    def previous_question(self):
        """Volta para a pergunta anterior."""
        self._store_answer()
        self.app.current_question_index -= 1
        self.show()
