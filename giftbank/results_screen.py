"""
Ecrã de resultados da simulação.
"""

from PySide6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel,
                               QPushButton, QTextEdit, QGroupBox, QFileDialog, QMessageBox)
from PySide6.QtGui import QFont, QColor

from .constants import NOTE_SCALE
from .errors import GiftError
from .simulation import save_results


class ResultsScreen:
    """Gere o ecrã de resultados."""

    def __init__(self, app):
        self.app = app

    def show(self):
        """Mostra os resultados da simulação."""
        self.app.clear_window()

        results = self.app.simulation.results()
        self.results = results

        # Regista no histórico se houve pelo menos uma resposta
        if len(self.app.simulation.unanswered()) < len(self.app.simulation):
            self.app.history.log_simulation(results)

        # Widget central
        central = QWidget()
        self.app.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(20, 20, 20, 20)

        # Título
        title = QLabel("Exam Results")
        title_font = title.font()
        title_font.setPointSize(title_font.pointSize() + 6)
        title_font.setBold(True)
        title.setFont(title_font)
        main_layout.addWidget(title)
        main_layout.addSpacing(20)

        self._show_statistics(main_layout, results)
        self._show_details(main_layout, results)
        self._create_buttons(main_layout)

    def _show_statistics(self, layout, results):
        """Mostra a pontuação final."""
        stats_grp = QGroupBox("Statistics")
        stats_layout = QVBoxLayout()

        stats_layout.addWidget(QLabel(f"Total questions: {len(results.results)} "
                                      f"({results.max_score} graded)"))

        score_label = QLabel(f"Score: {results.total_score:.2f}/{results.max_score}")
        score_label.setStyleSheet("color: green;" if results.percentage >= 50 else "color: red;")
        stats_layout.addWidget(score_label)

        percent_label = QLabel(f"Percentage: {results.percentage:.1f}%  ·  "
                               f"Note: {results.note:.2f}/{NOTE_SCALE}")
        percent_font = percent_label.font()
        percent_font.setBold(True)
        percent_label.setFont(percent_font)
        stats_layout.addWidget(percent_label)

        stats_layout.addWidget(QLabel(results.message))

        stats_grp.setLayout(stats_layout)
        layout.addWidget(stats_grp)
        layout.addSpacing(15)

    def _write(self, widget, text, color="black", bold=False):
        widget.setFontWeight(QFont.Weight.Bold if bold else QFont.Weight.Normal)
        widget.setTextColor(QColor(color))
        widget.insertPlainText(text)
        widget.setFontWeight(QFont.Weight.Normal)
        widget.setTextColor(QColor("black"))

    def _show_details(self, layout, results):
        """Mostra as respostas pergunta a pergunta."""
        details_grp = QGroupBox("Answers")
        details_layout = QVBoxLayout()

        text_widget = QTextEdit()
        text_widget.setReadOnly(True)

        for result in results.results:
            self._write(text_widget, f"{result.number}. {result.title}", bold=True)
            self._write(text_widget, f" ({result.type})\n")

            if not result.graded:
                self._write(text_widget, f"   Not graded. Your answer: {result.response}\n\n", "gray")
                continue

            if result.has_multiple_gaps:
                for gap in result.gaps:
                    color = "green" if gap.correct else "red"
                    self._write(text_widget, f"   Gap {gap.index}: {gap.response}\n", color)
                    if not gap.correct:
                        self._write(text_widget, f"      Correct: {' OR '.join(gap.correct_answers)}\n", "green")
            else:
                color = "green" if result.correct else "red"
                self._write(text_widget, f"   Your answer: {result.response}\n", color)
                if not result.correct:
                    self._write(text_widget, f"   Correct: {' OR '.join(result.correct_answers)}\n", "green")
            text_widget.insertPlainText("\n")

        details_layout.addWidget(text_widget)
        details_grp.setLayout(details_layout)
        layout.addWidget(details_grp)
        layout.addSpacing(15)

    def _save(self):
        path, _ = QFileDialog.getSaveFileName(self.app, "Save results", "results.txt", "Text (*.txt)")
        if not path:
            return
        try:
            save_results(self.results, path)
        except GiftError as e:
            QMessageBox.critical(self.app, "Error", str(e))

    def _create_buttons(self, layout):
        """Cria botões de ação."""
        button_widget = QWidget()
        button_layout = QHBoxLayout(button_widget)
        button_layout.setContentsMargins(0, 0, 0, 0)

        restart_btn = QPushButton("Restart")
        restart_btn.clicked.connect(self.app.restart)
        button_layout.addWidget(restart_btn)

        save_btn = QPushButton("Save results...")
        save_btn.clicked.connect(self._save)
        button_layout.addWidget(save_btn)

        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.app.close)
        button_layout.addWidget(close_btn)

        button_layout.addStretch()
        layout.addWidget(button_widget)
