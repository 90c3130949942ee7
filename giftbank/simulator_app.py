"""
Simulador de exames GIFT - Interface Gráfica
Carrega um ficheiro GIFT, apresenta as perguntas e mostra a nota final.
"""

import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import (QApplication, QMainWindow, QWidget, QVBoxLayout,
                               QLabel, QPushButton, QHBoxLayout)

from .constants import APP_NAME
from .history import SimulationHistory
from .preferences import Preferences
from .question_browser import QuestionBrowser
from .question_screen import QuestionScreen
from .results_screen import ResultsScreen
from .simulation import ExamSimulation

logger = logging.getLogger(__name__)


class SimulatorApp(QMainWindow):
    """Janela da simulação de exame."""

    def __init__(self, questions, source: str = None, preferences: Preferences = None,
                 history: SimulationHistory = None):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} - {Path(source).name}" if source else APP_NAME)

        self.setStyleSheet("""
            QMainWindow, QDialog {
                border: 1px solid #ccc;
            }
        """)

        # Dados
        self.questions = list(questions)
        self.source = source
        self.preferences = preferences or Preferences()
        self.history = history or SimulationHistory()
        self.simulation = ExamSimulation(self.questions, source)
        self.current_question_index = 0

        self.show_start_screen()

    def showEvent(self, event):
        """Aplica tamanho configurável na primeira vez que a janela é mostrada."""
        super().showEvent(event)
        if not hasattr(self, '_geometry_applied'):
            self._geometry_applied = True
            self._apply_configured_geometry()

    def _apply_configured_geometry(self):
        """Aplica tamanho da janela baseado nas preferências."""
        width_percent, height_percent = self.preferences.get_main_window_size_percent()
        primary_screen = QApplication.primaryScreen()
        if primary_screen is None:
            self.resize(800, 600)
            return
        screen = primary_screen.geometry()
        self.resize(int(screen.width() * width_percent / 100),
                    int(screen.height() * height_percent / 100))

    def clear_window(self):
        """Limpa o widget central da janela."""
        widget = self.centralWidget()
        if widget:
            widget.deleteLater()

    def show_start_screen(self):
        self.clear_window()

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(20, 20, 20, 20)

        title = QLabel("🎓 Exam simulation")
        title_font = title.font()
        title_font.setPointSize(title_font.pointSize() + 6)
        title_font.setBold(True)
        title.setFont(title_font)
        layout.addWidget(title)
        layout.addSpacing(10)

        if self.source:
            layout.addWidget(QLabel(f"Exam: {Path(self.source).name}"))
        layout.addWidget(QLabel(f"{len(self.questions)} questions loaded."))
        layout.addSpacing(10)
        instructions = QLabel(
            "Choose an option for multiple choice questions and type your answer for open ones.\n"
            "Short answers are not case sensitive. Essay questions are not graded."
        )
        instructions.setWordWrap(True)
        layout.addWidget(instructions)
        layout.addSpacing(20)

        buttons = QHBoxLayout()
        start_btn = QPushButton("Start")
        start_btn.clicked.connect(self.start)
        buttons.addWidget(start_btn)
        browse_btn = QPushButton("Browse questions...")
        browse_btn.clicked.connect(self.show_question_browser)
        buttons.addWidget(browse_btn)
        buttons.addStretch()
        layout.addLayout(buttons)
        layout.addStretch()

    def show_question_browser(self):
        QuestionBrowser(self, self.questions).exec()

    def start(self):
        self.current_question_index = 0
        self.show_question()

    def restart(self):
        """Recomeça com as respostas em branco."""
        self.simulation = ExamSimulation(self.questions, self.source)
        self.show_start_screen()

    def show_question(self):
        """Mostra a pergunta atual."""
        if self.current_question_index >= len(self.simulation):
            self.show_results()
            return
        self.question_screen = QuestionScreen(self)
        self.question_screen.show()

    def show_results(self):
        """Mostra os resultados da simulação."""
        self.results_screen = ResultsScreen(self)
        self.results_screen.show()


def _qt_app():
    app = QApplication.instance() or QApplication(sys.argv)
    if QApplication.primaryScreen() is None:
        print("No display available. The application requires a graphical display to run.")
        return None
    return app


def run_simulator(questions, source: str = None) -> int:
    """Abre a janela de simulação e bloqueia até ser fechada."""
    app = _qt_app()
    if app is None:
        return 1
    window = SimulatorApp(questions, source)
    window.show()
    return app.exec()


def run_browser(questions, source: str = None) -> int:
    """Abre o explorador de perguntas."""
    app = _qt_app()
    if app is None:
        return 1
    title = f"Question Browser - {Path(source).name}" if source else "Question Browser"
    browser = QuestionBrowser(None, questions, title)
    browser.show()
    return app.exec()
