"""
Gestor de preferências da aplicação.
"""

import json
from pathlib import Path
from typing import Optional

from .constants import (
    MIN_WINDOW_PERCENT, MAX_WINDOW_PERCENT, DEFAULT_WINDOW_PERCENT,
    MIN_EXAM_QUESTIONS, MAX_EXAM_QUESTIONS,
    DEFAULT_DATA_DIR, DEFAULT_OUTPUT_DIR
)


class Preferences:
    """Gere preferências persistentes da aplicação."""

    def __init__(self, pref_file: str = None):
        if pref_file is None:
            from .app_paths import get_preferences_path
            pref_file = get_preferences_path()
        self.pref_file = Path(pref_file)
        self.pref_file.parent.mkdir(parents=True, exist_ok=True)

        # Cria ficheiro com valores padrão se não existir
        if not self.pref_file.exists():
            self._write_preferences({
                'last_gift_file': '',
                'data_dir': DEFAULT_DATA_DIR,
                'output_dir': DEFAULT_OUTPUT_DIR,
                'exam': {
                    'min_questions': MIN_EXAM_QUESTIONS,
                    'max_questions': MAX_EXAM_QUESTIONS
                },
                'ui': {
                    'main_window_width_percent': DEFAULT_WINDOW_PERCENT,
                    'main_window_height_percent': DEFAULT_WINDOW_PERCENT
                }
            })

    def get_last_gift_file(self) -> Optional[str]:
        """Retorna o último ficheiro GIFT usado."""
        prefs = self._read_preferences()
        last_file = prefs.get('last_gift_file', '')

        # Verifica se o ficheiro ainda existe
        if last_file and Path(last_file).exists():
            return last_file
        return None

    def set_last_gift_file(self, filepath: str):
        """Guarda o último ficheiro GIFT usado."""
        prefs = self._read_preferences()
        prefs['last_gift_file'] = str(filepath)
        self._write_preferences(prefs)

    # ---- Pastas ----
    def get_data_dir(self) -> str:
        """Pasta da banca de perguntas."""
        return self._read_preferences().get('data_dir') or DEFAULT_DATA_DIR

    def set_data_dir(self, path: str):
        prefs = self._read_preferences()
        prefs['data_dir'] = str(path)
        self._write_preferences(prefs)

    def get_output_dir(self) -> str:
        """Pasta onde são gerados os ficheiros GIFT."""
        return self._read_preferences().get('output_dir') or DEFAULT_OUTPUT_DIR

    def set_output_dir(self, path: str):
        prefs = self._read_preferences()
        prefs['output_dir'] = str(path)
        self._write_preferences(prefs)

    # ---- Exame ----
    def get_exam_limits(self):
        """Retorna (mínimo, máximo) de perguntas por exame com validação."""
        exam = self._read_preferences().get('exam', {})
        minimum = exam.get('min_questions', MIN_EXAM_QUESTIONS)
        maximum = exam.get('max_questions', MAX_EXAM_QUESTIONS)
        # Validar limites
        if not isinstance(minimum, int) or minimum < 1:
            minimum = MIN_EXAM_QUESTIONS
        if not isinstance(maximum, int) or maximum < minimum:
            maximum = max(MAX_EXAM_QUESTIONS, minimum)
        return (minimum, maximum)

    def set_exam_limits(self, min_questions: int, max_questions: int):
        """Guarda os limites de perguntas por exame."""
        prefs = self._read_preferences()
        exam = prefs.setdefault('exam', {})
        exam['min_questions'] = min_questions
        exam['max_questions'] = max_questions
        self._write_preferences(prefs)

    # ---- UI settings ----
    def get_main_window_size_percent(self):
        """Retorna (width%, height%) da janela principal com validação."""
        prefs = self._read_preferences()
        ui = prefs.get('ui', {})
        width = ui.get('main_window_width_percent', DEFAULT_WINDOW_PERCENT)
        height = ui.get('main_window_height_percent', DEFAULT_WINDOW_PERCENT)
        # Validar limites
        if not isinstance(width, int) or width < MIN_WINDOW_PERCENT or width > MAX_WINDOW_PERCENT:
            width = DEFAULT_WINDOW_PERCENT
        if not isinstance(height, int) or height < MIN_WINDOW_PERCENT or height > MAX_WINDOW_PERCENT:
            height = DEFAULT_WINDOW_PERCENT
        return (width, height)

    def set_main_window_size_percent(self, width_percent: int, height_percent: int):
        """Guarda tamanho da janela principal em percentagem do ecrã."""
        prefs = self._read_preferences()
        ui = prefs.setdefault('ui', {})
        ui['main_window_width_percent'] = width_percent
        ui['main_window_height_percent'] = height_percent
        self._write_preferences(prefs)

    def _read_preferences(self) -> dict:
        """Lê as preferências do ficheiro."""
        try:
            with open(self.pref_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            return {}

    def _write_preferences(self, prefs: dict):
        """Guarda as preferências no ficheiro."""
        with open(self.pref_file, 'w', encoding='utf-8') as f:
            json.dump(prefs, f, ensure_ascii=False, indent=2)
