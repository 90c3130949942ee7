"""
Histórico das simulações de exame, guardado em ficheiro JSON.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from .simulation import SimulationResults


class SimulationHistory:
    """Regista resultados das simulações em ficheiro JSON."""

    def __init__(self, history_file: str = None):
        if history_file is None:
            from .app_paths import get_simulation_history_path
            history_file = get_simulation_history_path()
        self.history_file = Path(history_file)
        self.history_file.parent.mkdir(parents=True, exist_ok=True)

        # Cria ficheiro se não existir
        if not self.history_file.exists():
            self.history_file.write_text('[]', encoding='utf-8')

    def log_simulation(self, results: SimulationResults, gift_file: str = None) -> Dict:
        """
        Regista uma simulação realizada.

        Args:
            results: Resultado da simulação
            gift_file: Ficheiro GIFT usado (por omissão, results.source)
        """
        history = self._read_history()
        finished_at = results.finished_at or datetime.now()

        record = {
            'timestamp': finished_at.isoformat(),
            'date': finished_at.strftime('%Y-%m-%d'),
            'time': finished_at.strftime('%H:%M:%S'),
            'gift_file': str(gift_file or results.source or ''),
            'total_questions': len(results.results),
            'graded_questions': results.max_score,
            'score': round(results.total_score, 2),
            'percentage': round(results.percentage, 2),
            'note': round(results.note, 2),
            'wrong_titles': results.wrong_titles,
        }

        history.append(record)
        self._write_history(history)
        return record

    def _read_history(self) -> List[Dict]:
        """Lê o histórico de simulações."""
        try:
            with open(self.history_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            return []

    def _write_history(self, history: List[Dict]):
        """Guarda o histórico de simulações."""
        with open(self.history_file, 'w', encoding='utf-8') as f:
            json.dump(history, f, ensure_ascii=False, indent=2)

    def get_statistics(self, gift_file: str = None) -> Dict:
        """Retorna estatísticas gerais das simulações.

        Args:
            gift_file: Se especificado, retorna estatísticas apenas desse ficheiro
        """
        history = self._read_history()

        if gift_file:
            history = [h for h in history if h.get('gift_file') == str(gift_file)]

        if not history:
            return {
                'total_simulations': 0,
                'total_questions': 0,
                'average_percentage': 0,
                'best_note': 0
            }

        return {
            'total_simulations': len(history),
            'total_questions': sum(h['total_questions'] for h in history),
            'average_percentage': round(sum(h['percentage'] for h in history) / len(history), 2),
            'best_note': max(h['note'] for h in history)
        }

    def get_recent(self, limit: int = 10, gift_file: str = None) -> List[Dict]:
        """Retorna as últimas N simulações."""
        history = self._read_history()

        if gift_file:
            history = [h for h in history if h.get('gift_file') == str(gift_file)]

        return sorted(history, key=lambda x: x['timestamp'], reverse=True)[:limit]

    def clear_history(self):
        """Limpa todo o histórico."""
        self._write_history([])
