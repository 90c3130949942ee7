"""
Perfil de um exame: distribuição dos tipos de pergunta e histograma em texto.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Sequence

from .constants import HISTOGRAM_BAR_LENGTH, REPORT_WIDTH
from .errors import GiftFileError, ProfileError
from .gift_parser import Question
from .question_bank import parse_gift_file

logger = logging.getLogger(__name__)


@dataclass
class ExamProfile:
    total_questions: int
    type_distribution: Dict[str, int]

    @property
    def type_count(self) -> int:
        return len(self.type_distribution)

    def percentages(self) -> Dict[str, float]:
        if not self.total_questions:
            return {}
        return {qtype: count / self.total_questions * 100
                for qtype, count in self.type_distribution.items()}


@dataclass
class ProfileReport:
    histogram: str
    profile: ExamProfile


def profile_questions(questions: Sequence[Question]) -> ExamProfile:
    """Conta as perguntas por tipo."""
    if not questions:
        raise ProfileError("No question found in the file. Check the GIFT format.", "NO_QUESTIONS")
    distribution: Dict[str, int] = {}
    for question in questions:
        distribution[question.type.value] = distribution.get(question.type.value, 0) + 1
    return ExamProfile(total_questions=len(questions), type_distribution=distribution)


def generate_exam_profile(filepath) -> ExamProfile:
    return profile_questions(parse_gift_file(filepath))


def generate_text_histogram(type_distribution: Dict[str, int], total_questions: int) -> str:
    """Histograma ASCII, ordenado pela contagem."""
    max_count = max(type_distribution.values())
    lines = [
        "═" * REPORT_WIDTH,
        "QUESTION TYPE HISTOGRAM",
        "═" * REPORT_WIDTH,
        "",
    ]

    for qtype, count in sorted(type_distribution.items(), key=lambda x: -x[1]):
        percentage = count / total_questions * 100
        bar = "█" * round(count / max_count * HISTOGRAM_BAR_LENGTH)
        lines.append(f"{qtype:<20} ({count:>2}) │{bar:<{HISTOGRAM_BAR_LENGTH + 2}}│ {percentage:.1f}%")

    lines.append("")
    lines.append("─" * REPORT_WIDTH)
    lines.append(f"Total: {total_questions} questions")
    lines.append("─" * REPORT_WIDTH)
    return "\n".join(lines) + "\n"


def generate_profile_report(filepath) -> ProfileReport:
    profile = generate_exam_profile(filepath)
    histogram = generate_text_histogram(profile.type_distribution, profile.total_questions)
    return ProfileReport(histogram=histogram, profile=profile)


def save_profile_to_file(histogram: str, output_path, generated_at: datetime = None):
    """Guarda o histograma com um cabeçalho de data."""
    path = Path(output_path)
    directory = path.parent
    if not directory.is_dir():
        raise GiftFileError(f"Directory {directory} does not exist.", "DIR_NOT_FOUND")
    if not os.access(directory, os.W_OK):
        raise GiftFileError(f"Cannot write to {directory}. Check the permissions.", "PERMISSION_DENIED")

    stamp = (generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')
    content = "\n".join([
        "═" * REPORT_WIDTH,
        "EXAM PROFILE - QUESTION TYPE ANALYSIS",
        "═" * REPORT_WIDTH,
        f"Generated: {stamp}",
        "═" * REPORT_WIDTH,
        "",
        histogram,
    ])
    try:
        path.write_text(content, encoding='utf-8')
    except OSError as e:
        raise GiftFileError(f"Error saving {path}: {e}", "WRITE_ERROR") from e
    logger.info("Saved profile to %s", path)
