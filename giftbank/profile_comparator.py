"""
Comparação do perfil de um exame com o perfil da banca de perguntas.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .constants import (
    GIFT_FILE_EXTENSION, MIN_BANK_QUESTIONS, REPORT_WIDTH,
    SIGNIFICANT_DIFFERENCE, STRONG_DIFFERENCE
)
from .errors import GiftError, GiftFileError, ProfileError
from .exam_profile import ExamProfile, generate_exam_profile

logger = logging.getLogger(__name__)


@dataclass
class BankProfile:
    path: Path
    total_questions: int
    type_distribution: Dict[str, int]
    files_analyzed: int
    file_stats: List[Dict] = field(default_factory=list)

    def percentages(self) -> Dict[str, float]:
        return {qtype: count / self.total_questions * 100
                for qtype, count in self.type_distribution.items()}


@dataclass
class TypeComparison:
    type: str
    exam_count: int
    exam_percent: float
    bank_percent: float

    @property
    def difference(self) -> float:
        return self.exam_percent - self.bank_percent

    @property
    def relative_difference(self) -> Optional[float]:
        if self.bank_percent > 0:
            return self.difference / self.bank_percent * 100
        return None


@dataclass
class ProfileComparison:
    exam_path: Path
    exam: ExamProfile
    bank: BankProfile
    comparisons: List[TypeComparison]

    @property
    def significant(self) -> List[TypeComparison]:
        return [c for c in self.comparisons if abs(c.difference) > SIGNIFICANT_DIFFERENCE]

    @property
    def overrepresented(self) -> List[TypeComparison]:
        return [c for c in self.comparisons if c.difference > STRONG_DIFFERENCE]

    @property
    def underrepresented(self) -> List[TypeComparison]:
        return [c for c in self.comparisons if c.difference < -STRONG_DIFFERENCE]


def generate_bank_profile(bank_path) -> BankProfile:
    """Perfil agregado de um ficheiro ou de todos os .gift de uma pasta."""
    path = Path(bank_path)
    if not path.exists():
        raise GiftFileError(f"{path} not found.", "FILE_NOT_FOUND")

    if path.is_dir():
        files = sorted(p for p in path.iterdir()
                       if p.is_file() and p.suffix.lower() == GIFT_FILE_EXTENSION)
    else:
        files = [path]
    if not files:
        raise GiftFileError("No GIFT file found in the bank.", "NO_FILES")

    total = 0
    distribution: Dict[str, int] = {}
    file_stats = []
    for file in files:
        try:
            profile = generate_exam_profile(file)
        except GiftError as e:
            logger.warning("Skipping %s: %s", file.name, e)
            continue
        total += profile.total_questions
        for qtype, count in profile.type_distribution.items():
            distribution[qtype] = distribution.get(qtype, 0) + count
        file_stats.append({
            'file': file.name,
            'questions': profile.total_questions,
            'types': profile.type_distribution,
        })

    if total == 0:
        raise ProfileError("No valid question found in the bank.", "NO_QUESTIONS")

    return BankProfile(
        path=path,
        total_questions=total,
        type_distribution=distribution,
        files_analyzed=len(files),
        file_stats=file_stats,
    )


def compare_profiles(exam_path, bank_path) -> ProfileComparison:
    exam = generate_exam_profile(exam_path)
    bank = generate_bank_profile(bank_path)

    if bank.total_questions < MIN_BANK_QUESTIONS:
        raise ProfileError(
            "The bank does not contain enough questions for a meaningful comparison "
            f"(minimum {MIN_BANK_QUESTIONS}).",
            "INSUFFICIENT_DATA",
        )

    exam_percentages = exam.percentages()
    bank_percentages = bank.percentages()
    types = list(exam_percentages)
    types.extend(t for t in bank_percentages if t not in exam_percentages)

    comparisons = [
        TypeComparison(
            type=qtype,
            exam_count=exam.type_distribution.get(qtype, 0),
            exam_percent=exam_percentages.get(qtype, 0.0),
            bank_percent=bank_percentages.get(qtype, 0.0),
        )
        for qtype in types
    ]
    comparisons.sort(key=lambda c: abs(c.difference), reverse=True)

    return ProfileComparison(exam_path=Path(exam_path), exam=exam, bank=bank, comparisons=comparisons)


def _signed(value: float) -> str:
    return f"{value:+.1f}%"


def generate_comparison_report(comparison: ProfileComparison) -> str:
    heavy = "═" * REPORT_WIDTH
    light = "─" * REPORT_WIDTH
    lines = [heavy, "PROFILE COMPARISON REPORT", heavy, ""]

    lines.append("ANALYZED EXAM:")
    lines.append(f"   File: {comparison.exam_path.name}")
    lines.append(f"   Questions: {comparison.exam.total_questions}")
    lines.append("")

    lines.append("REFERENCE BANK:")
    if comparison.bank.files_analyzed > 1:
        lines.append(f"   Files analyzed: {comparison.bank.files_analyzed}")
    else:
        lines.append(f"   File: {comparison.bank.path.name}")
    lines.append(f"   Total questions: {comparison.bank.total_questions}")
    lines.append("")

    lines.extend([heavy, "COMPARISON BY QUESTION TYPE", heavy, ""])
    lines.append("Type                   Exam      Bank      Diff")
    lines.append(light)
    for c in comparison.comparisons:
        lines.append(f"{c.type:<20} {c.exam_percent:>7.1f}%  {c.bank_percent:>7.1f}%  {_signed(c.difference):>8}")

    lines.extend(["", heavy, "GAP ANALYSIS", heavy, ""])
    if comparison.significant:
        for c in comparison.significant:
            lines.append(f'Your exam contains {c.exam_percent:.1f}% of "{c.type}" questions,')
            lines.append(f"   against {c.bank_percent:.1f}% on average in the bank.")
            lines.append(f"   Gap: {c.difference:+.1f} percentage points.")
            lines.append("")
    else:
        lines.append("Your exam has a distribution similar to the bank.")
        lines.append(f"   No significant gap detected (> {SIGNIFICANT_DIFFERENCE:.0f}%).")
        lines.append("")

    lines.extend([heavy, "RECOMMENDATIONS", heavy, ""])
    if comparison.overrepresented:
        lines.append("Overrepresented types:")
        for c in comparison.overrepresented:
            lines.append(f"   - {c.type}: reduce by {abs(c.difference):.1f}%")
        lines.append("")
    if comparison.underrepresented:
        lines.append("Underrepresented types:")
        for c in comparison.underrepresented:
            lines.append(f"   - {c.type}: increase by {abs(c.difference):.1f}%")
        lines.append("")
    if not comparison.overrepresented and not comparison.underrepresented:
        lines.append("Your exam distribution is balanced.")
        lines.append("")

    lines.append(light)
    return "\n".join(lines) + "\n"


def save_comparison_report(report: str, output_path, generated_at: datetime = None):
    path = Path(output_path)
    stamp = (generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')
    content = "\n".join([
        "═" * REPORT_WIDTH,
        "EXAM PROFILE COMPARISON",
        "═" * REPORT_WIDTH,
        f"Generated: {stamp}",
        "═" * REPORT_WIDTH,
        "",
        report,
    ])
    try:
        path.write_text(content, encoding='utf-8')
    except OSError as e:
        raise GiftFileError(f"Error saving {path}: {e}", "WRITE_ERROR") from e
    logger.info("Saved comparison report to %s", path)
