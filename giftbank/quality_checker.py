"""
Validador de exames GIFT - verifica a qualidade e gera estatísticas.
"""

import logging
from typing import Dict, List, Sequence

from .constants import MIN_EXAM_QUESTIONS, MAX_EXAM_QUESTIONS
from .errors import GiftError, ValidationResult
from .gift_parser import Question, QuestionType
from .question_bank import parse_gift_file

logger = logging.getLogger(__name__)

# Tipos cujos blocos não têm respostas = / ~
_NO_ANSWER_TYPES = (QuestionType.ESSAY, QuestionType.TRUE_FALSE, QuestionType.NUMERICAL)


def verify_questions(questions: Sequence[Question],
                     min_questions: int = MIN_EXAM_QUESTIONS,
                     max_questions: int = MAX_EXAM_QUESTIONS) -> ValidationResult:
    """Aplica as verificações de qualidade a uma lista de perguntas."""
    errors: List[str] = []
    warnings: List[str] = []
    count = len(questions)

    if count < min_questions:
        errors.append(f"Not enough questions: {count}/{min_questions} minimum")
    if count > max_questions:
        errors.append(f"Too many questions: {count}/{max_questions} maximum")

    seen = set()
    duplicates = []
    for position, question in enumerate(questions, 1):
        if question.title in seen:
            duplicates.append(f'Question "{question.title}" duplicated at position {position}')
        seen.add(question.title)
    errors.extend(duplicates)

    no_answers = [
        f'Question {position} "{q.title}" has no answers'
        for position, q in enumerate(questions, 1)
        if not q.answers and q.type not in _NO_ANSWER_TYPES
    ]
    errors.extend(no_answers)

    no_correct = [
        f'Question {position} "{q.title}" has no correct answer'
        for position, q in enumerate(questions, 1)
        if q.type is QuestionType.MULTIPLE_CHOICE and q.answers
        and not any(a.correct for a in q.answers)
    ]
    errors.extend(no_correct)

    distribution: Dict[str, int] = {}
    for question in questions:
        distribution[question.type.value] = distribution.get(question.type.value, 0) + 1

    unknown = distribution.get(QuestionType.UNKNOWN.value, 0)
    if unknown:
        warnings.append(f"{unknown} question(s) of unknown type detected. Check the GIFT format.")
    if len(distribution) == 1:
        warnings.append("The exam contains a single question type. Consider adding more variety.")

    return ValidationResult.from_messages(
        errors, warnings, question_count=count,
        stats={
            'total_questions': count,
            'type_distribution': distribution,
            'duplicates': len(duplicates),
            'missing_answers': len(no_answers),
            'missing_correct': len(no_correct),
        },
    )


def verify_gift_exam(filepath, min_questions: int = MIN_EXAM_QUESTIONS,
                     max_questions: int = MAX_EXAM_QUESTIONS) -> ValidationResult:
    """Valida um ficheiro GIFT; erros de leitura dão um resultado inválido."""
    try:
        questions = parse_gift_file(filepath)
    except GiftError as e:
        logger.warning("Quality check of %s failed: %s", filepath, e)
        return ValidationResult.from_messages([f"Error reading the file: {e}"], [])
    return verify_questions(questions, min_questions, max_questions)


def format_report(result: ValidationResult, source: str = None) -> str:
    """Relatório de validação em texto."""
    lines = ["", "=" * 70, "GIFT EXAM QUALITY REPORT", "=" * 70]
    if source:
        lines.append(f"File: {source}")

    stats = result.stats
    if stats:
        lines.append("")
        lines.append("📊 STATISTICS")
        lines.append(f"   Total questions: {stats['total_questions']}")
        for qtype, count in sorted(stats['type_distribution'].items(), key=lambda x: -x[1]):
            lines.append(f"   {qtype:20s} {count:3d}")

    lines.append("")
    lines.append("✅ VALIDATION")
    if result.errors:
        for error in result.errors:
            lines.append(f"   ✗ {error}")
    else:
        lines.append("   ✓ No errors")
    for warning in result.warnings:
        lines.append(f"   ⚠ {warning}")

    lines.append("")
    lines.append("=" * 70)
    if result.valid:
        lines.append("✓ EXAM IS VALID AND READY TO IMPORT INTO MOODLE!")
    else:
        lines.append("⚠ EXAM NEEDS FIXES BEFORE IMPORTING")
    lines.append("=" * 70)
    return "\n".join(lines)


def print_report(result: ValidationResult, source: str = None):
    """Imprime um relatório de validação."""
    print(format_report(result, source))
