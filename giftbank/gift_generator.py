"""
Gerador de ficheiros GIFT a partir de perguntas já parseadas.

O conteúdo de cada pergunta é reaproveitado tal como veio do ficheiro de
origem (já é GIFT válido), por isso não volta a ser escapado.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence, Union

from .constants import BRACE_TOLERANCE
from .errors import ExamError, GiftFileError, GiftFormatError, ValidationResult

logger = logging.getLogger(__name__)

_QUESTION_MARKER_RE = re.compile(r'::[^:]+::')
_SEPARATOR = "// ========================================"

Timestamp = Union[datetime, str, None]


@dataclass
class GiftPreview:
    content: str
    truncated: bool
    total_lines: int
    showing_lines: Optional[int] = None


@dataclass
class GenerationResult:
    path: Path
    size: int
    question_count: int
    validation: ValidationResult = field(default_factory=lambda: ValidationResult(valid=True))


def format_date(value: Timestamp) -> str:
    """Formata uma data para o cabeçalho (aceita datetime ou ISO-8601)."""
    if value is None:
        return "-"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return value
    return value.strftime('%Y-%m-%d %H:%M')


def generate_gift_header(exam_title: str, created_at: Timestamp, modified_at: Timestamp,
                         question_count: int, generated_at: Timestamp = None) -> str:
    """Cabeçalho em comentários com os metadados do exame."""
    header = [
        _SEPARATOR,
        f"// {' '.join(exam_title.split())}",
        _SEPARATOR,
        f"// Generated: {format_date(generated_at or datetime.now())}",
        f"// Questions: {question_count}",
        "// Format: GIFT (Moodle)",
        "//",
        f"// Created: {format_date(created_at)}",
        f"// Last modified: {format_date(modified_at)}",
        _SEPARATOR,
        "",
    ]
    return "\n".join(header)


def _strip_trailing_comments(raw_content: str) -> str:
    """Remove comentários `//` no fim do conteúdo.

    Ao reler um ficheiro gerado, os comentários da pergunta seguinte ficam
    colados ao conteúdo da anterior.
    """
    lines = raw_content.split("\n")
    while lines and (not lines[-1].strip() or lines[-1].lstrip().startswith("//")):
        lines.pop()
    return "\n".join(lines)


def question_to_gift(question, index: int) -> str:
    """Converte uma pergunta (Question ou QuestionRef) em texto GIFT."""
    lines = []
    if index > 0:
        lines.append("")

    lines.append(f"// Question {index + 1}")
    lines.append(f"// Type: {question.type}")
    lines.append(f"// Source: {getattr(question, 'file', None) or '-'}")
    lines.append("")
    lines.append(f"::{question.title}::{_strip_trailing_comments(question.raw_content)}")
    return "\n".join(lines)


def serialize(exam_title: str, created_at: Timestamp, modified_at: Timestamp,
              questions: Sequence, generated_at: Timestamp = None) -> str:
    """Gera o conteúdo GIFT completo e valida a sintaxe do resultado.

    Raises:
        GiftFormatError: sem perguntas, ou resultado sem `::` / `{`.
    """
    if not questions:
        raise GiftFormatError("The exam is empty. Cannot generate a GIFT file.")

    parts = [generate_gift_header(exam_title, created_at, modified_at, len(questions), generated_at)]
    for index, question in enumerate(questions):
        parts.append(question_to_gift(question, index))

    parts.append("")
    parts.append(_SEPARATOR)
    parts.append(f"// End of exam - {len(questions)} questions")
    parts.append(_SEPARATOR)
    parts.append("")
    content = "\n".join(parts)

    validation = validate_syntax(content)
    for warning in validation.warnings:
        logger.warning(warning)
    if not validation.valid:
        raise GiftFormatError(
            "The generated GIFT file contains errors:\n"
            + "\n".join(f"  {i}. {error}" for i, error in enumerate(validation.errors, 1))
        )
    return content


def generate_gift_content(exam) -> str:
    """Conteúdo GIFT de um Exam (ver exam_manager)."""
    return serialize(exam.title, exam.created_at, exam.modified_at, exam.questions)


def validate_syntax(content: str) -> ValidationResult:
    """Validação básica da sintaxe GIFT."""
    errors = []
    warnings = []

    question_count = len(_QUESTION_MARKER_RE.findall(content))
    if question_count == 0:
        errors.append("No question found in the GIFT content")

    open_braces = content.count('{')
    close_braces = content.count('}')
    if abs(open_braces - close_braces) > BRACE_TOLERANCE:
        warnings.append(
            f"Unbalanced braces: {open_braces} opened, {close_braces} closed. "
            "This may cause problems when importing into Moodle."
        )

    if '::' not in content or '{' not in content:
        errors.append("The content does not look like valid GIFT questions")

    return ValidationResult.from_messages(errors, warnings, question_count=question_count)


def preview_gift_file(exam, max_lines: int = 50) -> GiftPreview:
    """Pré-visualiza o ficheiro GIFT sem o guardar."""
    content = generate_gift_content(exam)
    lines = content.split("\n")

    if len(lines) <= max_lines:
        return GiftPreview(content=content, truncated=False, total_lines=len(lines))

    return GiftPreview(
        content="\n".join(lines[:max_lines]) + "\n\n// ... (truncated)",
        truncated=True,
        total_lines=len(lines),
        showing_lines=max_lines,
    )


def get_default_filename(exam_title: str, today: date = None) -> str:
    """Nome de ficheiro por omissão a partir do título do exame."""
    sanitized = re.sub(r'[^a-z0-9]+', '_', exam_title.lower()).strip('_')[:50]
    stamp = (today or date.today()).isoformat()
    return f"{sanitized or 'exam'}_{stamp}.gift"


def save_gift_file(content: str, file_path) -> int:
    """Guarda o conteúdo em disco e retorna o tamanho escrito."""
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
    except PermissionError as e:
        raise GiftFileError(
            f"Cannot write {path}. Check the folder permissions.", "PERMISSION_DENIED"
        ) from e
    except OSError as e:
        raise GiftFileError(f"Error writing {path}: {e}", "WRITE_ERROR") from e
    logger.info("Wrote %d characters to %s", len(content), path)
    return len(content)


def generate_gift_file(exam, output_path) -> GenerationResult:
    """Valida o tamanho do exame, gera o GIFT e guarda-o em disco."""
    count = len(exam.questions)
    if count < exam.min_questions:
        raise ExamError(
            f"The exam must contain at least {exam.min_questions} questions. "
            f"Currently: {count} question(s).",
            "TOO_FEW_QUESTIONS",
        )
    if count > exam.max_questions:
        raise ExamError(
            f"The exam cannot contain more than {exam.max_questions} questions. "
            f"Currently: {count} question(s).",
            "TOO_MANY_QUESTIONS",
        )

    content = generate_gift_content(exam)
    validation = validate_syntax(content)
    size = save_gift_file(content, output_path)

    return GenerationResult(
        path=Path(output_path),
        size=size,
        question_count=count,
        validation=validation,
    )

