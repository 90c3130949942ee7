"""
Composição de exames.

O exame em curso vive num ficheiro JSON indicado explicitamente ao
ExamContext (por omissão em app_paths.get_current_exam_path()). Cada
operação que altera o exame atualiza `modified_at` e grava o ficheiro.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .constants import DEFAULT_EXAM_TITLE, MIN_EXAM_QUESTIONS, MAX_EXAM_QUESTIONS
from .errors import ExamError, GiftFileError, ValidationResult
from .gift_parser import Answer, QuestionType
from .question_bank import find_question

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now().isoformat(timespec='seconds')


@dataclass
class QuestionRef:
    """Cópia de uma pergunta da banca, identificada por (ficheiro, título)."""

    file: str
    title: str
    type: QuestionType
    question_text: str
    raw_content: str
    answers: Tuple[Answer, ...] = ()
    added_at: str = field(default_factory=_now)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.file, self.title)

    @classmethod
    def from_question(cls, file: str, question) -> "QuestionRef":
        return cls(
            file=file,
            title=question.title,
            type=question.type,
            question_text=question.question_text,
            raw_content=question.raw_content,
            answers=tuple(question.answers),
        )

    def to_dict(self) -> Dict:
        return {
            'file': self.file,
            'title': self.title,
            'type': self.type.value,
            'question_text': self.question_text,
            'raw_content': self.raw_content,
            'answers': [{'text': a.text, 'correct': a.correct} for a in self.answers],
            'added_at': self.added_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "QuestionRef":
        return cls(
            file=data['file'],
            title=data['title'],
            type=QuestionType.from_name(data.get('type', 'Unknown')),
            question_text=data.get('question_text', ''),
            raw_content=data.get('raw_content', ''),
            answers=tuple(Answer(a['text'], bool(a['correct'])) for a in data.get('answers', [])),
            added_at=data.get('added_at') or _now(),
        )


@dataclass
class Exam:
    title: str = DEFAULT_EXAM_TITLE
    created_at: str = field(default_factory=_now)
    modified_at: str = field(default_factory=_now)
    questions: List[QuestionRef] = field(default_factory=list)
    min_questions: int = MIN_EXAM_QUESTIONS
    max_questions: int = MAX_EXAM_QUESTIONS

    def type_distribution(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for question in self.questions:
            counts[question.type.value] = counts.get(question.type.value, 0) + 1
        return counts

    def touch(self):
        self.modified_at = _now()

    def to_dict(self) -> Dict:
        return {
            'title': self.title,
            'created_at': self.created_at,
            'modified_at': self.modified_at,
            'questions': [q.to_dict() for q in self.questions],
            'metadata': {
                'min_questions': self.min_questions,
                'max_questions': self.max_questions,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Exam":
        metadata = data.get('metadata', {})
        return cls(
            title=data.get('title', DEFAULT_EXAM_TITLE),
            created_at=data.get('created_at') or _now(),
            modified_at=data.get('modified_at') or _now(),
            questions=[QuestionRef.from_dict(q) for q in data.get('questions', [])],
            min_questions=metadata.get('min_questions', MIN_EXAM_QUESTIONS),
            max_questions=metadata.get('max_questions', MAX_EXAM_QUESTIONS),
        )


@dataclass
class ExamStats:
    title: str
    question_count: int
    min_required: int
    max_allowed: int
    type_distribution: Dict[str, int]
    files: List[str]

    @property
    def is_valid(self) -> bool:
        return self.min_required <= self.question_count <= self.max_allowed

    @property
    def file_count(self) -> int:
        return len(self.files)


class ExamContext:
    """Exame em curso, guardado em `exam_file`, com perguntas de `data_dir`."""

    def __init__(self, exam_file=None, data_dir: str = ".",
                 min_questions: int = MIN_EXAM_QUESTIONS,
                 max_questions: int = MAX_EXAM_QUESTIONS):
        if exam_file is None:
            from .app_paths import get_current_exam_path
            exam_file = get_current_exam_path()
        self.exam_file = Path(exam_file)
        self.data_dir = Path(data_dir)
        self.min_questions = min_questions
        self.max_questions = max_questions

    def _empty_exam(self, title: str = DEFAULT_EXAM_TITLE) -> Exam:
        return Exam(title=title, min_questions=self.min_questions, max_questions=self.max_questions)

    def exists(self) -> bool:
        return self.exam_file.exists()

    def load(self) -> Exam:
        """Lê o exame do disco; ficheiro em falta ou corrompido dá um exame vazio."""
        if not self.exam_file.exists():
            return self._empty_exam()
        try:
            with open(self.exam_file, 'r', encoding='utf-8') as f:
                return Exam.from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            logger.error("Error loading exam file %s: %s", self.exam_file, e)
            return self._empty_exam()

    def save(self, exam: Exam):
        try:
            self.exam_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.exam_file, 'w', encoding='utf-8') as f:
                json.dump(exam.to_dict(), f, ensure_ascii=False, indent=2)
        except PermissionError as e:
            raise GiftFileError(
                f"Cannot write {self.exam_file}. Check the folder permissions.", "PERMISSION_DENIED"
            ) from e
        except OSError as e:
            raise GiftFileError(f"Error writing {self.exam_file}: {e}", "WRITE_ERROR") from e

    def current(self) -> Exam:
        return self.load()

    def init_exam(self, title: str = DEFAULT_EXAM_TITLE) -> Exam:
        """Cria um exame novo, substituindo o atual."""
        exam = self._empty_exam(title.strip() or DEFAULT_EXAM_TITLE)
        self.save(exam)
        logger.info('Created exam "%s" in %s', exam.title, self.exam_file)
        return exam

    def add_question(self, file: str, title: str) -> Exam:
        if not self.exists():
            raise ExamError("No exam in progress. Use 'exam-init' to create a new exam.", "NO_EXAM")

        exam = self.load()
        if len(exam.questions) >= exam.max_questions:
            raise ExamError(
                f"An exam cannot contain more than {exam.max_questions} questions. "
                "Remove questions before adding new ones.",
                "EXAM_FULL",
            )
        if any(q.key == (file, title) for q in exam.questions):
            raise ExamError("This question is already in the exam. Choose another one.",
                            "DUPLICATE_QUESTION")

        question = find_question(self.data_dir, file, title)
        exam.questions.append(QuestionRef.from_question(file, question))
        exam.touch()
        self.save(exam)
        return exam

    def _require_questions(self, exam: Exam, action: str):
        if not exam.questions:
            raise ExamError(f"The exam is empty. No question to {action}.", "EMPTY_EXAM")

    def _check_index(self, exam: Exam, index: int, label: str = "Invalid index"):
        count = len(exam.questions)
        if not 1 <= index <= count:
            raise ExamError(
                f"{label}: {index}. The exam contains {count} question(s); "
                f"use an index between 1 and {count}.",
                "INVALID_INDEX",
            )

    def remove_question(self, index: int) -> Tuple[Exam, QuestionRef]:
        """Remove a pergunta na posição `index` (a partir de 1)."""
        exam = self.load()
        self._require_questions(exam, "remove")
        self._check_index(exam, index)

        removed = exam.questions.pop(index - 1)
        exam.touch()
        self.save(exam)
        return exam, removed

    def move_question(self, from_index: int, to_index: int) -> Exam:
        """Move uma pergunta de `from_index` para `to_index` (a partir de 1)."""
        exam = self.load()
        self._require_questions(exam, "move")
        self._check_index(exam, from_index, "Invalid source index")
        self._check_index(exam, to_index, "Invalid destination index")

        question = exam.questions.pop(from_index - 1)
        exam.questions.insert(to_index - 1, question)
        exam.touch()
        self.save(exam)
        return exam

    def clear(self) -> Exam:
        """Apaga o exame em curso."""
        if self.exam_file.exists():
            self.exam_file.unlink()
        return self._empty_exam()

    def validate(self, exam: Optional[Exam] = None) -> ValidationResult:
        exam = exam or self.load()
        errors = []
        warnings = []
        count = len(exam.questions)

        if count < exam.min_questions:
            errors.append(f"The exam must contain at least {exam.min_questions} questions. "
                          f"Currently: {count} question(s).")
        if count > exam.max_questions:
            errors.append(f"The exam cannot contain more than {exam.max_questions} questions. "
                          f"Currently: {count} question(s).")

        seen = set()
        for position, question in enumerate(exam.questions, 1):
            if question.key in seen:
                errors.append(f'Duplicate question at position {position}: '
                              f'"{question.title}" ({question.file})')
            seen.add(question.key)

        distribution = exam.type_distribution()
        if len(distribution) == 1:
            warnings.append("The exam contains a single question type. Consider adding more variety.")
        unknown = distribution.get(QuestionType.UNKNOWN.value, 0)
        if unknown:
            warnings.append(f"The exam contains {unknown} question(s) of unknown type. "
                            "Check the GIFT format.")

        return ValidationResult.from_messages(
            errors, warnings, question_count=count,
            stats={'question_count': count, 'type_distribution': distribution},
        )

    def stats(self) -> ExamStats:
        exam = self.load()
        files = []
        for question in exam.questions:
            if question.file not in files:
                files.append(question.file)
        return ExamStats(
            title=exam.title,
            question_count=len(exam.questions),
            min_required=exam.min_questions,
            max_allowed=exam.max_questions,
            type_distribution=exam.type_distribution(),
            files=files,
        )
