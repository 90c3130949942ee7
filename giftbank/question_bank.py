"""
Acesso à banca de perguntas: leitura de ficheiros .gift, pesquisa e estatísticas.

É a única camada que lê ficheiros GIFT do disco; o parser recebe o texto.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .constants import GIFT_FILE_EXTENSION
from .errors import ExamError, GiftFileError
from .gift_parser import Question, QuestionType, parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    file: str
    question: Question


@dataclass
class BankStats:
    total_files: int
    total_questions: int
    by_type: Dict[str, int]
    by_file: Dict[str, int]

    @property
    def average_per_file(self) -> int:
        return round(self.total_questions / self.total_files) if self.total_files else 0


def read_gift_file(file_path) -> str:
    """Lê um ficheiro GIFT, verificando existência, permissões e conteúdo."""
    path = Path(file_path)
    if not path.exists():
        raise GiftFileError(f"File {path} not found. Check the path.", "FILE_NOT_FOUND")
    if not path.is_file():
        raise GiftFileError(f"{path} is not a file.", "NOT_A_FILE")
    if not os.access(path, os.R_OK):
        raise GiftFileError(f"Cannot read {path}. Check the permissions.", "PERMISSION_DENIED")

    try:
        content = path.read_text(encoding='utf-8-sig')
    except PermissionError as e:
        raise GiftFileError(f"Cannot read {path}. Check the permissions.", "PERMISSION_DENIED") from e
    except UnicodeDecodeError as e:
        raise GiftFileError(f"File {path} is not UTF-8 encoded. Convert it and try again.",
                            "INVALID_ENCODING") from e
    except OSError as e:
        raise GiftFileError(f"Error reading {path}: {e}", "READ_ERROR") from e

    if not content.strip():
        raise GiftFileError(f"File {path} is empty.", "EMPTY_FILE")
    return content


def parse_gift_file(file_path) -> List[Question]:
    """Lê e faz parse de um ficheiro GIFT."""
    questions = parse(read_gift_file(file_path))
    logger.debug("Loaded %d question(s) from %s", len(questions), file_path)
    return questions


def list_gift_files(data_dir) -> List[Path]:
    """Ficheiros .gift de uma pasta, por ordem alfabética."""
    directory = Path(data_dir)
    if not directory.is_dir():
        raise GiftFileError(f'Directory "{directory}" does not exist.', "DIR_NOT_FOUND")
    return sorted(p for p in directory.iterdir()
                  if p.is_file() and p.suffix.lower() == GIFT_FILE_EXTENSION)


def _load_bank(data_dir) -> Dict[str, List[Question]]:
    """{nome do ficheiro: perguntas}; ficheiros ilegíveis são ignorados."""
    bank = {}
    for path in list_gift_files(data_dir):
        try:
            bank[path.name] = parse_gift_file(path)
        except GiftFileError as e:
            logger.warning("Skipping %s: %s", path.name, e)
    return bank


def _matches_keyword(question: Question, keyword: str) -> bool:
    keyword = keyword.lower()
    return (keyword in question.title.lower()
            or keyword in question.question_text.lower()
            or keyword in question.raw_content.lower())


def search_questions(data_dir, qtype: Optional[str] = None, keyword: Optional[str] = None) -> List[SearchResult]:
    """Pesquisa perguntas por tipo e/ou palavra-chave em todos os ficheiros."""
    results = []
    for file_name, questions in _load_bank(data_dir).items():
        for question in questions:
            if qtype and question.type.value.lower() != str(qtype).lower():
                continue
            if keyword and not _matches_keyword(question, keyword):
                continue
            results.append(SearchResult(file_name, question))
    return results


def get_question_stats(data_dir) -> BankStats:
    """Estatísticas por tipo e por ficheiro."""
    by_type: Dict[str, int] = {}
    by_file: Dict[str, int] = {}
    total = 0

    bank = _load_bank(data_dir)
    for file_name, questions in bank.items():
        by_file[file_name] = len(questions)
        total += len(questions)
        for question in questions:
            by_type[question.type.value] = by_type.get(question.type.value, 0) + 1

    return BankStats(total_files=len(bank), total_questions=total, by_type=by_type, by_file=by_file)


def get_available_types(data_dir) -> List[str]:
    """Tipos de pergunta presentes na banca."""
    types = set()
    for questions in _load_bank(data_dir).values():
        types.update(q.type.value for q in questions)
    return sorted(types)


def find_question(data_dir, file_name: str, title: str) -> Question:
    """Procura uma pergunta pelo par (ficheiro, título)."""
    path = Path(data_dir) / file_name
    if not path.exists():
        raise GiftFileError(f'File "{file_name}" does not exist in {data_dir}', "FILE_NOT_FOUND")

    question = next((q for q in parse_gift_file(path) if q.title == title), None)
    if question is None:
        raise ExamError(f'Question "{title}" was not found in {file_name}', "QUESTION_NOT_FOUND")
    return question


def known_types() -> List[str]:
    return [qtype.value for qtype in QuestionType]
