"""
Importação e exportação de ficheiros GIFT para dentro e fora da banca.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from .constants import DEFAULT_DATA_DIR, GIFT_FILE_EXTENSION
from .errors import GiftFileError, GiftFormatError
from .question_bank import parse_gift_file

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    path: Path
    total_questions: int
    type_distribution: Dict[str, int] = field(default_factory=dict)
    destination: Path = None


def import_gift_file(file_path) -> ImportSummary:
    """Verifica que um ficheiro é GIFT utilizável e resume o seu conteúdo."""
    path = Path(file_path)
    if path.exists() and path.suffix.lower() != GIFT_FILE_EXTENSION:
        raise GiftFileError(f"The file must have the {GIFT_FILE_EXTENSION} extension.",
                            "INVALID_EXTENSION")

    questions = parse_gift_file(path)
    if not questions:
        raise GiftFormatError("The file is not valid GIFT. No question found.")

    distribution: Dict[str, int] = {}
    for question in questions:
        distribution[question.type.value] = distribution.get(question.type.value, 0) + 1
    return ImportSummary(path=path, total_questions=len(questions), type_distribution=distribution)


def _copy(source: Path, destination: Path):
    directory = destination.parent
    if not directory.is_dir():
        raise GiftFileError(f"Destination folder {directory} does not exist.", "DIR_NOT_FOUND")
    if not os.access(directory, os.W_OK):
        raise GiftFileError(f"Cannot write to {directory}. Check the permissions.", "PERMISSION_DENIED")
    if destination.exists():
        raise GiftFileError(f"File {destination} already exists. Remove it first or choose another name.",
                            "FILE_EXISTS")
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise GiftFileError(f"Error copying to {destination}: {e}", "WRITE_ERROR") from e
    logger.info("Copied %s to %s", source, destination)


def export_gift_file(source_path, destination) -> ImportSummary:
    """Copia um ficheiro GIFT válido para um ficheiro ou pasta de destino."""
    summary = import_gift_file(source_path)
    target = Path(destination)
    if target.is_dir():
        target = target / summary.path.name
    elif str(destination).endswith(('/', '\\')):
        raise GiftFileError(f"Destination folder {destination} does not exist.", "DIR_NOT_FOUND")

    _copy(summary.path, target)
    summary.destination = target
    return summary


def import_to_bank(file_path, bank_dir=DEFAULT_DATA_DIR) -> ImportSummary:
    """Copia um ficheiro GIFT válido para a pasta da banca."""
    summary = import_gift_file(file_path)
    bank = Path(bank_dir)
    if not bank.is_dir():
        raise GiftFileError(f"Bank folder {bank} does not exist.", "DIR_NOT_FOUND")

    target = bank / summary.path.name
    _copy(summary.path, target)
    summary.destination = target
    return summary
