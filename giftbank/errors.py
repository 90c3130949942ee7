"""
Erros e resultados de validação partilhados pelos módulos do giftbank.
"""

from dataclasses import dataclass, field
from typing import Dict, List


class GiftError(Exception):
    """Erro base. `error_type` identifica a condição (ex: INVALID_FORMAT)."""

    error_type = "ERROR"

    def __init__(self, message: str, error_type: str = None):
        super().__init__(message)
        if error_type:
            self.error_type = error_type


class GiftFormatError(GiftError):
    """Conteúdo GIFT estruturalmente vazio ou degenerado."""

    error_type = "INVALID_FORMAT"


class GiftFileError(GiftError):
    """Problemas de acesso a ficheiros e pastas."""

    error_type = "FILE_ERROR"


class ExamError(GiftError):
    """Operação inválida sobre a composição do exame."""

    error_type = "EXAM_ERROR"


class ProfileError(GiftError):
    """Dados insuficientes para gerar ou comparar perfis."""

    error_type = "PROFILE_ERROR"


@dataclass
class ValidationResult:
    """Resultado de uma validação: erros bloqueiam, avisos não."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    question_count: int = 0
    stats: Dict = field(default_factory=dict)

    @classmethod
    def from_messages(cls, errors: List[str], warnings: List[str],
                      question_count: int = 0, stats: Dict = None) -> "ValidationResult":
        return cls(
            valid=not errors,
            errors=list(errors),
            warnings=list(warnings),
            question_count=question_count,
            stats=stats or {},
        )
