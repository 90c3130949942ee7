"""
GiftBank - banca de perguntas GIFT (Moodle): parser, exames e simulação.
"""

from .constants import APP_VERSION as __version__
from .errors import (
    GiftError, GiftFormatError, GiftFileError, ExamError, ProfileError, ValidationResult
)
from .gift_escape import escape_gift, unescape_gift
from .gift_generator import serialize, validate_syntax
from .gift_parser import (
    Answer, Gap, GiftParser, MatchPair, NumericAnswer, Question, QuestionType,
    classify, extract_answer_gaps, parse
)

escape = escape_gift

__all__ = [
    "Answer", "Gap", "GiftParser", "MatchPair", "NumericAnswer", "Question", "QuestionType",
    "GiftError", "GiftFormatError", "GiftFileError", "ExamError", "ProfileError",
    "ValidationResult",
    "parse", "classify", "extract_answer_gaps", "serialize", "validate_syntax",
    "escape", "escape_gift", "unescape_gift",
]
