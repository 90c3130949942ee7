"""
Parser para conteúdo GIFT.
Divide o texto em perguntas, classifica cada pergunta e extrai as respostas.

Todas as funções recebem texto já lido; o acesso a ficheiros fica em
question_bank. Nenhuma função levanta exceções por markup mal formado:
no pior caso a pergunta fica como Unknown e/ou sem respostas.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from .constants import MIN_QUESTION_CONTENT_LENGTH, QUESTION_TEXT_PLACEHOLDER
from .gift_escape import unescape_gift

logger = logging.getLogger(__name__)


class QuestionType(str, Enum):
    """Tipos de pergunta reconhecidos pelo classificador."""

    MULTIPLE_CHOICE = "MultipleChoice"
    SHORT_ANSWER = "ShortAnswer"
    TRUE_FALSE = "TrueFalse"
    NUMERICAL = "Numerical"
    MATCHING = "Matching"
    ESSAY = "Essay"
    UNKNOWN = "Unknown"

    def __str__(self):
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "QuestionType":
        """Procura um tipo pelo nome, sem distinguir maiúsculas."""
        for qtype in cls:
            if qtype.value.lower() == str(name).strip().lower():
                return qtype
        return cls.UNKNOWN


@dataclass(frozen=True)
class Answer:
    """Uma resposta, já sem feedback nem prefixos de tipo."""

    text: str
    correct: bool


@dataclass(frozen=True)
class MatchPair:
    prompt: str
    target: str


@dataclass(frozen=True)
class Gap:
    """Um bloco {...} de uma pergunta com vários espaços (cloze)."""

    index: int
    answers: Tuple[Answer, ...]


@dataclass(frozen=True)
class NumericAnswer:
    """Intervalo aceite para uma resposta numérica."""

    low: float
    high: float

    def accepts(self, value: float) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class RawQuestion:
    title: str
    content: str
    category: Optional[str] = None


@dataclass(frozen=True)
class Question:
    """Representa uma pergunta do ficheiro GIFT."""

    title: str
    type: QuestionType
    raw_content: str
    question_text: str
    answers: Tuple[Answer, ...] = ()
    category: Optional[str] = None
    pairs: Tuple[MatchPair, ...] = ()

    def correct_answers(self) -> List[str]:
        """Textos das respostas corretas, pela ordem do ficheiro."""
        return [answer.text for answer in self.answers if answer.correct]

    def get_correct_answer(self) -> Optional[int]:
        """Retorna o índice da primeira resposta correta."""
        for i, answer in enumerate(self.answers):
            if answer.correct:
                return i
        return None

    def __repr__(self):
        return f"Question({self.title!r}, {self.type.value}, {len(self.answers)} answers)"


_TITLE_RE = re.compile(r'^::([^:]+)::(.*)$')
_SECTION_RE = re.compile(r'^//\s?Part\s')
_CATEGORY_RE = re.compile(r'^\$CATEGORY:\s*(.*)$')
_BLOCK_RE = re.compile(r'(?<!\\)\{(.*?)(?<!\\)\}', re.DOTALL)
_TYPE_PREFIX_RE = re.compile(r'^\d+:(MC|SA|NUMERICAL|SHORTANSWER|MULTICHOICE):', re.IGNORECASE)
_HTML_TAG_RE = re.compile(r'<[^>]*>')
_TRUE_FALSE_RE = re.compile(r'^\s*(TRUE|FALSE|T|F)\s*(?:[#~].*)?$', re.IGNORECASE | re.DOTALL)
_MATCHING_RE = re.compile(r'(?<!\\)=[^~]*?->')
_MARKER_RE = re.compile(r'(?<!\\)([~=])')
_TILDE_RE = re.compile(r'(?<!\\)~')
_EQUALS_RE = re.compile(r'(?<!\\)=')
_FEEDBACK_RE = re.compile(r'(?<!\\)#')
_WEIGHT_RE = re.compile(r'^\s*%-?\d+(?:\.\d+)?%')


def _normalize_newlines(text: str) -> str:
    return text.replace('\r\n', '\n').replace('\r', '\n')


# ---------------------------------------------------------------------------
# Divisão em perguntas
# ---------------------------------------------------------------------------

def _flush(records: List[RawQuestion], title: Optional[str], buffer: List[str],
           category: Optional[str]):
    """Guarda a pergunta acumulada se tiver markup de respostas."""
    if title is None:
        return
    content = "\n".join(buffer).strip()
    if len(content) >= MIN_QUESTION_CONTENT_LENGTH and '{' in content:
        records.append(RawQuestion(title, content, category))


def split_questions(text: str) -> List[RawQuestion]:
    """Divide o texto em pares (título, conteúdo) pela ordem do ficheiro.

    Uma linha `::título::resto` abre uma pergunta. Um comentário `// Part n`
    fecha a pergunta atual e o texto até ao próximo título é ignorado. Uma
    linha `$CATEGORY:` também fecha a pergunta e muda a categoria corrente.
    """
    records: List[RawQuestion] = []
    title = None
    buffer: List[str] = []
    category = None

    for line in _normalize_newlines(text).split('\n'):
        title_match = _TITLE_RE.match(line)
        if title_match:
            _flush(records, title, buffer, category)
            title = title_match.group(1).strip()
            buffer = [title_match.group(2)]
            continue

        stripped = line.strip()

        category_match = _CATEGORY_RE.match(stripped)
        if category_match:
            _flush(records, title, buffer, category)
            title, buffer = None, []
            category = category_match.group(1).strip() or None
            continue

        if title is None:
            continue

        if _SECTION_RE.match(stripped):
            _flush(records, title, buffer, category)
            title, buffer = None, []
            continue

        buffer.append(line)

    _flush(records, title, buffer, category)
    return records


# ---------------------------------------------------------------------------
# Blocos de respostas
# ---------------------------------------------------------------------------

def _raw_blocks(raw_content: str) -> List[str]:
    return [match.group(1) for match in _BLOCK_RE.finditer(raw_content)]


def _clean_block(block: str) -> str:
    """Remove prefixos de tipo (1:MC:) e o marcador numérico (#)."""
    block = _TYPE_PREFIX_RE.sub('', block.strip(), count=1)
    if block.startswith('#'):
        block = block[1:]
    return block.strip()


def _iter_blocks(raw_content: str) -> Iterator[Tuple[int, str]]:
    """(índice a partir de 1, bloco limpo) para cada bloco {...}."""
    for index, block in enumerate(_raw_blocks(raw_content), start=1):
        yield index, _clean_block(block)


def extract_answer_blocks(raw_content: str) -> List[str]:
    """Todos os blocos {...} não vazios, limpos, pela ordem do documento."""
    return [block for _, block in _iter_blocks(raw_content) if block]


def _strip_feedback(text: str) -> str:
    match = _FEEDBACK_RE.search(text)
    return text[:match.start()] if match else text


def _make_answer(text: str, correct: bool) -> Optional[Answer]:
    text = unescape_gift(_strip_feedback(text).strip()).strip()
    if not text:
        return None
    return Answer(text, correct)


def _is_multiline(block: str) -> bool:
    marked = [line for line in (l.strip() for l in block.splitlines())
              if line.startswith(('~', '='))]
    return len(marked) >= 2


def _parse_multiline(block: str) -> List[Answer]:
    answers = []
    for line in block.splitlines():
        line = line.strip()
        if not line.startswith(('~', '=')):
            continue
        correct = line[0] == '='
        text = line[1:]
        if text.startswith('='):
            # ~=resposta também marca a resposta correta
            correct = True
            text = text[1:]
        answer = _make_answer(text, correct)
        if answer:
            answers.append(answer)
    return answers


def _parse_inline(block: str) -> List[Answer]:
    pieces = _MARKER_RE.split(block)
    # pieces = [antes do 1º marcador, marcador, texto, marcador, texto, ...]
    candidates = [('~', pieces[0])] + list(zip(pieces[1::2], pieces[2::2]))
    answers = []
    for marker, text in candidates:
        answer = _make_answer(text, marker == '=')
        if answer:
            answers.append(answer)
    return answers


def _parse_short_answers(block: str) -> List[Answer]:
    pieces = _MARKER_RE.split(block)
    answers = []
    for _, text in zip(pieces[1::2], pieces[2::2]):
        answer = _make_answer(text, True)
        if answer:
            answers.append(answer)

    if not answers:
        fallback = _make_answer(block[1:] if block.startswith('=') else block, True)
        if fallback:
            answers.append(fallback)
    return answers


def parse_answer_block(block: str) -> List[Answer]:
    """Converte um bloco limpo numa lista ordenada de respostas.

    Com `~` é escolha múltipla (formato em linha ou uma resposta por linha);
    só com `=` são respostas curtas, todas corretas; sem marcadores não há
    respostas (ensaio, numérico simples, verdadeiro/falso).
    """
    if _TILDE_RE.search(block):
        if _is_multiline(block):
            return _parse_multiline(block)
        return _parse_inline(block)
    if _EQUALS_RE.search(block):
        return _parse_short_answers(block)
    return []


def extract_answers(raw_content: str) -> List[Answer]:
    """Respostas de todos os blocos da pergunta, pela ordem do documento."""
    answers = []
    for block in extract_answer_blocks(raw_content):
        answers.extend(parse_answer_block(block))
    return answers


def extract_answer_gaps(raw_content: str) -> List[Gap]:
    """Um Gap por bloco com respostas; o índice conta todos os blocos."""
    gaps = []
    for index, block in _iter_blocks(raw_content):
        if not block:
            continue
        answers = parse_answer_block(block)
        if answers:
            gaps.append(Gap(index, tuple(answers)))
    return gaps


def extract_matching_pairs(raw_content: str) -> List[MatchPair]:
    """Pares `=esquerda -> direita` de perguntas de correspondência."""
    pairs = []
    for block in extract_answer_blocks(raw_content):
        for answer in parse_answer_block(block):
            if not answer.correct or '->' not in answer.text:
                continue
            prompt, _, target = answer.text.partition('->')
            if prompt.strip() and target.strip():
                pairs.append(MatchPair(prompt.strip(), target.strip()))
    return pairs


def extract_question_text(raw_content: str) -> str:
    """Texto para apresentação: blocos substituídos e sem tags HTML."""
    text = _BLOCK_RE.sub(QUESTION_TEXT_PLACEHOLDER, raw_content)
    text = _HTML_TAG_RE.sub('', text)
    return unescape_gift(text).strip()


# ---------------------------------------------------------------------------
# Classificação
# ---------------------------------------------------------------------------

def _is_numerical(block: str) -> bool:
    return block.lstrip().startswith('#')


def _is_matching(block: str) -> bool:
    return _MATCHING_RE.search(block) is not None


def _is_true_false(block: str) -> bool:
    return _TRUE_FALSE_RE.match(block) is not None


def _is_multiple_choice(block: str) -> bool:
    return _TILDE_RE.search(block) is not None


def _is_short_answer(block: str) -> bool:
    return _EQUALS_RE.search(block) is not None and '->' not in block


def _is_essay(block: str) -> bool:
    return not block.strip()


# Ordem de precedência: a primeira regra satisfeita por algum bloco ganha.
_CLASSIFICATION_RULES = (
    (_is_numerical, QuestionType.NUMERICAL),
    (_is_matching, QuestionType.MATCHING),
    (_is_true_false, QuestionType.TRUE_FALSE),
    (_is_multiple_choice, QuestionType.MULTIPLE_CHOICE),
    (_is_short_answer, QuestionType.SHORT_ANSWER),
    (_is_essay, QuestionType.ESSAY),
)


def classify(raw_content: str) -> QuestionType:
    """Determina o tipo da pergunta a partir do markup."""
    if '{1:MC:' in raw_content:
        return QuestionType.MULTIPLE_CHOICE
    if '{1:SA:' in raw_content:
        return QuestionType.SHORT_ANSWER

    blocks = _raw_blocks(raw_content)
    for rule, qtype in _CLASSIFICATION_RULES:
        if any(rule(block) for block in blocks):
            return qtype
    return QuestionType.UNKNOWN


# ---------------------------------------------------------------------------
# Blocos sem respostas = / ~
# ---------------------------------------------------------------------------

def true_false_value(raw_content: str) -> Optional[bool]:
    """Valor do primeiro bloco verdadeiro/falso, ou None."""
    for block in _raw_blocks(raw_content):
        match = _TRUE_FALSE_RE.match(block)
        if match:
            return match.group(1).upper().startswith('T')
    return None


def _parse_numeric(text: str) -> Optional[NumericAnswer]:
    text = _WEIGHT_RE.sub('', _strip_feedback(text)).strip()
    try:
        if '..' in text:
            low, high = (float(part) for part in text.split('..', 1))
            return NumericAnswer(min(low, high), max(low, high))
        if ':' in text:
            value, tolerance = (float(part) for part in text.split(':', 1))
            return NumericAnswer(value - abs(tolerance), value + abs(tolerance))
        value = float(text)
        return NumericAnswer(value, value)
    except ValueError:
        return None


def numeric_answers(raw_content: str) -> List[NumericAnswer]:
    """Intervalos aceites pelo primeiro bloco numérico ({#...})."""
    for block in _raw_blocks(raw_content):
        if not _is_numerical(block):
            continue
        body = block.strip()[1:]
        if _EQUALS_RE.search(body):
            pieces = _MARKER_RE.split(body)
            alternatives = [text for marker, text in zip(pieces[1::2], pieces[2::2]) if marker == '=']
        else:
            alternatives = [body]
        answers = []
        for alternative in alternatives:
            answer = _parse_numeric(alternative)
            if answer:
                answers.append(answer)
        return answers
    return []


# ---------------------------------------------------------------------------
# API pública
# ---------------------------------------------------------------------------

def build_question(title: str, raw_content: str, category: str = None) -> Question:
    """Constrói uma Question a partir do conteúdo bruto."""
    qtype = classify(raw_content)
    pairs = tuple(extract_matching_pairs(raw_content)) if qtype is QuestionType.MATCHING else ()
    return Question(
        title=title,
        type=qtype,
        raw_content=raw_content,
        question_text=extract_question_text(raw_content),
        answers=tuple(extract_answers(raw_content)),
        category=category,
        pairs=pairs,
    )


def parse(text: str) -> List[Question]:
    """Faz parse de conteúdo GIFT e devolve as perguntas encontradas."""
    questions = [build_question(record.title, record.content, record.category)
                 for record in split_questions(text)]
    logger.debug("Parsed %d question(s)", len(questions))
    return questions


class GiftParser:
    """Parser para conteúdo GIFT com consultas por categoria e tipo."""

    def __init__(self, content: str, source: str = None):
        self.source = source
        self.questions = parse(content)
        self.categories: Dict[str, List[Question]] = {}
        for question in self.questions:
            if question.category:
                self.categories.setdefault(question.category, []).append(question)

    def get_categories(self) -> List[str]:
        """Retorna lista de categorias disponíveis."""
        return sorted(self.categories.keys())

    def get_questions_by_category(self, category: str) -> List[Question]:
        """Retorna todas as questões de uma categoria."""
        return self.categories.get(category, [])

    def get_questions_by_type(self, qtype) -> List[Question]:
        qtype = qtype if isinstance(qtype, QuestionType) else QuestionType.from_name(qtype)
        return [q for q in self.questions if q.type is qtype]

    def get_types(self) -> List[str]:
        return sorted({q.type.value for q in self.questions})

    def get_question(self, title: str) -> Optional[Question]:
        return next((q for q in self.questions if q.title == title), None)

    def get_all_questions(self) -> List[Question]:
        """Retorna todas as questões."""
        return self.questions
