"""
Simulação de exame: registo das respostas, correção e relatório final.

Não depende de Qt; o SimulatorApp limita-se a recolher as respostas e a
passá-las a um ExamSimulation.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .constants import NOTE_SCALE
from .errors import GiftFileError
from .gift_parser import (
    Gap, Question, QuestionType, extract_answer_gaps, numeric_answers, true_false_value
)

logger = logging.getLogger(__name__)

_TRUE_WORDS = ('true', 't', 'yes', 'y', 'vrai', 'verdadeiro', 'v')
_FALSE_WORDS = ('false', 'f', 'no', 'n', 'faux', 'falso')
_NOT_GRADED = (QuestionType.ESSAY, QuestionType.UNKNOWN)
_GAP_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.SHORT_ANSWER)


def parse_question_gaps(question: Question) -> List[Gap]:
    """Espaços de resposta de uma pergunta (um por bloco com respostas)."""
    return extract_answer_gaps(question.raw_content)


def is_gradable(question: Question) -> bool:
    return question.type not in _NOT_GRADED


def is_choice_gap(gap: Gap) -> bool:
    """Um espaço com distratores responde-se por escolha; os outros por texto."""
    return any(not answer.correct for answer in gap.answers)


def parse_bool(value) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


def _normalize(text) -> str:
    return " ".join(str(text).split()).lower()


def _check_choice(answers, response) -> bool:
    try:
        index = int(response)
    except (TypeError, ValueError):
        return False
    return 0 <= index < len(answers) and answers[index].correct


def _check_text(answers, response) -> bool:
    if response is None:
        return False
    expected = _normalize(response)
    return any(answer.correct and _normalize(answer.text) == expected for answer in answers)


def _check_numeric(question: Question, response) -> bool:
    try:
        value = float(str(response).replace(',', '.'))
    except (TypeError, ValueError):
        return False
    return any(answer.accepts(value) for answer in numeric_answers(question.raw_content))


def _check_matching(question: Question, response) -> bool:
    if not isinstance(response, dict) or not question.pairs:
        return False
    given = {_normalize(k): _normalize(v) for k, v in response.items()}
    return all(given.get(_normalize(pair.prompt)) == _normalize(pair.target)
               for pair in question.pairs)


def check_answer(question: Question, response: Any, gap: Gap = None) -> bool:
    """Verifica uma resposta.

    Args:
        question: Pergunta respondida
        response: Índice da opção (escolha múltipla), texto (resposta curta),
            bool ou texto (verdadeiro/falso), número (numérica) ou dicionário
            {prompt: alvo} (correspondência)
        gap: Espaço respondido, em perguntas com vários espaços

    Returns:
        True se a resposta estiver correta; Essay e Unknown nunca estão.
    """
    if gap is not None:
        if is_choice_gap(gap):
            return _check_choice(gap.answers, response)
        return _check_text(gap.answers, response)

    qtype = question.type
    if qtype is QuestionType.MULTIPLE_CHOICE:
        return _check_choice(question.answers, response)
    if qtype is QuestionType.SHORT_ANSWER:
        return _check_text(question.answers, response)
    if qtype is QuestionType.TRUE_FALSE:
        expected = true_false_value(question.raw_content)
        return expected is not None and parse_bool(response) is expected
    if qtype is QuestionType.NUMERICAL:
        return _check_numeric(question, response)
    if qtype is QuestionType.MATCHING:
        return _check_matching(question, response)
    return False


def expected_answers(question: Question, gap: Gap = None) -> List[str]:
    """Respostas corretas para mostrar no relatório."""
    if gap is not None:
        return [a.text for a in gap.answers if a.correct]
    if question.type is QuestionType.TRUE_FALSE:
        value = true_false_value(question.raw_content)
        return [] if value is None else [str(value)]
    if question.type is QuestionType.NUMERICAL:
        texts = []
        for answer in numeric_answers(question.raw_content):
            if answer.low == answer.high:
                texts.append(f"{answer.low:g}")
            else:
                texts.append(f"{answer.low:g}..{answer.high:g}")
        return texts
    if question.type is QuestionType.MATCHING:
        return [f"{p.prompt} -> {p.target}" for p in question.pairs]
    return question.correct_answers()


def describe_response(question: Question, response: Any, gap: Gap = None) -> str:
    """Texto da resposta dada, para o relatório."""
    if response is None:
        return "(no answer)"
    answers = None
    if gap is not None and is_choice_gap(gap):
        answers = gap.answers
    elif gap is None and question.type is QuestionType.MULTIPLE_CHOICE:
        answers = question.answers
    if answers is not None:
        try:
            return answers[int(response)].text
        except (TypeError, ValueError, IndexError):
            return str(response)
    if isinstance(response, dict):
        return "; ".join(f"{k} -> {v}" for k, v in response.items())
    return str(response)


@dataclass
class GapResult:
    index: int
    response: str
    correct: bool
    correct_answers: List[str]


@dataclass
class QuestionResult:
    number: int
    title: str
    type: QuestionType
    graded: bool
    score: float
    response: str = ""
    correct: bool = False
    correct_answers: List[str] = field(default_factory=list)
    gaps: List[GapResult] = field(default_factory=list)

    @property
    def has_multiple_gaps(self) -> bool:
        return bool(self.gaps)


@dataclass
class SimulationResults:
    results: List[QuestionResult]
    total_score: float
    max_score: int
    source: Optional[str] = None
    finished_at: datetime = field(default_factory=datetime.now)

    @property
    def percentage(self) -> float:
        return self.total_score / self.max_score * 100 if self.max_score else 0.0

    @property
    def note(self) -> float:
        return self.total_score / self.max_score * NOTE_SCALE if self.max_score else 0.0

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.results if r.graded and r.score == 1)

    @property
    def wrong_titles(self) -> List[str]:
        return [r.title for r in self.results if r.graded and r.score < 1]

    @property
    def message(self) -> str:
        return result_message(self.percentage)


def result_message(percentage: float) -> str:
    if percentage >= 90:
        return "🎉 Excellent work!"
    if percentage >= 75:
        return "👍 Very good!"
    if percentage >= 50:
        return "📚 Good, but there is room for improvement."
    return "💪 Keep practicing!"


class ExamSimulation:
    """Sessão de simulação: guarda as respostas e calcula a nota."""

    def __init__(self, questions: Sequence[Question], source: str = None):
        self.questions = list(questions)
        self.source = source
        self._gaps = [parse_question_gaps(q) if q.type in _GAP_TYPES else []
                      for q in self.questions]
        self._responses: Dict[int, Any] = {}
        self._gap_responses: Dict[int, Dict[int, Any]] = {}

    def __len__(self):
        return len(self.questions)

    def gaps_for(self, position: int) -> List[Gap]:
        """Espaços da pergunta quando há mais do que um; senão lista vazia."""
        gaps = self._gaps[position]
        return gaps if len(gaps) > 1 else []

    def is_multi_gap(self, position: int) -> bool:
        return bool(self.gaps_for(position))

    def answer(self, position: int, response: Any):
        """Regista a resposta à pergunta na posição `position` (a partir de 0)."""
        self._responses[position] = response

    def answer_gap(self, position: int, gap_index: int, response: Any):
        self._gap_responses.setdefault(position, {})[gap_index] = response

    def response(self, position: int) -> Any:
        return self._responses.get(position)

    def gap_response(self, position: int, gap_index: int) -> Any:
        return self._gap_responses.get(position, {}).get(gap_index)

    def is_answered(self, position: int) -> bool:
        if self.is_multi_gap(position):
            answered = self._gap_responses.get(position, {})
            return all(gap.index in answered for gap in self.gaps_for(position))
        return position in self._responses

    def unanswered(self) -> List[int]:
        return [i for i in range(len(self.questions)) if not self.is_answered(i)]

    def _grade(self, position: int) -> QuestionResult:
        question = self.questions[position]
        result = QuestionResult(
            number=position + 1,
            title=question.title,
            type=question.type,
            graded=is_gradable(question),
            score=0.0,
        )
        if not result.graded:
            result.response = describe_response(question, self.response(position))
            return result

        gaps = self.gaps_for(position)
        if gaps:
            for gap in gaps:
                response = self.gap_response(position, gap.index)
                result.gaps.append(GapResult(
                    index=gap.index,
                    response=describe_response(question, response, gap),
                    correct=response is not None and check_answer(question, response, gap),
                    correct_answers=expected_answers(question, gap),
                ))
            result.score = sum(1 for g in result.gaps if g.correct) / len(gaps)
            result.correct = result.score == 1
            return result

        response = self.response(position)
        result.response = describe_response(question, response)
        result.correct = response is not None and check_answer(question, response)
        result.score = 1.0 if result.correct else 0.0
        result.correct_answers = expected_answers(question)
        return result

    def results(self) -> SimulationResults:
        results = [self._grade(i) for i in range(len(self.questions))]
        total = sum(r.score for r in results if r.graded)
        max_score = sum(1 for r in results if r.graded)
        logger.debug("Simulation finished: %.2f/%d", total, max_score)
        return SimulationResults(results=results, total_score=total, max_score=max_score,
                                 source=self.source)


def format_results(results: SimulationResults) -> str:
    """Relatório das respostas em texto."""
    lines = [
        "=" * 70,
        "EXAM RESULTS",
        "=" * 70,
        f"Date: {results.finished_at.strftime('%Y-%m-%d %H:%M:%S')}",
    ]
    if results.source:
        lines.append(f"Exam: {Path(results.source).name}")
    lines.extend([
        f"Score: {results.total_score:.2f}/{results.max_score}",
        f"Percentage: {results.percentage:.2f}%",
        f"Note: {results.note:.2f}/{NOTE_SCALE}",
        results.message,
        "",
        "=" * 70,
        "ANSWER DETAILS",
        "=" * 70,
        "",
    ])

    for result in results.results:
        lines.append(f"Question {result.number}: {result.title}")
        lines.append(f"Type: {result.type}")
        if not result.graded:
            lines.append(f"[NOT GRADED] Your answer: {result.response}")
        elif result.has_multiple_gaps:
            correct_gaps = sum(1 for g in result.gaps if g.correct)
            lines.append(f"Score: {result.score * 100:.0f}% ({correct_gaps}/{len(result.gaps)} correct gaps)")
            for gap in result.gaps:
                mark = "[CORRECT]" if gap.correct else "[INCORRECT]"
                lines.append(f"  {mark} Gap {gap.index}: {gap.response}")
                if not gap.correct:
                    lines.append(f"     Correct answer(s): {' OR '.join(gap.correct_answers)}")
        else:
            mark = "[CORRECT]" if result.correct else "[INCORRECT]"
            lines.append(f"{mark} Your answer: {result.response}")
            if not result.correct:
                lines.append(f"Correct answer(s): {' OR '.join(result.correct_answers)}")
        lines.append("")

    return "\n".join(lines)


def save_results(results: SimulationResults, output_path) -> Path:
    path = Path(output_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(format_results(results), encoding='utf-8')
    except OSError as e:
        raise GiftFileError(f"Error saving {path}: {e}", "WRITE_ERROR") from e
    logger.info("Saved simulation results to %s", path)
    return path
