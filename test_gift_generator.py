#!/usr/bin/env python3
"""
Testes do gerador GIFT.
"""

import sys
from datetime import date, datetime
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from giftbank import GiftFormatError, ExamError, parse, serialize, validate_syntax
from giftbank.exam_manager import Exam, QuestionRef
from giftbank.gift_generator import (
    format_date, generate_gift_file, generate_gift_header, get_default_filename,
    preview_gift_file
)


def _bank_questions(bank_dir):
    return parse((bank_dir / "geography.gift").read_text(encoding="utf-8"))


def _exam(bank_dir, count=3, **kwargs):
    refs = [QuestionRef.from_question("geography.gift", q) for q in _bank_questions(bank_dir)[:count]]
    return Exam(title="Geography quiz", questions=refs, **kwargs)


def test_serialize_preserves_titles_and_types(bank_dir):
    """Gerar e voltar a ler mantém títulos, ordem e tipos."""
    questions = _bank_questions(bank_dir)
    content = serialize("Geography", "2026-01-02T10:00:00", "2026-01-03T11:30:00", questions)

    reparsed = parse(content)
    assert [q.title for q in reparsed] == [q.title for q in questions]
    assert [q.type for q in reparsed] == [q.type for q in questions]


def test_serialize_header_and_footer():
    questions = parse("::Q1::What is 2+2? {~3 =4 ~5}")
    content = serialize("Math  quiz", "2026-01-02T10:00:00", "2026-01-02T10:05:00",
                        questions, generated_at=datetime(2026, 1, 5, 9, 0))

    assert "// Math quiz" in content
    assert "// Generated: 2026-01-05 09:00" in content
    assert "// Questions: 1" in content
    assert "// Created: 2026-01-02 10:00" in content
    assert "// Type: MultipleChoice" in content
    assert "::Q1::What is 2+2? {~3 =4 ~5}" in content
    assert "// End of exam - 1 questions" in content


def test_serialize_empty_list_fails():
    with pytest.raises(GiftFormatError) as info:
        serialize("Empty", None, None, [])
    assert info.value.error_type == "INVALID_FORMAT"


def test_validate_syntax():
    assert validate_syntax("::Q1::Ok {=a}").valid
    assert validate_syntax("::Q1::Ok {=a}").question_count == 1

    result = validate_syntax("")
    assert not result.valid
    assert len(result.errors) == 2

    unbalanced = validate_syntax("::Q1::Ok {{{{=a}")
    assert unbalanced.valid
    assert unbalanced.warnings


def test_format_date():
    assert format_date("2026-01-02T10:30:00") == "2026-01-02 10:30"
    assert format_date(None) == "-"
    assert format_date("not a date") == "not a date"


def test_header_collapses_whitespace_in_title():
    header = generate_gift_header("A\n  title", None, None, 0, generated_at="2026-01-01T00:00:00")
    assert "// A title" in header


def test_default_filename():
    assert get_default_filename("Mid-term Exam: Geography!", date(2026, 1, 2)) == \
        "mid_term_exam_geography_2026-01-02.gift"
    assert get_default_filename("!!!", date(2026, 1, 2)) == "exam_2026-01-02.gift"


def test_preview_truncates(bank_dir):
    exam = _exam(bank_dir)

    full = preview_gift_file(exam, max_lines=1000)
    assert not full.truncated

    preview = preview_gift_file(exam, max_lines=5)
    assert preview.truncated
    assert preview.showing_lines == 5
    assert preview.total_lines == full.total_lines
    assert preview.content.endswith("// ... (truncated)")


def test_generate_gift_file(bank_dir, tmp_path):
    exam = _exam(bank_dir, min_questions=1, max_questions=20)
    output = tmp_path / "out" / "exam.gift"

    result = generate_gift_file(exam, output)

    assert output.exists()
    assert result.question_count == 3
    assert result.validation.valid
    assert [q.title for q in parse(output.read_text(encoding="utf-8"))] == \
        [q.title for q in exam.questions]


def test_generate_gift_file_checks_size(bank_dir, tmp_path):
    with pytest.raises(ExamError) as info:
        generate_gift_file(_exam(bank_dir, count=2, min_questions=5), tmp_path / "a.gift")
    assert info.value.error_type == "TOO_FEW_QUESTIONS"

    with pytest.raises(ExamError) as info:
        generate_gift_file(_exam(bank_dir, count=4, min_questions=1, max_questions=3),
                           tmp_path / "b.gift")
    assert info.value.error_type == "TOO_MANY_QUESTIONS"
    assert not (tmp_path / "b.gift").exists()


def test_reexport_does_not_repeat_comments(bank_dir):
    """Gerar a partir de um ficheiro já gerado não duplica os comentários."""
    questions = parse((bank_dir / "grammar.gift").read_text(encoding="utf-8"))
    first = serialize("Grammar", None, None, questions)
    second = serialize("Grammar", None, None, parse(first))

    assert second.count("// Question 2\n") == 1
    assert second.count("// Type: ShortAnswer") == 2

    reparsed = parse(second)
    assert [q.title for q in reparsed] == [q.title for q in questions]
    assert "// Question" not in serialize("Grammar", None, None, reparsed[:1]).split("::Plural of mouse::")[1]
