#!/usr/bin/env python3
"""
Testes da composição de exames (ExamContext).
"""

import json
import logging
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from giftbank import ExamError, GiftFileError, QuestionType
from giftbank.exam_manager import Exam, ExamContext


@pytest.fixture
def context(tmp_path, bank_dir):
    return ExamContext(tmp_path / "exam.json", data_dir=bank_dir, min_questions=2, max_questions=3)


def test_default_exam_file_lives_in_app_home(app_home, bank_dir):
    context = ExamContext(data_dir=bank_dir)
    assert context.exam_file.parent == app_home


def test_add_requires_exam(context):
    with pytest.raises(ExamError) as info:
        context.add_question("geography.gift", "Sahara")
    assert info.value.error_type == "NO_EXAM"


def test_init_and_add(context):
    context.init_exam("  Geography  ")
    exam = context.add_question("geography.gift", "Capital of France")

    assert exam.title == "Geography"
    assert [q.title for q in exam.questions] == ["Capital of France"]
    assert exam.questions[0].type is QuestionType.MULTIPLE_CHOICE
    assert exam.questions[0].answers[0].text == "Paris"
    assert context.load().questions[0].key == ("geography.gift", "Capital of France")


def test_add_errors(context):
    context.init_exam("Quiz")
    context.add_question("geography.gift", "Sahara")

    with pytest.raises(ExamError) as info:
        context.add_question("geography.gift", "Sahara")
    assert info.value.error_type == "DUPLICATE_QUESTION"

    with pytest.raises(ExamError) as info:
        context.add_question("geography.gift", "Atlantis")
    assert info.value.error_type == "QUESTION_NOT_FOUND"

    with pytest.raises(GiftFileError) as info:
        context.add_question("history.gift", "Sahara")
    assert info.value.error_type == "FILE_NOT_FOUND"

    assert len(context.load().questions) == 1


def test_exam_full(context):
    context.init_exam("Quiz")
    for title in ("Sahara", "Equator", "Continents"):
        context.add_question("geography.gift", title)

    with pytest.raises(ExamError) as info:
        context.add_question("grammar.gift", "Article")
    assert info.value.error_type == "EXAM_FULL"


def test_remove_question(context):
    context.init_exam("Quiz")

    with pytest.raises(ExamError) as info:
        context.remove_question(1)
    assert info.value.error_type == "EMPTY_EXAM"

    context.add_question("geography.gift", "Sahara")
    context.add_question("grammar.gift", "Article")

    with pytest.raises(ExamError) as info:
        context.remove_question(3)
    assert info.value.error_type == "INVALID_INDEX"

    exam, removed = context.remove_question(1)
    assert removed.title == "Sahara"
    assert [q.title for q in exam.questions] == ["Article"]


def test_move_question(context):
    context.init_exam("Quiz")
    for title in ("Sahara", "Equator", "Continents"):
        context.add_question("geography.gift", title)

    exam = context.move_question(1, 3)
    assert [q.title for q in exam.questions] == ["Equator", "Continents", "Sahara"]

    with pytest.raises(ExamError) as info:
        context.move_question(0, 1)
    assert info.value.error_type == "INVALID_INDEX"


def test_clear(context):
    context.init_exam("Quiz")
    assert context.exists()

    exam = context.clear()
    assert not context.exists()
    assert exam.questions == []


def test_validate(context):
    context.init_exam("Quiz")
    context.add_question("geography.gift", "Sahara")

    result = context.validate()
    assert not result.valid
    assert "at least 2" in result.errors[0]
    assert result.warnings

    context.add_question("geography.gift", "Equator")
    result = context.validate()
    assert result.valid
    assert result.stats["type_distribution"] == {"MultipleChoice": 1, "ShortAnswer": 1}


def test_validate_reports_duplicates(context):
    context.init_exam("Quiz")
    exam = context.add_question("geography.gift", "Sahara")
    exam.questions.append(exam.questions[0])

    result = context.validate(exam)
    assert any("Duplicate question at position 2" in e for e in result.errors)


def test_stats(context):
    context.init_exam("Quiz")
    context.add_question("geography.gift", "Sahara")
    context.add_question("grammar.gift", "Article")

    stats = context.stats()
    assert stats.question_count == 2
    assert stats.is_valid
    assert stats.files == ["geography.gift", "grammar.gift"]
    assert stats.type_distribution == {"MultipleChoice": 2}


def test_json_round_trip(context):
    context.init_exam("Quiz")
    exam = context.add_question("geography.gift", "Countries and capitals")

    data = json.loads(context.exam_file.read_text(encoding="utf-8"))
    assert data["metadata"] == {"min_questions": 2, "max_questions": 3}
    assert Exam.from_dict(data) == exam


def test_corrupt_exam_file(context, caplog):
    context.exam_file.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.ERROR):
        exam = context.load()

    assert exam.questions == []
    assert "Error loading exam file" in caplog.text


def test_write_error(tmp_path, bank_dir):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder", encoding="utf-8")
    context = ExamContext(blocker / "exam.json", data_dir=bank_dir)

    with pytest.raises(GiftFileError) as info:
        context.init_exam("Quiz")
    assert info.value.error_type == "WRITE_ERROR"
