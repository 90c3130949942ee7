#!/usr/bin/env python3
"""
Testes da banca de perguntas (leitura, pesquisa e estatísticas).
"""

import logging
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from giftbank import ExamError, GiftFileError
from giftbank.question_bank import (
    find_question, get_available_types, get_question_stats, list_gift_files,
    parse_gift_file, read_gift_file, search_questions
)


def test_list_gift_files(bank_dir):
    assert [p.name for p in list_gift_files(bank_dir)] == ["geography.gift", "grammar.gift"]


def test_list_missing_directory(tmp_path):
    with pytest.raises(GiftFileError) as info:
        list_gift_files(tmp_path / "nope")
    assert info.value.error_type == "DIR_NOT_FOUND"


def test_read_errors(tmp_path):
    with pytest.raises(GiftFileError) as info:
        read_gift_file(tmp_path / "missing.gift")
    assert info.value.error_type == "FILE_NOT_FOUND"

    with pytest.raises(GiftFileError) as info:
        read_gift_file(tmp_path)
    assert info.value.error_type == "NOT_A_FILE"

    empty = tmp_path / "empty.gift"
    empty.write_text("  \n", encoding="utf-8")
    with pytest.raises(GiftFileError) as info:
        read_gift_file(empty)
    assert info.value.error_type == "EMPTY_FILE"


def test_byte_order_mark_is_ignored(tmp_path):
    path = tmp_path / "bom.gift"
    path.write_text("::Q1::What? {=a}\n", encoding="utf-8-sig")
    assert parse_gift_file(path)[0].title == "Q1"


def test_search_by_type(bank_dir):
    results = search_questions(bank_dir, qtype="multiplechoice")

    assert len(results) == 6
    assert {r.file for r in results} == {"geography.gift", "grammar.gift"}


def test_search_by_keyword(bank_dir):
    titles = [r.question.title for r in search_questions(bank_dir, keyword="CAPITAL")]
    assert titles == ["Capital of France", "Countries and capitals"]


def test_search_by_type_and_keyword(bank_dir):
    results = search_questions(bank_dir, qtype="ShortAnswer", keyword="past")
    assert [r.question.title for r in results] == ["Past of go"]


def test_stats(bank_dir):
    stats = get_question_stats(bank_dir)

    assert stats.total_files == 2
    assert stats.total_questions == 16
    assert stats.by_file == {"geography.gift": 12, "grammar.gift": 4}
    assert stats.by_type == {
        "MultipleChoice": 6, "ShortAnswer": 4, "TrueFalse": 2,
        "Numerical": 2, "Matching": 1, "Essay": 1,
    }
    assert stats.average_per_file == 8


def test_available_types(bank_dir):
    assert get_available_types(bank_dir) == [
        "Essay", "Matching", "MultipleChoice", "Numerical", "ShortAnswer", "TrueFalse"
    ]


def test_unreadable_files_are_skipped(tmp_path, caplog):
    (tmp_path / "good.gift").write_text("::Q1::What? {=a}\n", encoding="utf-8")
    (tmp_path / "empty.gift").write_text("", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("::Q2::Ignored {=b}\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        stats = get_question_stats(tmp_path)

    assert stats.by_file == {"good.gift": 1}
    assert "empty.gift" in caplog.text


def test_find_question(bank_dir):
    assert find_question(bank_dir, "grammar.gift", "Article").get_correct_answer() == 1

    with pytest.raises(ExamError) as info:
        find_question(bank_dir, "grammar.gift", "Nope")
    assert info.value.error_type == "QUESTION_NOT_FOUND"

    with pytest.raises(GiftFileError) as info:
        find_question(bank_dir, "missing.gift", "Article")
    assert info.value.error_type == "FILE_NOT_FOUND"


def test_non_utf8_file_is_skipped(tmp_path, caplog):
    """Um ficheiro Latin-1 na banca é ignorado com aviso; os outros continuam."""
    (tmp_path / "good.gift").write_text("::Q1::What? {=a}\n", encoding="utf-8")
    (tmp_path / "latin.gift").write_bytes("::Q2::Café? {=oui}\n".encode("latin-1"))

    with pytest.raises(GiftFileError) as info:
        read_gift_file(tmp_path / "latin.gift")
    assert info.value.error_type == "INVALID_ENCODING"

    with caplog.at_level(logging.WARNING):
        results = search_questions(tmp_path)

    assert [(r.file, r.question.title) for r in results] == [("good.gift", "Q1")]
    assert "latin.gift" in caplog.text
    assert get_question_stats(tmp_path).by_file == {"good.gift": 1}
