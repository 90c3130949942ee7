#!/usr/bin/env python3
"""
Testes da interface de linha de comandos.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import pytest

import main
from giftbank.preferences import Preferences


@pytest.fixture(autouse=True)
def no_log_handlers(monkeypatch):
    # Os handlers ficariam presos aos streams capturados pelo pytest
    monkeypatch.setattr(main, "_logging_configured", True)


def run(capsys, *argv):
    code = main.main([str(arg) for arg in argv])
    return code, capsys.readouterr().out


def test_stats(capsys, bank_dir):
    code, out = run(capsys, "stats", "-d", bank_dir)

    assert code == 0
    assert "Total questions: 16" in out
    assert "12 questions geography.gift" in out


def test_search_with_keyword_only(capsys, bank_dir):
    code, out = run(capsys, "search", "capital", "-d", bank_dir)

    assert code == 0
    assert "Found 2 question(s)" in out


def test_search_by_type_with_answers(capsys, bank_dir):
    code, out = run(capsys, "search", "TrueFalse", "-d", bank_dir, "-v")

    assert code == 0
    assert "Found 2 question(s)" in out
    assert "Title: Earth is flat" in out


def test_types(capsys, bank_dir):
    code, out = run(capsys, "types", "-d", bank_dir)
    assert "• Matching" in out


def test_missing_data_dir(capsys, tmp_path):
    code, out = run(capsys, "stats", "-d", tmp_path / "nope")

    assert code == 1
    assert "✗ Error:" in out


def test_exam_workflow(capsys, bank_dir, tmp_path):
    Preferences().set_exam_limits(2, 5)
    exam_file = tmp_path / "exam.json"
    common = ["-d", bank_dir, "--exam-file", exam_file]

    code, out = run(capsys, "exam-add", "geography.gift", "Sahara", *common)
    assert code == 1
    assert "exam-init" in out

    assert run(capsys, "exam-init", "Geo quiz", *common)[0] == 0
    assert run(capsys, "exam-add", "geography.gift", "Sahara", *common)[0] == 0

    code, out = run(capsys, "exam-validate", *common)
    assert code == 1
    assert "at least 2" in out

    assert run(capsys, "exam-add", "grammar.gift", "Past of go", *common)[0] == 0
    assert run(capsys, "exam-move", 2, 1, *common)[0] == 0

    code, out = run(capsys, "exam-list", *common)
    assert "Questions: 2/5" in out
    assert out.index("Past of go") < out.index("Sahara")

    code, out = run(capsys, "exam-preview", "-l", 5, *common)
    assert "Truncated preview: 5/" in out

    output_dir = tmp_path / "out"
    code, out = run(capsys, "exam-generate", "quiz.gift", "-o", output_dir, *common)
    assert code == 0
    assert (output_dir / "quiz.gift").exists()

    assert run(capsys, "exam-generate", "quiz.gift", "-o", output_dir, *common)[0] == 1
    assert run(capsys, "exam-generate", "quiz.gift", "-o", output_dir, "-f", *common)[0] == 0

    code, out = run(capsys, "exam-remove", 9, *common)
    assert code == 1

    assert run(capsys, "exam-clear", *common)[0] == 0
    assert not exam_file.exists()


def test_check_and_profile(capsys, bank_dir, tmp_path):
    code, out = run(capsys, "check", bank_dir / "grammar.gift")
    assert code == 1
    assert "Not enough questions: 4/15 minimum" in out

    saved = tmp_path / "profile.txt"
    code, out = run(capsys, "profile", bank_dir / "geography.gift", "-s", saved)
    assert code == 0
    assert "Total: 12 questions" in out
    assert saved.exists()


def test_compare(capsys, bank_dir):
    code, out = run(capsys, "compare", bank_dir / "grammar.gift", bank_dir)
    assert code == 0
    assert "PROFILE COMPARISON REPORT" in out

    code, out = run(capsys, "compare", bank_dir / "grammar.gift", bank_dir / "grammar.gift")
    assert code == 1


def test_import_and_export(capsys, bank_dir, tmp_path):
    bank = tmp_path / "bank"
    bank.mkdir()

    code, out = run(capsys, "import", bank_dir / "grammar.gift", "-d", bank)
    assert code == 0
    assert (bank / "grammar.gift").exists()

    code, out = run(capsys, "export", bank / "grammar.gift", tmp_path)
    assert code == 0
    assert (tmp_path / "grammar.gift").exists()


def test_empty_history(capsys):
    code, out = run(capsys, "history")
    assert code == 0
    assert "Simulations: 0" in out


def test_stats_skips_non_utf8_file(capsys, tmp_path):
    (tmp_path / "good.gift").write_text("::Q1::What? {=a}\n", encoding="utf-8")
    (tmp_path / "latin.gift").write_bytes("::Q2::Café? {=oui}\n".encode("latin-1"))

    code, out = run(capsys, "stats", "-d", tmp_path)

    assert code == 0
    assert "Total questions: 1" in out


def test_unreadable_file_exits_with_error(capsys, tmp_path):
    latin = tmp_path / "latin.gift"
    latin.write_bytes("::Q2::Café? {=oui}\n".encode("latin-1"))

    code, out = run(capsys, "profile", latin)

    assert code == 1
    assert "✗ Error:" in out
    assert "UTF-8" in out
