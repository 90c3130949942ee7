#!/usr/bin/env python3
"""
Testes dos perfis de exame e da comparação com a banca.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from giftbank import GiftFileError, ProfileError
from giftbank.exam_profile import (
    generate_exam_profile, generate_profile_report, generate_text_histogram,
    profile_questions, save_profile_to_file
)
from giftbank.profile_comparator import (
    compare_profiles, generate_bank_profile, generate_comparison_report, save_comparison_report
)


def test_exam_profile(bank_dir):
    profile = generate_exam_profile(bank_dir / "geography.gift")

    assert profile.total_questions == 12
    assert profile.type_count == 6
    assert profile.type_distribution["MultipleChoice"] == 4
    assert profile.percentages()["Essay"] == pytest.approx(100 / 12)


def test_empty_profile():
    with pytest.raises(ProfileError) as info:
        profile_questions([])
    assert info.value.error_type == "NO_QUESTIONS"


def test_histogram_lines():
    histogram = generate_text_histogram({"ShortAnswer": 1, "MultipleChoice": 2}, 3)
    lines = histogram.splitlines()

    assert lines[1] == "QUESTION TYPE HISTOGRAM"
    assert lines[4] == "MultipleChoice" + " " * 7 + "( 2) │" + "█" * 50 + "  │ 66.7%"
    assert lines[5] == "ShortAnswer" + " " * 10 + "( 1) │" + "█" * 25 + " " * 27 + "│ 33.3%"
    assert "Total: 3 questions" in histogram
    assert histogram.endswith("\n")


def test_profile_report_and_save(bank_dir, tmp_path):
    report = generate_profile_report(bank_dir / "grammar.gift")
    assert report.profile.total_questions == 4

    output = tmp_path / "profile.txt"
    save_profile_to_file(report.histogram, output, generated_at=datetime(2026, 3, 1, 8, 0, 0))

    content = output.read_text(encoding="utf-8")
    assert "Generated: 2026-03-01 08:00:00" in content
    assert report.histogram in content


def test_save_profile_missing_directory(tmp_path):
    with pytest.raises(GiftFileError) as info:
        save_profile_to_file("x", tmp_path / "nope" / "profile.txt")
    assert info.value.error_type == "DIR_NOT_FOUND"


def test_bank_profile(bank_dir):
    bank = generate_bank_profile(bank_dir)

    assert bank.total_questions == 16
    assert bank.files_analyzed == 2
    assert bank.type_distribution["ShortAnswer"] == 4
    assert [s["file"] for s in bank.file_stats] == ["geography.gift", "grammar.gift"]


def test_bank_profile_errors(tmp_path, caplog):
    with pytest.raises(GiftFileError) as info:
        generate_bank_profile(tmp_path / "missing")
    assert info.value.error_type == "FILE_NOT_FOUND"

    with pytest.raises(GiftFileError) as info:
        generate_bank_profile(tmp_path)
    assert info.value.error_type == "NO_FILES"

    (tmp_path / "empty.gift").write_text("", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        with pytest.raises(ProfileError) as info:
            generate_bank_profile(tmp_path)
    assert info.value.error_type == "NO_QUESTIONS"
    assert "empty.gift" in caplog.text


def test_compare_profiles(bank_dir):
    comparison = compare_profiles(bank_dir / "grammar.gift", bank_dir)

    first = comparison.comparisons[0]
    assert first.type == "ShortAnswer"
    assert first.exam_percent == pytest.approx(50.0)
    assert first.bank_percent == pytest.approx(25.0)
    assert first.difference == pytest.approx(25.0)
    assert first.relative_difference == pytest.approx(100.0)

    assert len(comparison.comparisons) == 6
    assert [c.type for c in comparison.overrepresented] == ["ShortAnswer"]
    assert comparison.underrepresented == []
    assert {c.type for c in comparison.significant} == {
        "ShortAnswer", "MultipleChoice", "TrueFalse", "Numerical"
    }

    essay = next(c for c in comparison.comparisons if c.type == "Essay")
    assert essay.exam_count == 0
    assert essay.exam_percent == 0.0


def test_compare_requires_enough_bank_questions(bank_dir):
    with pytest.raises(ProfileError) as info:
        compare_profiles(bank_dir / "grammar.gift", bank_dir / "grammar.gift")
    assert info.value.error_type == "INSUFFICIENT_DATA"


def test_comparison_report(bank_dir, tmp_path):
    report = generate_comparison_report(compare_profiles(bank_dir / "grammar.gift", bank_dir))

    assert "File: grammar.gift" in report
    assert "Files analyzed: 2" in report
    assert "+25.0%" in report
    assert "Gap: +25.0 percentage points." in report
    assert "   - ShortAnswer: reduce by 25.0%" in report

    output = tmp_path / "comparison.txt"
    save_comparison_report(report, output)
    assert "EXAM PROFILE COMPARISON" in output.read_text(encoding="utf-8")


def test_balanced_report(bank_dir):
    report = generate_comparison_report(compare_profiles(bank_dir / "geography.gift", bank_dir))
    assert "Your exam distribution is balanced." in report


def test_bank_profile_skips_non_utf8_file(tmp_path, bank_dir):
    (tmp_path / "geography.gift").write_bytes((bank_dir / "geography.gift").read_bytes())
    (tmp_path / "latin.gift").write_bytes("::Q2::Café? {=oui}\n".encode("latin-1"))

    bank = generate_bank_profile(tmp_path)

    assert bank.total_questions == 12
    assert [s["file"] for s in bank.file_stats] == ["geography.gift"]
