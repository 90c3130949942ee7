#!/usr/bin/env python3
"""
Testes da importação e exportação de ficheiros GIFT.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from giftbank import GiftFileError, GiftFormatError
from giftbank.import_export import export_gift_file, import_gift_file, import_to_bank


def test_import_summary(bank_dir):
    summary = import_gift_file(bank_dir / "grammar.gift")

    assert summary.total_questions == 4
    assert summary.type_distribution == {"ShortAnswer": 2, "MultipleChoice": 2}
    assert summary.destination is None


def test_import_rejects_other_extensions(tmp_path):
    path = tmp_path / "questions.txt"
    path.write_text("::Q1::What? {=a}\n", encoding="utf-8")

    with pytest.raises(GiftFileError) as info:
        import_gift_file(path)
    assert info.value.error_type == "INVALID_EXTENSION"


def test_import_without_questions(tmp_path):
    path = tmp_path / "notes.gift"
    path.write_text("// only a comment\n", encoding="utf-8")

    with pytest.raises(GiftFormatError):
        import_gift_file(path)


def test_import_missing_file(tmp_path):
    with pytest.raises(GiftFileError) as info:
        import_gift_file(tmp_path / "missing.gift")
    assert info.value.error_type == "FILE_NOT_FOUND"


def test_export_to_directory(bank_dir, tmp_path):
    summary = export_gift_file(bank_dir / "grammar.gift", tmp_path)

    assert summary.destination == tmp_path / "grammar.gift"
    assert summary.destination.read_text(encoding="utf-8") == \
        (bank_dir / "grammar.gift").read_text(encoding="utf-8")

    with pytest.raises(GiftFileError) as info:
        export_gift_file(bank_dir / "grammar.gift", tmp_path)
    assert info.value.error_type == "FILE_EXISTS"


def test_export_to_file_name(bank_dir, tmp_path):
    summary = export_gift_file(bank_dir / "grammar.gift", tmp_path / "copy.gift")
    assert summary.destination.exists()

    with pytest.raises(GiftFileError) as info:
        export_gift_file(bank_dir / "grammar.gift", tmp_path / "missing" / "copy.gift")
    assert info.value.error_type == "DIR_NOT_FOUND"


def test_import_to_bank(bank_dir, tmp_path):
    bank = tmp_path / "bank"
    bank.mkdir()

    summary = import_to_bank(bank_dir / "geography.gift", bank)
    assert summary.destination == bank / "geography.gift"
    assert summary.total_questions == 12

    with pytest.raises(GiftFileError) as info:
        import_to_bank(bank_dir / "geography.gift", tmp_path / "nope")
    assert info.value.error_type == "DIR_NOT_FOUND"
