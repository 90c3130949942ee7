"""
Configuração comum dos testes.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

BANK_DIR = Path(__file__).parent / "samples" / "bank"


@pytest.fixture(autouse=True)
def app_home(tmp_path, monkeypatch):
    """Isola preferências, exame atual, histórico e logs numa pasta temporária."""
    home = tmp_path / "giftbank_home"
    monkeypatch.setenv("GIFTBANK_HOME", str(home))
    return home


@pytest.fixture
def bank_dir():
    return BANK_DIR
