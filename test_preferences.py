#!/usr/bin/env python3
"""
Testes das preferências persistentes.
"""

import json
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

from giftbank.constants import DEFAULT_DATA_DIR, DEFAULT_WINDOW_PERCENT
from giftbank.preferences import Preferences


def test_defaults(tmp_path):
    prefs = Preferences(tmp_path / "prefs.json")

    assert prefs.get_last_gift_file() is None
    assert prefs.get_data_dir() == DEFAULT_DATA_DIR
    assert prefs.get_exam_limits() == (15, 20)
    assert prefs.get_main_window_size_percent() == (DEFAULT_WINDOW_PERCENT, DEFAULT_WINDOW_PERCENT)


def test_default_location(app_home):
    assert Preferences().pref_file == app_home / "preferences.json"


def test_values_persist(tmp_path, bank_dir):
    path = tmp_path / "prefs.json"
    prefs = Preferences(path)
    prefs.set_last_gift_file(bank_dir / "grammar.gift")
    prefs.set_data_dir("/srv/bank")
    prefs.set_output_dir("/srv/out")
    prefs.set_exam_limits(5, 8)
    prefs.set_main_window_size_percent(80, 90)

    reloaded = Preferences(path)
    assert reloaded.get_last_gift_file() == str(bank_dir / "grammar.gift")
    assert reloaded.get_data_dir() == "/srv/bank"
    assert reloaded.get_output_dir() == "/srv/out"
    assert reloaded.get_exam_limits() == (5, 8)
    assert reloaded.get_main_window_size_percent() == (80, 90)


def test_invalid_values_fall_back(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({
        "last_gift_file": str(tmp_path / "gone.gift"),
        "exam": {"min_questions": 0, "max_questions": "many"},
        "ui": {"main_window_width_percent": 5, "main_window_height_percent": 150},
    }), encoding="utf-8")
    prefs = Preferences(path)

    assert prefs.get_last_gift_file() is None
    assert prefs.get_exam_limits() == (15, 20)
    assert prefs.get_main_window_size_percent() == (DEFAULT_WINDOW_PERCENT, DEFAULT_WINDOW_PERCENT)


def test_corrupt_file(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{broken", encoding="utf-8")
    assert Preferences(path).get_data_dir() == DEFAULT_DATA_DIR


def test_app_data_dir_override(app_home):
    from giftbank.app_paths import get_app_data_dir, get_log_path

    assert get_app_data_dir() == app_home
    assert app_home.is_dir()
    assert get_log_path().parent == app_home
