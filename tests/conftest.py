"""Shared fixtures for the secretmemo test suite."""
from pathlib import Path

import pytest

from secretmemo.secrets.domains import preferences
from secretmemo.secrets.domains.change_gate import ChangeGate
from secretmemo.secrets.domains.secret_memo import SecretMemo
from secretmemo.secrets.workflows import secret_sources

# Low work factor keeps the suite fast; the scheme is identical
TEST_ITERATIONS = 1000


@pytest.fixture
def memo():
    return SecretMemo(iterations=TEST_ITERATIONS)


@pytest.fixture
def gate(memo):
    return ChangeGate(memo)


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory for testing."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)
    monkeypatch.delenv("SECRETMEMO_ITERATIONS", raising=False)
    monkeypatch.delenv("GCP_PROJECT", raising=False)

    fake_config_dir = fake_home / ".config" / "secretmemo"
    monkeypatch.setattr(preferences, "PREFERENCES_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")

    return fake_home


@pytest.fixture(autouse=True)
def clear_secret_cache():
    secret_sources.clear_cache()
    yield
    secret_sources.clear_cache()
