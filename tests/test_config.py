import pytest

from core import config


def test_env_int_default_when_unset(monkeypatch):
    monkeypatch.delenv("TADA_TEST_VALUE", raising=False)
    assert config._env_int("TADA_TEST_VALUE", 7) == 7


def test_env_int_reads_override(monkeypatch):
    monkeypatch.setenv("TADA_TEST_VALUE", " 12 ")
    assert config._env_int("TADA_TEST_VALUE", 7) == 12


def test_env_int_rejects_garbage(monkeypatch):
    monkeypatch.setenv("TADA_TEST_VALUE", "lots")
    with pytest.raises(ValueError, match="TADA_TEST_VALUE"):
        config._env_int("TADA_TEST_VALUE", 7)


def test_defaults():
    assert config.CONTEXT_LINES == 2
    assert config.HIGHLIGHT_MARKER == "**"
    assert config.BATCH_SIZE >= 1
