"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from fundtrack.config import BaseConfig, DevConfig


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("FUNDTRACK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("FUNDTRACK_DATABASE_URL", raising=False)
    monkeypatch.delenv("FUNDTRACK_DEV_MODE", raising=False)
    monkeypatch.delenv("FUNDTRACK_HISTORY_PREVIEW_ROWS", raising=False)

    config = BaseConfig()

    assert config.DATA_DIR.exists()
    assert config.DATABASE_URL.endswith("fundtrack.db")
    assert config.DEV_MODE is True
    assert config.HISTORY_PREVIEW_ROWS == 10
    assert config.sqlalchemy_engine_options()["connect_args"] == {"check_same_thread": False}


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("FUNDTRACK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("FUNDTRACK_DATABASE_URL", "postgresql://localhost/funds")
    monkeypatch.setenv("FUNDTRACK_DEV_MODE", "off")
    monkeypatch.setenv("FUNDTRACK_HISTORY_PREVIEW_ROWS", "25")

    config = DevConfig()

    assert config.DATABASE_URL == "postgresql://localhost/funds"
    assert config.DEV_MODE is False
    assert config.HISTORY_PREVIEW_ROWS == 25
    assert config.sqlalchemy_engine_options()["connect_args"] == {}


def test_bad_integer_env(tmp_path, monkeypatch):
    monkeypatch.setenv("FUNDTRACK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("FUNDTRACK_HISTORY_PREVIEW_ROWS", "many")

    with pytest.raises(ValueError):
        BaseConfig()
