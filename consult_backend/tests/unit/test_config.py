"""tests/unit/test_config.py — Duration parsing and the production config guard."""

from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest

from consult_backend.config import TestingConfig, parse_duration, validate_production_config


@pytest.mark.parametrize("raw, expected", [
    ("15m", timedelta(minutes=15)),
    ("7d", timedelta(days=7)),
    ("12h", timedelta(hours=12)),
    ("30s", timedelta(seconds=30)),
    ("900", timedelta(seconds=900)),
    (" 2h ", timedelta(hours=2)),
])
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "15x", "-5m", "0", "0d", "1.5h"])
def test_parse_duration_rejects_bad_values(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_testing_session_ttl_is_shorter_than_refresh_jwt_ttl():
    assert TestingConfig.REFRESH_SESSION_EXPIRE < TestingConfig.JWT_REFRESH_EXPIRE
    assert TestingConfig.JWT_SECRET != TestingConfig.JWT_REFRESH_SECRET


def _production(**overrides):
    config = {
        "SQLALCHEMY_DATABASE_URI": "postgresql://db/healthconsult",
        "SECRET_KEY": "a" * 40,
        "JWT_SECRET": "b" * 40,
        "JWT_REFRESH_SECRET": "c" * 40,
    }
    config.update(overrides)
    return SimpleNamespace(config=config)


def test_production_config_accepts_strong_values():
    validate_production_config(_production())


@pytest.mark.parametrize("overrides", [
    {"SQLALCHEMY_DATABASE_URI": ""},
    {"SECRET_KEY": "change-me-in-production"},
    {"JWT_SECRET": "change-me-in-production"},
    {"JWT_REFRESH_SECRET": "change-me-in-production-refresh"},
    {"JWT_REFRESH_SECRET": "b" * 40},
])
def test_production_config_rejects_insecure_values(overrides):
    with pytest.raises(ValueError):
        validate_production_config(_production(**overrides))
