# -*- coding: utf-8 -*-
"""
Tests de la capa de configuración (pydantic-settings) y del logging.

Autor: Equipo Paywall
Fecha: 2026-02-18
"""

import logging
import os
from decimal import Decimal

import pytest
from pydantic import ValidationError

from paywall.shared.config.config_loader import get_settings
from paywall.shared.config.logging_config import setup_logging
from paywall.shared.config.settings_base import BaseAppSettings
from paywall.shared.config.settings_payments import PaymentsSettings, get_payments_settings


@pytest.fixture(autouse=True)
def _isolate_env_and_cache(monkeypatch):
    """Aísla variables de entorno y limpia los caches de settings en cada test."""
    for k in list(os.environ.keys()):
        if k.startswith(("DB_", "APP_", "CORS_", "REDIS_", "SQUARE_", "LOG_", "PYTHON_ENV", "PLATFORM_", "PROCESSOR_")):
            monkeypatch.delenv(k, raising=False)
    get_settings.cache_clear()
    get_payments_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_payments_settings.cache_clear()


def _prod_env(monkeypatch, **overrides):
    env = {
        "PYTHON_ENV": "production",
        "APP_URL": "https://watch.paywall-demo.com",
        "CORS_ORIGINS": "https://watch.paywall-demo.com",
        "REDIS_URL": "redis://localhost:6379/0",
        "APP_SERVICE_TOKEN": "svc-prod-token",
    }
    env.update(overrides)
    for key, value in env.items():
        if value is None:
            monkeypatch.delenv(key, raising=False)
        else:
            monkeypatch.setenv(key, value)


class TestConfigLoader:
    def test_dev_by_default(self):
        s = get_settings()
        assert s.is_dev is True
        assert s.python_env == "development"

    def test_selects_test(self, monkeypatch):
        monkeypatch.setenv("PYTHON_ENV", "test")

        s = get_settings()

        assert s.is_test is True
        assert s.database_url.startswith("sqlite+aiosqlite://")

    def test_selects_prod(self, monkeypatch):
        _prod_env(monkeypatch)

        s = get_settings()

        assert s.is_prod is True
        assert s.log_format == "json"

    def test_caches_singleton(self):
        assert get_settings() is get_settings()

    @pytest.mark.parametrize(
        "overrides, fragment",
        [
            ({"APP_URL": "http://watch.paywall-demo.com"}, "APP_URL"),
            ({"CORS_ORIGINS": "*"}, "CORS_ORIGINS"),
            ({"REDIS_URL": None}, "REDIS_URL"),
            ({"APP_SERVICE_TOKEN": None}, "APP_SERVICE_TOKEN"),
        ],
    )
    def test_prod_security_checks(self, monkeypatch, overrides, fragment):
        _prod_env(monkeypatch, **overrides)

        with pytest.raises(ValueError) as exc:
            get_settings()

        assert fragment in str(exc.value)


class TestBaseSettings:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("postgres://u:p@db:5432/pw", "postgresql+asyncpg://u:p@db:5432/pw"),
            ("postgresql://u:p@db:5432/pw", "postgresql+asyncpg://u:p@db:5432/pw"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_database_url_normalization(self, raw, expected):
        assert BaseAppSettings(DB_URL=raw).database_url == expected

    def test_database_url_from_parts_quotes_password(self):
        s = BaseAppSettings(DB_USER="pw", DB_PASSWORD="p@ss/word", DB_HOST="db", DB_NAME="paywall")
        assert s.database_url == "postgresql+asyncpg://pw:p%40ss%2Fword@db:5432/paywall"

    def test_cors_origins_parsing(self):
        s = BaseAppSettings(CORS_ORIGINS=' https://a.test, "https://b.test" ,')
        assert s.get_cors_origins() == ["https://a.test", "https://b.test"]


class TestPaymentsSettings:
    def test_defaults(self):
        s = PaymentsSettings()

        assert s.platform_fee_percent == Decimal("10")
        assert s.processor_fee_percent == Decimal("2.9")
        assert s.processor_fee_fixed_cents == 30
        assert s.entitlement_default_hours == 24
        assert s.square_base_url == "https://connect.squareupsandbox.com"

    def test_production_base_url(self, monkeypatch):
        monkeypatch.setenv("SQUARE_ENVIRONMENT", "production")
        assert get_payments_settings().square_base_url == "https://connect.squareup.com"

    @pytest.mark.parametrize("value", ["-1", "100.5"])
    def test_platform_fee_out_of_range(self, monkeypatch, value):
        monkeypatch.setenv("PLATFORM_FEE_PERCENT", value)
        with pytest.raises(ValidationError):
            PaymentsSettings()


class TestLoggingConfig:
    def test_plain_format(self):
        setup_logging(level="DEBUG", fmt="plain")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)

    def test_json_format_uses_json_formatter(self):
        setup_logging(level="INFO", fmt="json")

        formatters = [h.formatter for h in logging.getLogger().handlers if h.formatter is not None]
        assert any(f.__class__.__module__.startswith("pythonjsonlogger") for f in formatters)
        setup_logging(level="WARNING", fmt="plain")

# Fin del archivo tests/shared/config/test_settings.py
