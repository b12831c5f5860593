# -*- coding: utf-8 -*-
"""
paywall/shared/config/logging_config.py

Configuración centralizada de logging del paywall.
Soporta formato plain (desarrollo) y json (producción, python-json-logger).

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

import logging.config
from typing import Literal


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain"
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Formato de salida (plain, pretty, json)

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    # pretty == plain para efectos prácticos
    use_json = fmt == "json"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if use_json else "default",
            "stream": "ext://sys.stdout",
        }
    }

    formatters = {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s"
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        },
    }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": {
            # SQL de SQLAlchemy solo si DB_ECHO_SQL lo pide
            "sqlalchemy.engine": {"level": "WARNING"},
        },
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }

    logging.config.dictConfig(logging_config)


__all__ = ["setup_logging"]
# Fin del archivo paywall/shared/config/logging_config.py
