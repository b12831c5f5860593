# -*- coding: utf-8 -*-
"""
paywall/core/logging.py

Fachada de logging: punto de entrada único bajo `paywall.core` para
`paywall.shared.config.logging_config`.

Autor: Equipo Paywall
Fecha: 2026-02-03
"""

from typing import Literal

from paywall.shared.config.logging_config import setup_logging as _setup_logging


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: Formato de salida (plain, pretty, json).
    """
    _setup_logging(level=level, fmt=fmt)

# Fin del archivo paywall/core/logging.py
