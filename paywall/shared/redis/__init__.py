# -*- coding: utf-8 -*-
"""
paywall/shared/redis/__init__.py
"""

from .client import RedisClientManager

__all__ = ["RedisClientManager"]

# Fin del archivo paywall/shared/redis/__init__.py
