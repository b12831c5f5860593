# -*- coding: utf-8 -*-
"""
paywall/modules/catalog/repositories/owner_account_repository.py

Autor: Equipo Paywall
Fecha: 2026-02-06
"""

from paywall.shared.database.repository import BaseRepository
from paywall.modules.catalog.models import OwnerAccount


class OwnerAccountRepository(BaseRepository[OwnerAccount]):
    def __init__(self) -> None:
        super().__init__(OwnerAccount)

# Fin del archivo paywall/modules/catalog/repositories/owner_account_repository.py
