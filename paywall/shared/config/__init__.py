# paywall/shared/config/__init__.py
"""
Entry-point ligero para configuración.

Expone imports estables:
    from paywall.shared.config import get_settings, get_payments_settings

No inicializa settings en import-time para evitar efectos colaterales
durante la recolección de tests.
"""

from paywall.shared.config.config_loader import get_settings
from paywall.shared.config.settings_payments import PaymentsSettings, get_payments_settings

__all__ = ["get_settings", "get_payments_settings", "PaymentsSettings"]
# fin del archivo
