# -*- coding: utf-8 -*-
"""
paywall/modules/purchases/services/webhooks/signature_verification.py

Verificación de firma para webhooks de Square.

Square firma cada notificación con:

    base64(HMAC-SHA256(signature_key, notification_url + raw_body))

y la envía en el header `x-square-hmacsha256-signature`. La comparación
es en tiempo constante. Falta de firma, body vacío o clave no configurada
siempre rechazan; el bypass inseguro solo aplica si allow_insecure está
activo y el entorno no es producción (lo decide la ruta).

Autor: Equipo Paywall
Fecha: 2026-02-13
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)

SQUARE_SIGNATURE_HEADER = "x-square-hmacsha256-signature"


def compute_square_signature(body: bytes, signature_key: str, notification_url: str) -> str:
    message = notification_url.encode("utf-8") + body
    digest = hmac.new(signature_key.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_square_signature(
    body: bytes,
    signature: Optional[str],
    signature_key: Optional[str],
    notification_url: Optional[str],
) -> bool:
    """
    Verifica la firma de un webhook de Square.

    Args:
        body: Body crudo del request (bytes exactos recibidos)
        signature: Valor del header x-square-hmacsha256-signature
        signature_key: Clave de firma del webhook (SQUARE_WEBHOOK_SIGNATURE_KEY)
        notification_url: URL registrada en Square para la suscripción

    Returns:
        True si la firma es válida, False en caso contrario
    """
    if not signature:
        logger.warning("square_webhook_rejected reason=missing_signature")
        return False
    if not body:
        logger.warning("square_webhook_rejected reason=empty_body")
        return False
    if not signature_key or not notification_url:
        logger.error("square_webhook_rejected reason=signature_key_not_configured")
        return False

    expected = compute_square_signature(body, signature_key, notification_url)
    if not hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8")):
        logger.warning("square_webhook_rejected reason=signature_mismatch")
        return False
    return True


__all__ = [
    "SQUARE_SIGNATURE_HEADER",
    "compute_square_signature",
    "verify_square_signature",
]

# Fin del archivo paywall/modules/purchases/services/webhooks/signature_verification.py
