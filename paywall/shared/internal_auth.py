# -*- coding: utf-8 -*-
"""
paywall/shared/internal_auth.py

Autenticación de servicio interno para endpoints /admin (cupones,
revocación de entitlements).

Uso:
    router = APIRouter(dependencies=[Depends(require_internal_service_token)])

El token se lee de app.state.settings (APP_SERVICE_TOKEN). En desarrollo y
pruebas, si no está configurado, se permite el acceso con un warning.

Autor: Equipo Paywall
Fecha: 2026-02-09
"""

from __future__ import annotations

import logging
import secrets
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status

logger = logging.getLogger(__name__)


async def require_internal_service_token(
    request: Request,
    authorization: Annotated[Optional[str], Header()] = None,
) -> bool:
    """
    Valida Authorization: Bearer <APP_SERVICE_TOKEN>.

    Raises:
        HTTPException 401: Sin header o formato inválido.
        HTTPException 403: Token incorrecto.
        HTTPException 500: Token no configurado en producción.
    """
    settings = request.app.state.settings
    token_value = settings.internal_service_token

    if token_value is None:
        if settings.is_prod:
            logger.error("internal_service_token_not_configured: APP_SERVICE_TOKEN must be set")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal service token not configured",
            )
        logger.warning("internal_auth_disabled: APP_SERVICE_TOKEN not set (non-production)")
        return True

    if not authorization:
        logger.warning("internal_auth_missing_header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("internal_auth_invalid_format")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization format. Use: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not secrets.compare_digest(parts[1], token_value.get_secret_value()):
        logger.warning("internal_auth_invalid_token")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid service token",
        )

    return True


InternalServiceAuth = Annotated[bool, Depends(require_internal_service_token)]


__all__ = ["require_internal_service_token", "InternalServiceAuth"]

# Fin del archivo paywall/shared/internal_auth.py
