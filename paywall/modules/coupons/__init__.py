# -*- coding: utf-8 -*-
"""
paywall/modules/coupons/__init__.py

Cupones de descuento: definición reutilizable (CouponCode) y su aplicación
única por compra (CouponRedemption).

Estructura:
- enums: DiscountType, CouponStatus, CouponRejectionReason
- models: CouponCode, CouponRedemption
- repositories: CouponRepository (incremento atómico condicional)
- services: CouponService (CouponEngine)
- routes: validación pública y administración

Autor: Equipo Paywall
Fecha: 2026-02-08
"""

# Fin del archivo paywall/modules/coupons/__init__.py
