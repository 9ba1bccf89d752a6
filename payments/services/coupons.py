"""
Coupon lookup and discount arithmetic.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import status

from ..models import Coupon


class CouponError(Exception):
    def __init__(self, message, status_code=status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def validate_coupon(code, plan_name='', now=None):
    """
    Returns the usable ``Coupon`` for ``code`` and optional ``plan_name``.

    Raises ``CouponError`` with 400 for a missing code, expiry or plan
    mismatch and 404 when no active, already valid coupon exists.
    """
    code = (code or '').strip().upper()
    plan_name = (plan_name or '').strip().upper()
    now = now or timezone.now()

    if not code:
        raise CouponError(_("Informe o código"))

    coupon = Coupon.objects.filter(
        Q(valid_from__isnull=True) | Q(valid_from__lte=now),
        code=code,
        is_active=True,
    ).first()
    if coupon is None:
        raise CouponError(_("Cupom inválido ou inativo"), status.HTTP_404_NOT_FOUND)

    if coupon.valid_to and coupon.valid_to < now:
        raise CouponError(_("Cupom expirado"))

    if plan_name and coupon.applies_to not in (Coupon.AppliesTo.ANY, plan_name):
        raise CouponError(_("Cupom não aplicável a este plano"))

    return coupon


def apply_discount(price, coupon):
    """Discounted price, never below zero."""
    price = Decimal(str(price))
    if coupon is None:
        return price

    if coupon.discount_type == Coupon.DiscountType.PERCENT:
        discounted = price - price * coupon.value / Decimal('100')
    else:
        discounted = price - coupon.value

    return max(discounted, Decimal('0')).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
