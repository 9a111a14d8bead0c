import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core.utils import to_decimal

from .exceptions import PromoCodeError
from .models import PromoCode

logger = logging.getLogger(__name__)


def calculate_discount(promo, order_amount):
    order_amount = to_decimal(order_amount)
    if promo.discount_type == PromoCode.DiscountType.PERCENTAGE:
        discount = order_amount * promo.discount_value / Decimal('100')
    else:
        discount = promo.discount_value
    return min(discount, order_amount)


def validate_promo_code(code, order_amount, now=None):
    """
    Looks up ``code`` (any letter case) and checks it against the order.
    Returns ``(promo, discount)`` or raises PromoCodeError.
    """
    code = (code or '').strip()
    if not code:
        raise PromoCodeError("Please enter a promo code.")

    promo = PromoCode.objects.filter(code__iexact=code).first()
    if promo is None or not promo.is_active:
        raise PromoCodeError("Invalid or inactive promo code.")

    now = now or timezone.now()
    if promo.valid_from and now < promo.valid_from:
        raise PromoCodeError("This promo code is not active yet.")
    if promo.valid_until and now > promo.valid_until:
        raise PromoCodeError("This promo code has expired.")
    if promo.max_uses is not None and promo.uses_count >= promo.max_uses:
        raise PromoCodeError("This promo code has reached its usage limit.")

    order_amount = to_decimal(order_amount)
    if promo.min_booking_amount is not None and order_amount < promo.min_booking_amount:
        raise PromoCodeError(f"A minimum booking amount of ₹{promo.min_booking_amount} is required for this code.")

    return promo, calculate_discount(promo, order_amount)


def increment_promo_usage(promo):
    """
    Counts one use of ``promo``. The usage cap is checked again while the
    row is locked, so concurrent checkouts cannot push it past ``max_uses``.
    """
    with transaction.atomic():
        locked = PromoCode.objects.select_for_update().get(pk=promo.pk)
        if locked.max_uses is not None and locked.uses_count >= locked.max_uses:
            raise PromoCodeError("This promo code has reached its usage limit.")
        PromoCode.objects.filter(pk=locked.pk).update(uses_count=F('uses_count') + 1)
    promo.refresh_from_db(fields=['uses_count'])
    logger.info("Promo code %s used (%s uses)", promo.code, promo.uses_count)
    return promo
