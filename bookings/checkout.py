"""
Checkout state kept in the session between the cart and the booking.
"""
import datetime
import logging

from cart.cart import CART_SESSION_KEY, Cart
from core.config import get_app_settings
from promotions.exceptions import PromoCodeError
from promotions.services import validate_promo_code

from .pricing import compute_order_totals, pricing_line_for_service, sum_displayed_prices

logger = logging.getLogger(__name__)

SCHEDULE_SESSION_KEY = 'checkout_schedule'
ADDRESS_SESSION_KEY = 'checkout_address'
PROMO_SESSION_KEY = 'checkout_promo'
PAYMENT_METHOD_SESSION_KEY = 'checkout_payment_method'

CHECKOUT_SESSION_KEYS = (
    CART_SESSION_KEY, SCHEDULE_SESSION_KEY, ADDRESS_SESSION_KEY,
    PROMO_SESSION_KEY, PAYMENT_METHOD_SESSION_KEY,
)


def get_schedule(session):
    """Returns ``(date, slot)`` or ``(None, None)``."""
    stored = session.get(SCHEDULE_SESSION_KEY) or {}
    try:
        date = datetime.date.fromisoformat(stored.get('date', ''))
    except (TypeError, ValueError):
        return None, None
    return date, stored.get('slot') or None


def set_schedule(session, date, slot):
    session[SCHEDULE_SESSION_KEY] = {'date': date.isoformat(), 'slot': slot}


def get_address(session):
    return session.get(ADDRESS_SESSION_KEY) or None


def set_address(session, address):
    session[ADDRESS_SESSION_KEY] = address


def clear_checkout(session):
    for key in CHECKOUT_SESSION_KEYS:
        session.pop(key, None)


def pricing_lines(cart_lines):
    return [pricing_line_for_service(line.service, line.quantity) for line in cart_lines]


def build_order_summary(request, app_settings=None, now=None):
    """
    Resolves the session cart and prices it, applying the stored promo code
    when it still validates. A promo code that no longer applies is dropped
    from the session and reported as ``promo_error``.
    """
    app_settings = app_settings or get_app_settings()
    cart = Cart(request)
    lines, _ = cart.resolve()
    priced = pricing_lines(lines)

    discount = 0
    promo_code = request.session.get(PROMO_SESSION_KEY)
    promo_error = None
    if promo_code:
        try:
            _, discount = validate_promo_code(promo_code, sum_displayed_prices(priced), now)
        except PromoCodeError as exc:
            logger.info("Dropping promo code %s: %s", promo_code, exc.message)
            request.session.pop(PROMO_SESSION_KEY, None)
            promo_code = None
            promo_error = exc.message

    totals = compute_order_totals(priced, app_settings, discount=discount)
    return {
        'cart': cart,
        'lines': lines,
        'totals': totals,
        'promo_code': promo_code,
        'promo_error': promo_error,
    }
