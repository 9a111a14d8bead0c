from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_POST

from bookings.checkout import PROMO_SESSION_KEY, build_order_summary, pricing_lines
from bookings.pricing import serialize_totals, sum_displayed_prices
from cart.cart import Cart
from core.utils import get_request_data, json_error

from .exceptions import PromoCodeError
from .services import validate_promo_code


@login_required
@require_POST
def apply_promo(request):
    data = get_request_data(request)
    lines, _ = Cart(request).resolve()
    if not lines:
        return json_error("Your cart is empty.")

    try:
        promo, _ = validate_promo_code(data.get('code'), sum_displayed_prices(pricing_lines(lines)))
    except PromoCodeError as exc:
        return json_error(exc.message)

    request.session[PROMO_SESSION_KEY] = promo.code
    summary = build_order_summary(request)
    return JsonResponse({
        "success": True,
        "message": f"Promo code {promo.code} applied. You saved ₹{summary['totals']['discount']}.",
        "promo_code": promo.code,
        "totals": serialize_totals(summary['totals']),
    })


@login_required
@require_POST
def remove_promo(request):
    request.session.pop(PROMO_SESSION_KEY, None)
    summary = build_order_summary(request)
    return JsonResponse({
        "success": True,
        "message": "Promo code removed.",
        "totals": serialize_totals(summary['totals']),
    })
