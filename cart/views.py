from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from bookings.checkout import build_order_summary
from bookings.pricing import serialize_totals
from catalog.models import Service
from core.activity import log_user_activity
from core.models import UserActivity
from core.utils import get_request_data, json_error

from .cart import Cart


def _parse_int(value, default=None):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _cart_response(request, message=None):
    summary = build_order_summary(request)
    payload = {
        "success": True,
        "count": len(summary['cart']),
        "lines": [
            {
                'service_id': line.service.pk,
                'name': line.service.name,
                'slug': line.service.slug,
                'quantity': line.quantity,
                'displayed_price': str(line.service.displayed_price),
                'line_total': str(line.service.displayed_price * line.quantity),
                'allow_pay_later': line.service.allow_pay_later,
            }
            for line in summary['lines']
        ],
        "totals": serialize_totals(summary['totals']),
        "promo_code": summary['promo_code'],
    }
    if summary['promo_error']:
        payload['promo_error'] = summary['promo_error']
    if message:
        payload['message'] = message
    return JsonResponse(payload)


@require_GET
def cart_detail(request):
    return _cart_response(request)


@require_POST
def cart_add(request):
    data = get_request_data(request)
    service_id = _parse_int(data.get('service_id'))
    quantity = _parse_int(data.get('quantity'), 1)
    if service_id is None or quantity is None or quantity < 1:
        return json_error("Invalid data provided.")

    service = Service.objects.filter(pk=service_id, is_active=True).first()
    if service is None:
        return json_error("Service not found.", status=404)

    Cart(request).add(service.pk, quantity)
    log_user_activity(request, UserActivity.EventType.ADD_TO_CART,
                      {'service_id': service.pk, 'service_name': service.name, 'quantity': quantity})
    return _cart_response(request, message=f"{service.name} added to cart.")


@require_POST
def cart_update(request):
    data = get_request_data(request)
    service_id = _parse_int(data.get('service_id'))
    quantity = _parse_int(data.get('quantity'))
    if service_id is None or quantity is None:
        return json_error("Invalid data provided.")

    if not Cart(request).set_quantity(service_id, quantity):
        return json_error("This service is not in your cart.", status=404)
    if quantity <= 0:
        log_user_activity(request, UserActivity.EventType.REMOVE_FROM_CART, {'service_id': service_id})
    return _cart_response(request)


@require_POST
def cart_remove(request):
    data = get_request_data(request)
    service_id = _parse_int(data.get('service_id'))
    if service_id is None:
        return json_error("Invalid data provided.")

    if not Cart(request).remove(service_id):
        return json_error("This service is not in your cart.", status=404)
    log_user_activity(request, UserActivity.EventType.REMOVE_FROM_CART, {'service_id': service_id})
    return _cart_response(request, message="Item removed from cart.")
