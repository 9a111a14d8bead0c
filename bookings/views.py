import logging

from django.contrib.auth.decorators import login_required
from django.http import FileResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from core.activity import log_user_activity
from core.config import get_app_settings
from core.models import UserActivity
from core.utils import get_request_data, json_error

from .checkout import build_order_summary, get_address, get_schedule, set_address
from .exceptions import BookingError
from .forms import CheckoutAddressForm
from .models import Booking
from .pricing import serialize_totals
from .services import cancel_booking, cancellation_quote, create_booking
from .utils import generate_invoice

logger = logging.getLogger(__name__)


def serialize_booking(booking, with_items=False):
    data = {
        'booking_id': booking.booking_id,
        'status': booking.status,
        'scheduled_date': booking.scheduled_date.isoformat(),
        'scheduled_time_slot': booking.scheduled_time_slot,
        'customer_name': booking.customer_name,
        'city': booking.city,
        'pincode': booking.pincode,
        'sub_total': str(booking.sub_total),
        'visiting_charge': str(booking.visiting_charge),
        'discount_code': booking.discount_code,
        'discount_amount': str(booking.discount_amount),
        'tax_amount': str(booking.tax_amount),
        'total_amount': str(booking.total_amount),
        'payment_method': booking.payment_method,
        'created_at': booking.created_at.isoformat(),
    }
    if with_items:
        data['items'] = [
            {
                'service_name': item.service_name,
                'quantity': item.quantity,
                'price': str(item.price_at_booking),
                'discounted_price': str(item.discounted_price_at_booking) if item.discounted_price_at_booking else None,
                'tax_percent': str(item.tax_percent_applied),
                'tax_amount': str(item.tax_amount),
            }
            for item in booking.items.all()
        ]
        data['platform_fees'] = [
            {
                'name': fee.name,
                'amount': str(fee.calculated_fee_amount),
                'tax': str(fee.tax_amount_on_fee),
            }
            for fee in booking.platform_fees.all()
        ]
        data['address'] = {
            'address_line1': booking.address_line1,
            'address_line2': booking.address_line2,
            'city': booking.city,
            'state': booking.state,
            'pincode': booking.pincode,
        }
    return data


# --- Checkout ---

@login_required
@require_GET
def checkout_summary(request):
    app_settings = get_app_settings()
    summary = build_order_summary(request, app_settings)
    scheduled_date, time_slot = get_schedule(request.session)
    return JsonResponse({
        "success": True,
        "totals": serialize_totals(summary['totals']),
        "promo_code": summary['promo_code'],
        "promo_error": summary['promo_error'],
        "schedule": {
            'date': scheduled_date.isoformat() if scheduled_date else None,
            'slot': time_slot,
        },
        "address": get_address(request.session),
        "payment_options": {
            'online': app_settings.enable_online_payment,
            'later': app_settings.enable_cod and all(line.service.allow_pay_later for line in summary['lines']),
        },
    })


@login_required
@require_POST
def checkout_address(request):
    form = CheckoutAddressForm(get_request_data(request))
    if not form.is_valid():
        return JsonResponse({"success": False, "message": "Please correct the highlighted fields.",
                             "errors": form.errors}, status=400)

    set_address(request.session, form.session_data())
    log_user_activity(request, UserActivity.EventType.CHECKOUT_STEP, {'step': 'address'})
    return JsonResponse({"success": True, "address": form.session_data()})


@login_required
@require_POST
def place_booking(request):
    data = get_request_data(request)
    payment_details = {key: data.get(key, '') for key in
                       ('gateway_order_id', 'gateway_payment_id', 'gateway_signature')}
    try:
        booking = create_booking(request, data.get('payment_method', ''), payment_details)
    except BookingError as exc:
        logger.warning("Booking failed for user %s: %s", request.user.pk, exc.message)
        return json_error(exc.message)

    return JsonResponse({
        "success": True,
        "message": f"Your booking ID is {booking.booking_id}.",
        "booking": serialize_booking(booking, with_items=True),
    }, status=201)


# --- Customer bookings ---

@login_required
@require_GET
def booking_list(request):
    bookings = Booking.objects.filter(user=request.user)
    return JsonResponse({"bookings": [serialize_booking(booking) for booking in bookings]})


@login_required
@require_GET
def booking_detail(request, booking_id):
    booking = get_object_or_404(Booking, booking_id=booking_id, user=request.user)
    return JsonResponse(serialize_booking(booking, with_items=True))


@login_required
@require_GET
def booking_cancellation_quote(request, booking_id):
    booking = get_object_or_404(Booking, booking_id=booking_id, user=request.user)
    try:
        quote = cancellation_quote(booking)
    except BookingError as exc:
        return json_error(exc.message)
    quote['fee'] = str(quote['fee'])
    if quote['free_cancellation_until']:
        quote['free_cancellation_until'] = quote['free_cancellation_until'].isoformat()
    return JsonResponse(quote)


@login_required
@require_POST
def booking_cancel(request, booking_id):
    booking = get_object_or_404(Booking, booking_id=booking_id, user=request.user)
    data = get_request_data(request)
    try:
        booking = cancel_booking(booking, payment_reference=data.get('payment_reference', ''), request=request)
    except BookingError as exc:
        return json_error(exc.message)
    return JsonResponse({
        "success": True,
        "message": f"Booking {booking.booking_id} has been cancelled.",
        "cancellation_fee_paid": str(booking.cancellation_fee_paid),
    })


@login_required
@require_GET
def booking_invoice(request, booking_id):
    booking = get_object_or_404(Booking, booking_id=booking_id, user=request.user)
    if not booking.invoice:
        generate_invoice(booking)
    booking.invoice.open('rb')
    return FileResponse(booking.invoice, as_attachment=True, filename=f"invoice_{booking.booking_id}.pdf")
