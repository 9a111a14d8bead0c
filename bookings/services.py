"""
Booking creation, cancellation and the provider job lifecycle.
"""
import datetime
import logging
import string
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone
from django.utils.crypto import get_random_string

from cart.cart import Cart
from core.activity import log_user_activity
from core.config import get_app_settings
from core.models import Notification, UserActivity
from core.notifications import notify, notify_admin
from core.utils import money
from promotions.exceptions import PromoCodeError
from promotions.services import increment_promo_usage, validate_promo_code
from scheduling.slots import available_slots_for_date, slot_label_to_minutes, slot_start

from .checkout import (PROMO_SESSION_KEY, clear_checkout, get_address, get_schedule,
                       pricing_lines)
from .exceptions import (BookingError, BookingStateError, CartServiceMissingError,
                         CheckoutIncompleteError, EmptyCartError, PaymentMethodError,
                         SlotUnavailableError)
from .models import Booking, BookingItem, BookingPlatformFee
from .pricing import compute_order_totals, sum_displayed_prices

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
BOOKING_ID_CHARS = string.ascii_uppercase + string.digits


def generate_booking_id(now=None):
    """
    Generates a booking ID in the format PREFIX-YYYYMMDDHHMM-XXXXX.
    e.g., FIXBRO-202506011430-7QK2D
    """
    stamp = timezone.localtime(now or timezone.now()).strftime('%Y%m%d%H%M')
    while True:
        booking_id = f"{settings.BOOKING_ID_PREFIX}-{stamp}-{get_random_string(5, BOOKING_ID_CHARS)}"
        if not Booking.objects.filter(booking_id=booking_id).exists():
            return booking_id


def check_payment_method(payment_method, services, app_settings):
    if payment_method == Booking.PaymentMethod.ONLINE:
        if not app_settings.enable_online_payment:
            raise PaymentMethodError("Online payment is currently unavailable.")
    elif payment_method == Booking.PaymentMethod.PAY_LATER:
        if not app_settings.enable_cod:
            raise PaymentMethodError("Pay After Service is currently unavailable.")
        blocked = [service.name for service in services if not service.allow_pay_later]
        if blocked:
            raise PaymentMethodError(f"Pay After Service is not available for: {', '.join(blocked)}.")
    else:
        raise PaymentMethodError("Please choose a valid payment method.")


def create_booking(request, payment_method, payment_details=None, now=None):
    """
    Turns the checkout session into a Booking. The chosen slot is checked
    again while the category limit rows are locked, so two customers cannot
    both take the last place in a slot.
    """
    session = request.session
    now = now or timezone.now()
    payment_details = payment_details or {}

    cart = Cart(request)
    if cart.is_empty():
        raise EmptyCartError()

    scheduled_date, time_slot = get_schedule(session)
    address = get_address(session)
    if not scheduled_date or not time_slot or not address:
        raise CheckoutIncompleteError()

    lines, missing = cart.resolve(prune=False)
    if missing or not lines:
        raise CartServiceMissingError()

    app_settings = get_app_settings()
    check_payment_method(payment_method, [line.service for line in lines], app_settings)
    category_ids = Cart.category_ids(lines)

    with transaction.atomic():
        if scheduled_date < timezone.localtime(now).date():
            raise SlotUnavailableError("The selected date is in the past. Please choose another.")
        available = available_slots_for_date(scheduled_date, category_ids, now, app_settings, lock=True)
        if time_slot not in available:
            raise SlotUnavailableError()

        priced = pricing_lines(lines)
        promo = None
        discount = ZERO
        promo_code = session.get(PROMO_SESSION_KEY)
        if promo_code:
            try:
                promo, discount = validate_promo_code(promo_code, sum_displayed_prices(priced), now)
            except PromoCodeError as exc:
                session.pop(PROMO_SESSION_KEY, None)
                raise BookingError(f"Promo code {promo_code} can no longer be applied: {exc.message}")

        totals = compute_order_totals(priced, app_settings, discount=discount)
        status = (Booking.Status.PENDING_PAYMENT if payment_method == Booking.PaymentMethod.PAY_LATER
                  else Booking.Status.CONFIRMED)

        booking = Booking.objects.create(
            booking_id=generate_booking_id(now),
            user=request.user if request.user.is_authenticated else None,
            customer_name=address['full_name'],
            customer_email=address['email'],
            customer_phone=address['phone'],
            address_line1=address['address_line1'],
            address_line2=address.get('address_line2', ''),
            city=address['city'],
            state=address['state'],
            pincode=address['pincode'],
            latitude=address.get('latitude'),
            longitude=address.get('longitude'),
            scheduled_date=scheduled_date,
            scheduled_time_slot=time_slot,
            sub_total=totals['subtotal'],
            visiting_charge=totals['visiting_charge'],
            tax_amount=totals['tax_amount'],
            total_amount=totals['total'],
            discount_code=promo.code if promo else '',
            discount_amount=totals['discount'],
            payment_method=payment_method,
            gateway_order_id=payment_details.get('gateway_order_id', ''),
            gateway_payment_id=payment_details.get('gateway_payment_id', ''),
            gateway_signature=payment_details.get('gateway_signature', ''),
            status=status,
        )

        BookingItem.objects.bulk_create([
            BookingItem(
                booking=booking,
                service=line.service,
                service_name=line.service.name,
                quantity=line.quantity,
                price_at_booking=line.service.price,
                discounted_price_at_booking=(line.service.displayed_price
                                             if line.service.displayed_price < line.service.price else None),
                is_tax_inclusive=line.service.is_tax_inclusive,
                tax_percent_applied=item['tax_percent'],
                tax_amount=item['tax_amount'],
            )
            for line, item in zip(lines, totals['items'])
        ])
        BookingPlatformFee.objects.bulk_create([
            BookingPlatformFee(
                booking=booking,
                name=fee['name'],
                fee_type=fee['type'],
                value_applied=fee['value'],
                calculated_fee_amount=fee['calculated_fee_amount'],
                tax_rate_on_fee=fee['tax_rate_on_fee'],
                tax_amount_on_fee=fee['tax_amount_on_fee'],
            )
            for fee in totals['platform_fees']
        ])

        if promo and discount > 0:
            try:
                increment_promo_usage(promo)
            except PromoCodeError as exc:
                session.pop(PROMO_SESSION_KEY, None)
                raise BookingError(f"Promo code {promo.code} can no longer be applied: {exc.message}")

        service_names = ', '.join(line.service.name for line in lines)
        if booking.user:
            notify(booking.user, "Booking Confirmed!",
                   f"Your booking {booking.booking_id} for {service_names} on "
                   f"{scheduled_date:%d %b %Y} is {booking.status}.",
                   Notification.NotificationType.SUCCESS, href='/bookings/')
        notify_admin("New Booking Received!",
                     f"ID: {booking.booking_id} by {booking.customer_name}. "
                     f"Date: {scheduled_date:%d %b %Y} at {time_slot}. Total: ₹{booking.total_amount}.",
                     href=f'/admin/bookings/booking/{booking.pk}/change/')

        log_user_activity(request, UserActivity.EventType.NEW_BOOKING, {
            'booking_id': booking.booking_id,
            'total_amount': str(booking.total_amount),
            'item_count': len(lines),
            'payment_method': payment_method,
            'services': [{'id': line.service.pk, 'name': line.service.name, 'quantity': line.quantity}
                         for line in lines],
        })

    clear_checkout(session)
    logger.info("Booking %s created for %s on %s %s (total %s)",
                booking.booking_id, booking.customer_email, scheduled_date, time_slot, booking.total_amount)
    return booking


# --- Cancellation ---

def scheduled_start(booking):
    try:
        minutes = slot_label_to_minutes(booking.scheduled_time_slot)
    except ValueError:
        raise BookingStateError(
            f"Booking {booking.booking_id} has an unreadable time slot '{booking.scheduled_time_slot}'.")
    return slot_start(booking.scheduled_date, minutes)


def free_cancellation_window(app_settings):
    return datetime.timedelta(
        days=app_settings.free_cancellation_days,
        hours=app_settings.free_cancellation_hours,
        minutes=app_settings.free_cancellation_minutes,
    )


def compute_cancellation_fee(booking, app_settings=None, now=None):
    app_settings = app_settings or get_app_settings()
    if not app_settings.enable_cancellation_policy:
        return money(ZERO)

    now = now or timezone.now()
    if now < scheduled_start(booking) - free_cancellation_window(app_settings):
        return money(ZERO)

    if app_settings.cancellation_fee_type == app_settings.FeeType.PERCENTAGE:
        return money(booking.total_amount * app_settings.cancellation_fee_value / Decimal('100'))
    return money(app_settings.cancellation_fee_value)


def cancellation_quote(booking, app_settings=None, now=None):
    app_settings = app_settings or get_app_settings()
    now = now or timezone.now()
    fee = compute_cancellation_fee(booking, app_settings, now)
    free_until = None
    if app_settings.enable_cancellation_policy:
        free_until = scheduled_start(booking) - free_cancellation_window(app_settings)
    return {
        'booking_id': booking.booking_id,
        'can_cancel': not booking.is_closed,
        'fee': fee,
        'fee_required': fee > 0,
        'free_cancellation_until': free_until,
    }


def cancel_booking(booking, payment_reference='', now=None, request=None):
    now = now or timezone.now()
    with transaction.atomic():
        booking = Booking.objects.select_for_update().get(pk=booking.pk)
        if booking.is_closed:
            raise BookingStateError(f"Booking {booking.booking_id} is already {booking.status.lower()}.")

        fee = compute_cancellation_fee(booking, now=now)
        if fee > 0 and not payment_reference:
            raise BookingError(f"A cancellation fee of ₹{fee} must be paid before cancelling.")

        booking.status = Booking.Status.CANCELLED
        booking.cancellation_fee_paid = fee
        booking.cancellation_payment_id = payment_reference if fee > 0 else ''
        booking.cancelled_at = now
        booking.save(update_fields=['status', 'cancellation_fee_paid', 'cancellation_payment_id',
                                    'cancelled_at', 'updated_at'])

        if booking.user:
            notify(booking.user, "Booking Cancelled",
                   f"Your booking {booking.booking_id} has been cancelled.",
                   Notification.NotificationType.WARNING, href='/bookings/')
        if booking.provider:
            notify(booking.provider.user, "Job Cancelled",
                   f"Booking {booking.booking_id} on {booking.scheduled_date:%d %b %Y} was cancelled by the customer.",
                   Notification.NotificationType.BOOKING_UPDATE)
        notify_admin("Booking Cancelled",
                     f"ID: {booking.booking_id} cancelled. Fee: ₹{fee}.",
                     href=f'/admin/bookings/booking/{booking.pk}/change/')
        if request is not None:
            log_user_activity(request, UserActivity.EventType.BOOKING_CANCELLED,
                              {'booking_id': booking.booking_id, 'fee': str(fee)})

    logger.info("Booking %s cancelled (fee %s)", booking.booking_id, fee)
    return booking


# --- Status changes & provider lifecycle ---

ASSIGNABLE_STATUSES = (
    Booking.Status.PENDING_PAYMENT, Booking.Status.CONFIRMED, Booking.Status.PROCESSING,
    Booking.Status.RESCHEDULED, Booking.Status.PROVIDER_REJECTED,
)


def _locked(booking):
    return Booking.objects.select_for_update().select_related('provider__user', 'user').get(pk=booking.pk)


def _require(booking, allowed, provider=None):
    if booking.status not in allowed:
        raise BookingStateError(
            f"Booking {booking.booking_id} cannot be updated while it is {booking.get_status_display()}.")
    if provider is not None and booking.provider_id != provider.pk:
        raise BookingStateError(f"Booking {booking.booking_id} is not assigned to you.")


def set_booking_status(booking, status):
    """Staff status change. Closed bookings stay closed."""
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status == status:
            return booking
        if booking.is_closed:
            raise BookingStateError(f"Booking {booking.booking_id} is already {booking.status.lower()}.")
        booking.status = status
        if status == Booking.Status.CANCELLED:
            booking.cancelled_at = timezone.now()
        booking.save(update_fields=['status', 'cancelled_at', 'updated_at'])
        if status == Booking.Status.COMPLETED and booking.provider:
            type(booking.provider).objects.filter(pk=booking.provider_id).update(
                total_jobs_completed=F('total_jobs_completed') + 1)
        if booking.user:
            notify(booking.user, "Booking Update",
                   f"Your booking {booking.booking_id} is now {booking.get_status_display()}.",
                   Notification.NotificationType.BOOKING_UPDATE, href='/bookings/')
    logger.info("Booking %s marked %s", booking.booking_id, status)
    return booking


def assign_provider(booking, provider):
    with transaction.atomic():
        booking = _locked(booking)
        _require(booking, ASSIGNABLE_STATUSES)
        booking.provider = provider
        booking.status = Booking.Status.ASSIGNED_TO_PROVIDER
        booking.save(update_fields=['provider', 'status', 'updated_at'])

        notify(provider.user, "New Job Assigned",
               f"Booking {booking.booking_id} on {booking.scheduled_date:%d %b %Y} at "
               f"{booking.scheduled_time_slot} has been assigned to you.",
               Notification.NotificationType.BOOKING_UPDATE, href='/providers/jobs/')
        if booking.user:
            notify(booking.user, "Professional Assigned",
                   f"A professional has been assigned to your booking {booking.booking_id}.",
                   Notification.NotificationType.BOOKING_UPDATE, href='/bookings/')
    logger.info("Booking %s assigned to %s", booking.booking_id, provider.provider_id)
    return booking


def provider_accept_job(booking, provider):
    with transaction.atomic():
        booking = _locked(booking)
        _require(booking, (Booking.Status.ASSIGNED_TO_PROVIDER,), provider)
        booking.status = Booking.Status.PROVIDER_ACCEPTED
        booking.save(update_fields=['status', 'updated_at'])
        if booking.user:
            notify(booking.user, "Professional On The Way",
                   f"Your booking {booking.booking_id} has been accepted by the professional.",
                   Notification.NotificationType.BOOKING_UPDATE, href='/bookings/')
    return booking


def provider_reject_job(booking, provider, reason=''):
    with transaction.atomic():
        booking = _locked(booking)
        _require(booking, (Booking.Status.ASSIGNED_TO_PROVIDER,), provider)
        booking.status = Booking.Status.PROVIDER_REJECTED
        booking.provider = None
        booking.save(update_fields=['status', 'provider', 'updated_at'])
        notify_admin("Job Rejected",
                     f"{provider.provider_id} rejected booking {booking.booking_id}. {reason}".strip(),
                     href=f'/admin/bookings/booking/{booking.pk}/change/')
    logger.info("Booking %s rejected by %s", booking.booking_id, provider.provider_id)
    return booking


def provider_start_job(booking, provider):
    with transaction.atomic():
        booking = _locked(booking)
        _require(booking, (Booking.Status.PROVIDER_ACCEPTED,), provider)
        booking.status = Booking.Status.IN_PROGRESS_BY_PROVIDER
        booking.save(update_fields=['status', 'updated_at'])
    return booking


def provider_complete_job(booking, provider):
    with transaction.atomic():
        booking = _locked(booking)
        _require(booking, (Booking.Status.IN_PROGRESS_BY_PROVIDER,), provider)
        booking.status = Booking.Status.COMPLETED
        booking.save(update_fields=['status', 'updated_at'])
        type(provider).objects.filter(pk=provider.pk).update(total_jobs_completed=F('total_jobs_completed') + 1)
        if booking.user:
            notify(booking.user, "Service Completed",
                   f"Your booking {booking.booking_id} has been completed. Thank you for choosing us!",
                   Notification.NotificationType.SUCCESS, href='/bookings/')
    provider.refresh_from_db(fields=['total_jobs_completed'])
    logger.info("Booking %s completed by %s", booking.booking_id, provider.provider_id)
    return booking


def provider_earnings(provider):
    completed = provider.bookings.filter(status=Booking.Status.COMPLETED)
    total = completed.aggregate(total=Sum('total_amount'))['total'] or ZERO
    return {
        'completed_jobs': completed.count(),
        'total_earnings': money(total),
    }
