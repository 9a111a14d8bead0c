"""
Time-slot generation for checkout.

Slots are generated from the three service periods in the application
settings, trimmed by the late-booking cutoff and then filtered by the
per-category concurrent booking limits.
"""
import datetime
from collections import Counter

from django.utils import timezone

from bookings.models import Booking, BookingItem
from core.config import get_app_settings

from .exceptions import InvalidSlotError, PastDateError
from .models import TimeSlotCategoryLimit


def parse_time_to_minutes(value):
    """'13:30' -> 810. Anything without a colon counts as midnight."""
    if not value or ':' not in value:
        return 0
    hours, minutes = value.split(':', 1)
    return int(hours) * 60 + int(minutes)


def format_time_from_minutes(total_minutes):
    """810 -> '01:30 PM'."""
    hours, minutes = divmod(total_minutes, 60)
    period = 'AM' if hours % 24 < 12 else 'PM'
    hours = hours % 12 or 12
    return f"{hours:02d}:{minutes:02d} {period}"


def slot_label_to_minutes(label):
    """'01:30 PM' -> 810."""
    parsed = datetime.datetime.strptime(label.strip(), '%I:%M %p')
    return parsed.hour * 60 + parsed.minute


def slot_start(reference_date, minutes):
    naive = datetime.datetime.combine(reference_date, datetime.time()) + datetime.timedelta(minutes=minutes)
    return timezone.make_aware(naive)


def generate_raw_time_slots(reference_date, periods, interval, late_limit_enabled=False,
                            late_limit_hours=0, now=None):
    """
    Returns the slot labels for ``reference_date`` in period order.

    ``periods`` is a sequence of ``(start, end)`` or ``(name, start, end)``
    tuples with 'HH:MM' strings; a period with a blank bound is skipped.
    A slot survives when it starts at least one minute after ``now`` plus
    the late-booking delay.
    """
    if interval is None or interval <= 0:
        raise ValueError("Slot interval must be a positive number of minutes.")

    now = now or timezone.now()
    delay_hours = late_limit_hours if late_limit_enabled and late_limit_hours > 0 else 0
    earliest = now + datetime.timedelta(hours=delay_hours, minutes=1)

    slots = []
    for period in periods:
        start, end = period[-2], period[-1]
        if not start or not end:
            continue
        current = parse_time_to_minutes(start)
        end_minutes = parse_time_to_minutes(end)
        while current < end_minutes:
            if slot_start(reference_date, current) >= earliest:
                slots.append(format_time_from_minutes(current))
            current += interval
    return slots


def filter_slots_by_capacity(raw_slots, cart_category_ids, booked_items, limits):
    """
    Drops every slot that is already full for one of the cart's categories.

    ``booked_items`` is an iterable of ``(slot_label, category_id)`` pairs,
    one per booked service line. ``limits`` maps category id to its maximum;
    a missing or non-positive limit means unlimited.
    """
    if not cart_category_ids:
        return list(raw_slots)

    usage = Counter((slot, category_id) for slot, category_id in booked_items)
    capped = {
        category_id: limits[category_id]
        for category_id in set(cart_category_ids)
        if limits.get(category_id, 0) > 0
    }
    if not capped:
        return list(raw_slots)

    return [
        slot for slot in raw_slots
        if all(usage[(slot, category_id)] < limit for category_id, limit in capped.items())
    ]


# --- Database snapshot ---

def load_category_limits(category_ids, lock=False):
    qs = TimeSlotCategoryLimit.objects.filter(category_id__in=category_ids)
    if lock:
        qs = qs.select_for_update()
    return {row.category_id: row.max_concurrent_bookings for row in qs}


def load_booked_items(date):
    rows = (BookingItem.objects
            .filter(booking__scheduled_date=date, service__isnull=False)
            .exclude(booking__status=Booking.Status.CANCELLED)
            .values_list('booking__scheduled_time_slot', 'service__sub_category__parent_category_id'))
    return list(rows)


def available_slots_for_date(date, cart_category_ids, now=None, app_settings=None, lock=False):
    app_settings = app_settings or get_app_settings()
    raw_slots = generate_raw_time_slots(
        date,
        app_settings.service_periods(),
        app_settings.slot_interval_minutes,
        app_settings.enable_limit_late_bookings,
        app_settings.limit_late_booking_hours,
        now,
    )
    if not raw_slots or not cart_category_ids:
        return raw_slots
    limits = load_category_limits(cart_category_ids, lock=lock)
    return filter_slots_by_capacity(raw_slots, cart_category_ids, load_booked_items(date), limits)


def find_initial_schedule(preferred_date, cart_category_ids, now=None):
    """
    Picks the first date to show: the saved date if it is not in the past,
    otherwise today. When that day has no slots left the next day is tried
    once. Returns ``(date, slots)``.
    """
    now = now or timezone.now()
    today = timezone.localtime(now).date()
    date = preferred_date if preferred_date and preferred_date >= today else today

    app_settings = get_app_settings()
    slots = available_slots_for_date(date, cart_category_ids, now, app_settings)
    if not slots:
        date = date + datetime.timedelta(days=1)
        slots = available_slots_for_date(date, cart_category_ids, now, app_settings)
    return date, slots


def validate_slot_choice(date, slot, cart_category_ids, now=None):
    """Raises a SchedulingError unless ``slot`` can currently be booked on ``date``."""
    now = now or timezone.now()
    if date < timezone.localtime(now).date():
        raise PastDateError("Cannot select a past date.")
    if not slot or slot not in available_slots_for_date(date, cart_category_ids, now):
        raise InvalidSlotError("The selected time slot is not available. Please choose another.")
