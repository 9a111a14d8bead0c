import datetime

import pytest

from bookings.models import Booking
from scheduling.exceptions import InvalidSlotError, PastDateError
from scheduling.models import TimeSlotCategoryLimit
from scheduling.slots import (available_slots_for_date, filter_slots_by_capacity, find_initial_schedule,
                              format_time_from_minutes, generate_raw_time_slots, parse_time_to_minutes,
                              slot_label_to_minutes, validate_slot_choice)

from .helpers import aware

PERIODS = [
    ('morning', '09:00', '12:00'),
    ('afternoon', '13:00', '17:00'),
    ('evening', '17:00', '19:00'),
]
DAY = datetime.date(2030, 1, 10)
ALL_SLOTS = ['09:00 AM', '10:00 AM', '11:00 AM', '01:00 PM', '02:00 PM', '03:00 PM',
             '04:00 PM', '05:00 PM', '06:00 PM']


def test_parse_time_to_minutes():
    assert parse_time_to_minutes('13:30') == 810
    assert parse_time_to_minutes('00:00') == 0
    assert parse_time_to_minutes('0930') == 0
    assert parse_time_to_minutes('') == 0


def test_format_time_from_minutes():
    assert format_time_from_minutes(0) == '12:00 AM'
    assert format_time_from_minutes(9 * 60) == '09:00 AM'
    assert format_time_from_minutes(12 * 60) == '12:00 PM'
    assert format_time_from_minutes(810) == '01:30 PM'


def test_slot_label_to_minutes_reads_generated_labels():
    assert slot_label_to_minutes('01:30 PM') == 810
    assert slot_label_to_minutes('12:00 AM') == 0


def test_generates_every_slot_for_a_future_day():
    now = aware(2030, 1, 9, 12, 0)
    assert generate_raw_time_slots(DAY, PERIODS, 60, now=now) == ALL_SLOTS


def test_slots_before_now_plus_one_minute_are_dropped():
    now = aware(2030, 1, 10, 10, 0)
    slots = generate_raw_time_slots(DAY, PERIODS, 60, now=now)
    # 10:00 itself is not at least a minute away
    assert slots[0] == '11:00 AM'


def test_late_booking_limit_pushes_cutoff():
    now = aware(2030, 1, 10, 8, 0)
    slots = generate_raw_time_slots(DAY, PERIODS, 60, late_limit_enabled=True, late_limit_hours=4, now=now)
    assert slots == ['01:00 PM', '02:00 PM', '03:00 PM', '04:00 PM', '05:00 PM', '06:00 PM']


def test_late_booking_hours_ignored_when_disabled():
    now = aware(2030, 1, 10, 8, 0)
    slots = generate_raw_time_slots(DAY, PERIODS, 60, late_limit_enabled=False, late_limit_hours=4, now=now)
    assert slots == ALL_SLOTS


def test_period_with_missing_bound_is_skipped():
    now = aware(2030, 1, 9, 12, 0)
    periods = [('morning', '09:00', ''), ('afternoon', '13:00', '14:00')]
    assert generate_raw_time_slots(DAY, periods, 30, now=now) == ['01:00 PM', '01:30 PM']


@pytest.mark.parametrize('interval', [0, -15])
def test_non_positive_interval_is_rejected(interval):
    with pytest.raises(ValueError):
        generate_raw_time_slots(DAY, PERIODS, interval, now=aware(2030, 1, 9))


def test_capacity_filter_without_cart_categories_keeps_everything():
    booked = [('09:00 AM', 1)] * 5
    assert filter_slots_by_capacity(ALL_SLOTS, [], booked, {1: 1}) == ALL_SLOTS


def test_capacity_filter_drops_full_slots():
    booked = [('09:00 AM', 1), ('09:00 AM', 1), ('10:00 AM', 1)]
    slots = filter_slots_by_capacity(['09:00 AM', '10:00 AM', '11:00 AM'], [1], booked, {1: 2})
    assert slots == ['10:00 AM', '11:00 AM']


def test_capacity_filter_treats_zero_limit_as_unlimited():
    booked = [('09:00 AM', 1)] * 10
    assert filter_slots_by_capacity(['09:00 AM'], [1], booked, {1: 0}) == ['09:00 AM']


def test_capacity_filter_only_checks_cart_categories():
    booked = [('09:00 AM', 2)]
    assert filter_slots_by_capacity(['09:00 AM'], [1], booked, {1: 1, 2: 1}) == ['09:00 AM']


def test_capacity_filter_any_full_category_blocks_slot():
    booked = [('09:00 AM', 2)]
    assert filter_slots_by_capacity(['09:00 AM', '10:00 AM'], [1, 2], booked, {1: 5, 2: 1}) == ['10:00 AM']


@pytest.mark.django_db
def test_available_slots_respect_category_limits(app_settings, category, service, make_booking):
    TimeSlotCategoryLimit.objects.create(category=category, max_concurrent_bookings=1)
    make_booking(service=service, date=DAY, slot='09:00 AM')

    slots = available_slots_for_date(DAY, [category.pk], now=aware(2030, 1, 9))
    assert '09:00 AM' not in slots
    assert '10:00 AM' in slots


@pytest.mark.django_db
def test_cancelled_bookings_free_their_slot(app_settings, category, service, make_booking):
    TimeSlotCategoryLimit.objects.create(category=category, max_concurrent_bookings=1)
    make_booking(service=service, date=DAY, slot='09:00 AM', status=Booking.Status.CANCELLED)

    assert '09:00 AM' in available_slots_for_date(DAY, [category.pk], now=aware(2030, 1, 9))


@pytest.mark.django_db
def test_available_slots_use_configured_interval(app_settings):
    app_settings.slot_interval_minutes = 90
    app_settings.save()
    slots = available_slots_for_date(DAY, [], now=aware(2030, 1, 9))
    assert slots[:2] == ['09:00 AM', '10:30 AM']


@pytest.mark.django_db
def test_initial_schedule_falls_back_to_next_day(app_settings):
    now = aware(2030, 1, 10, 20, 0)
    date, slots = find_initial_schedule(None, [], now=now)
    assert date == datetime.date(2030, 1, 11)
    assert slots == ALL_SLOTS


@pytest.mark.django_db
def test_initial_schedule_ignores_saved_date_in_the_past(app_settings):
    now = aware(2030, 1, 10, 8, 0)
    date, slots = find_initial_schedule(datetime.date(2030, 1, 5), [], now=now)
    assert date == datetime.date(2030, 1, 10)
    assert slots == ALL_SLOTS


@pytest.mark.django_db
def test_initial_schedule_keeps_future_saved_date(app_settings):
    now = aware(2030, 1, 10, 8, 0)
    date, _ = find_initial_schedule(datetime.date(2030, 1, 15), [], now=now)
    assert date == datetime.date(2030, 1, 15)


@pytest.mark.django_db
def test_validate_slot_choice(app_settings):
    now = aware(2030, 1, 10, 8, 0)
    with pytest.raises(PastDateError):
        validate_slot_choice(datetime.date(2030, 1, 9), '10:00 AM', [], now=now)
    with pytest.raises(InvalidSlotError):
        validate_slot_choice(DAY, '07:00 AM', [], now=now)
    validate_slot_choice(DAY, '10:00 AM', [], now=now)
