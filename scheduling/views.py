import datetime
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from bookings.checkout import get_schedule, set_schedule
from cart.cart import Cart
from core.activity import log_user_activity
from core.config import get_app_settings
from core.models import UserActivity
from core.utils import get_request_data, json_error

from .exceptions import SchedulingError
from .slots import available_slots_for_date, find_initial_schedule, validate_slot_choice

logger = logging.getLogger(__name__)


def _cart_category_ids(request):
    lines, _ = Cart(request).resolve()
    return Cart.category_ids(lines)


def _parse_date(value):
    try:
        return datetime.date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


@login_required
@require_GET
def schedule_slots(request):
    now = timezone.now()
    category_ids = _cart_category_ids(request)
    saved_date, saved_slot = get_schedule(request.session)

    requested = request.GET.get('date')
    if requested:
        date = _parse_date(requested)
        if date is None:
            return json_error("Invalid date. Use YYYY-MM-DD.")
        if date < timezone.localtime(now).date():
            return json_error("Cannot select a past date.")
        slots = available_slots_for_date(date, category_ids, now)
    else:
        date, slots = find_initial_schedule(saved_date, category_ids, now)

    selected = saved_slot if saved_date == date and saved_slot in slots else None
    return JsonResponse({
        "success": True,
        "date": date.isoformat(),
        "slots": slots,
        "selected_slot": selected,
        "slot_interval_minutes": get_app_settings().slot_interval_minutes,
    })


@login_required
@require_POST
def select_schedule(request):
    data = get_request_data(request)
    date = _parse_date(data.get('date'))
    slot = (data.get('slot') or '').strip()
    if date is None or not slot:
        return json_error("Please select a date and a time slot.")

    try:
        validate_slot_choice(date, slot, _cart_category_ids(request))
    except SchedulingError as exc:
        return json_error(str(exc))

    set_schedule(request.session, date, slot)
    log_user_activity(request, UserActivity.EventType.CHECKOUT_STEP,
                      {'step': 'schedule', 'date': date.isoformat(), 'slot': slot})
    logger.debug("User %s picked %s %s", request.user.pk, date, slot)
    return JsonResponse({"success": True, "date": date.isoformat(), "slot": slot})
