import json
import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.http import JsonResponse

GUEST_SESSION_KEY = 'guest_id'
TWO_PLACES = Decimal('0.01')


def _get_json_data(request):
    """Helper to safely parse JSON body."""
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def get_request_data(request):
    """Reads JSON bodies and plain form posts alike."""
    if request.content_type == 'application/json':
        return _get_json_data(request)
    return request.POST


def get_guest_id(request):
    """Returns a stable anonymous id for this session, creating one if needed."""
    guest_id = request.session.get(GUEST_SESSION_KEY)
    if not guest_id:
        guest_id = uuid.uuid4().hex
        request.session[GUEST_SESSION_KEY] = guest_id
    return guest_id


def to_decimal(value, default=Decimal('0')):
    if value is None or value == '':
        return default
    return Decimal(str(value))


def money(value):
    """Rounds an amount to paise, half away from zero."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def json_error(message, status=400, **extra):
    payload = {"success": False, "message": message}
    payload.update(extra)
    return JsonResponse(payload, status=status)
