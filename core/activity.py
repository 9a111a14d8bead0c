import logging

from .models import UserActivity
from .utils import get_guest_id

logger = logging.getLogger(__name__)


def log_user_activity(request, event_type, event_data=None, user=None):
    """
    Records a storefront event. Anonymous visitors are tracked by their
    session guest id.
    """
    if user is None and request is not None and request.user.is_authenticated:
        user = request.user

    guest_id = ''
    user_agent = ''
    if request is not None:
        user_agent = request.META.get('HTTP_USER_AGENT', '')[:500]
        if user is None:
            guest_id = get_guest_id(request)

    activity = UserActivity.objects.create(
        user=user,
        guest_id=guest_id,
        event_type=event_type,
        event_data=event_data or {},
        user_agent=user_agent,
    )
    logger.debug("Recorded %s for %s", event_type, user or guest_id)
    return activity
