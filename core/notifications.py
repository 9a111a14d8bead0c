import logging

from django.conf import settings
from django.contrib.auth import get_user_model

from .models import Notification

logger = logging.getLogger(__name__)


def notify(user, title, message, notification_type=Notification.NotificationType.INFO, href=''):
    notification = Notification.objects.create(
        user=user,
        title=title,
        message=message,
        notification_type=notification_type,
        href=href,
    )
    logger.debug("Notification %s queued for %s", notification.pk, user)
    return notification


def get_admin_user():
    User = get_user_model()
    admin_user = User.objects.filter(email__iexact=settings.ADMIN_EMAIL).first()
    if admin_user is None:
        logger.warning("No admin account found for %s; admin alert skipped.", settings.ADMIN_EMAIL)
    return admin_user


def notify_admin(title, message, href=''):
    admin_user = get_admin_user()
    if admin_user is None:
        return None
    return notify(admin_user, title, message, Notification.NotificationType.ADMIN_ALERT, href)
