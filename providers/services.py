# providers/services.py

import logging

from django.db import transaction
from django.utils import timezone

from core.config import get_app_settings
from core.models import Notification
from core.notifications import notify, notify_admin

from .exceptions import ProviderApplicationError
from .forms import STEP_FORMS
from .models import ProviderApplication, ProviderProfile

logger = logging.getLogger(__name__)

Status = ProviderApplication.Status

STEP_STATUSES = {
    1: Status.PENDING_STEP_1,
    2: Status.PENDING_STEP_2,
    3: Status.PENDING_STEP_3,
    4: Status.PENDING_STEP_4,
}
EDITABLE_STATUSES = tuple(STEP_STATUSES.values()) + (Status.NEEDS_UPDATE,)


def get_or_start_application(user):
    if not get_app_settings().is_provider_registration_enabled:
        raise ProviderApplicationError("Provider registration is currently closed.")
    application, created = ProviderApplication.objects.get_or_create(
        user=user,
        defaults={'email': user.email, 'full_name': user.get_full_name(), 'mobile_number': user.phone or ''},
    )
    if created:
        logger.info("Provider application started by %s", user.email)
    return application


def submit_step(application, step, data, files=None):
    """
    Validates one onboarding step. Returns ``(application, form)``; when the
    form is invalid the application is left untouched.

    Steps may be revisited, but not skipped.
    """
    if step not in STEP_FORMS:
        raise ProviderApplicationError("Unknown application step.")
    if application.status not in EDITABLE_STATUSES:
        raise ProviderApplicationError(
            f"Your application is {application.get_status_display().lower()} and cannot be edited.")
    current = application.current_step
    if current is not None and step > current:
        raise ProviderApplicationError(f"Please complete step {current} first.")

    form = STEP_FORMS[step](data, files, instance=application)
    if not form.is_valid():
        return application, form

    application = form.save(commit=False)
    if step == 4:
        application.terms_confirmed_at = timezone.now()
        if current == 4 or application.status == Status.NEEDS_UPDATE:
            application.status = Status.PENDING_REVIEW
            application.submitted_at = timezone.now()
    elif current == step:
        application.status = STEP_STATUSES[step + 1]
    application.save()

    if application.status == Status.PENDING_REVIEW and step == 4:
        notify_admin("New Provider Application",
                     f"{application.full_name} applied as a provider.",
                     href=f'/admin/providers/providerapplication/{application.pk}/change/')
        logger.info("Provider application %s submitted for review", application.pk)
    return application, form


def approve_application(application, notes=''):
    with transaction.atomic():
        application = ProviderApplication.objects.select_for_update().get(pk=application.pk)
        if application.status not in (Status.PENDING_REVIEW, Status.NEEDS_UPDATE, Status.REJECTED):
            raise ProviderApplicationError("Only submitted applications can be approved.")

        application.status = Status.APPROVED
        application.admin_review_notes = notes or application.admin_review_notes
        application.save(update_fields=['status', 'admin_review_notes', 'updated_at'])

        profile, _ = ProviderProfile.objects.update_or_create(
            user=application.user,
            defaults={
                'application': application,
                'work_category': application.work_category,
                'work_pin_codes': application.work_pin_codes,
            },
        )
        user = application.user
        user.user_type = user.UserType.PROVIDER
        user.save(update_fields=['user_type'])

        notify(user, "Application Approved",
               f"Welcome aboard! Your provider ID is {profile.provider_id}.",
               Notification.NotificationType.SUCCESS, href='/providers/jobs/')
    logger.info("Provider application %s approved as %s", application.pk, profile.provider_id)
    return profile


def reject_application(application, notes=''):
    return _review(application, Status.REJECTED, notes, "Application Rejected",
                   "Unfortunately your provider application was not approved.")


def request_application_update(application, notes=''):
    return _review(application, Status.NEEDS_UPDATE, notes, "Application Needs Update",
                   "Please review the notes and update your provider application.")


def _review(application, status, notes, title, message):
    if application.status == Status.APPROVED:
        raise ProviderApplicationError("This application has already been approved.")
    application.status = status
    if notes:
        application.admin_review_notes = notes
    application.save(update_fields=['status', 'admin_review_notes', 'updated_at'])
    notify(application.user, title, f"{message} {application.admin_review_notes}".strip(),
           Notification.NotificationType.WARNING, href='/providers/application/')
    logger.info("Provider application %s marked %s", application.pk, status)
    return application
