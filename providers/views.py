# providers/views.py

from functools import wraps

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from bookings.exceptions import BookingStateError
from bookings.models import Booking
from bookings.services import (provider_accept_job, provider_complete_job, provider_earnings,
                               provider_reject_job, provider_start_job)
from core.utils import get_request_data, json_error

from .exceptions import ProviderApplicationError
from .models import ProviderApplication, ProviderProfile
from .services import get_or_start_application, submit_step

JOB_ACTIONS = {
    'accept': provider_accept_job,
    'start': provider_start_job,
    'complete': provider_complete_job,
}


def provider_required(view_func):
    @login_required
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        profile = ProviderProfile.objects.filter(user=request.user).first()
        if profile is None:
            return json_error("Only approved providers can access this page.", status=403)
        request.provider = profile
        return view_func(request, *args, **kwargs)
    return _wrapped_view


def serialize_application(application):
    return {
        'status': application.status,
        'status_display': application.get_status_display(),
        'current_step': application.current_step,
        'work_category': application.work_category.name if application.work_category else None,
        'experience_level': application.experience_level,
        'skill_level': application.skill_level,
        'full_name': application.full_name,
        'email': application.email,
        'mobile_number': application.mobile_number,
        'work_pin_codes': application.work_pin_codes,
        'admin_review_notes': application.admin_review_notes,
        'submitted_at': application.submitted_at.isoformat() if application.submitted_at else None,
    }


# --- Onboarding ---

@login_required
@require_GET
def application_detail(request):
    application = ProviderApplication.objects.filter(user=request.user).first()
    if application is None:
        return JsonResponse({"success": True, "application": None})
    return JsonResponse({"success": True, "application": serialize_application(application)})


@login_required
@require_POST
def application_step(request, step):
    try:
        application = get_or_start_application(request.user)
        application, form = submit_step(application, step, get_request_data(request), request.FILES)
    except ProviderApplicationError as exc:
        return json_error(exc.message)

    if form.errors:
        return JsonResponse({"success": False, "message": "Please correct the highlighted fields.",
                             "errors": form.errors}, status=400)
    return JsonResponse({"success": True, "application": serialize_application(application)})


# --- Jobs ---

def serialize_job(booking):
    return {
        'booking_id': booking.booking_id,
        'status': booking.status,
        'scheduled_date': booking.scheduled_date.isoformat(),
        'scheduled_time_slot': booking.scheduled_time_slot,
        'customer_name': booking.customer_name,
        'customer_phone': booking.customer_phone,
        'address': ', '.join(filter(None, [booking.address_line1, booking.address_line2,
                                           booking.city, booking.pincode])),
        'services': [f"{item.service_name} x{item.quantity}" for item in booking.items.all()],
        'total_amount': str(booking.total_amount),
        'payment_method': booking.payment_method,
    }


@provider_required
@require_GET
def job_list(request):
    jobs = request.provider.bookings.prefetch_related('items').order_by('scheduled_date', 'scheduled_time_slot')
    status = request.GET.get('status')
    if status:
        jobs = jobs.filter(status=status)
    return JsonResponse({"jobs": [serialize_job(job) for job in jobs]})


@provider_required
@require_POST
def job_action(request, booking_id, action):
    booking = get_object_or_404(Booking, booking_id=booking_id)
    try:
        if action == 'reject':
            reason = get_request_data(request).get('reason', '')
            booking = provider_reject_job(booking, request.provider, reason)
        elif action in JOB_ACTIONS:
            booking = JOB_ACTIONS[action](booking, request.provider)
        else:
            return json_error("Unknown action.", status=404)
    except BookingStateError as exc:
        return json_error(exc.message)
    return JsonResponse({"success": True, "booking_id": booking.booking_id, "status": booking.status})


@provider_required
@require_GET
def earnings(request):
    summary = provider_earnings(request.provider)
    return JsonResponse({
        'provider_id': request.provider.provider_id,
        'completed_jobs': summary['completed_jobs'],
        'total_earnings': str(summary['total_earnings']),
    })


@provider_required
@require_POST
def toggle_availability(request):
    provider = request.provider
    provider.is_available = not provider.is_available
    provider.save(update_fields=['is_available'])
    return JsonResponse({"success": True, "is_available": provider.is_available})
