from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from .config import get_app_settings, public_config
from .models import Notification
from .utils import json_error


@require_GET
def app_config_view(request):
    return JsonResponse(public_config(get_app_settings()))


@login_required
@require_GET
def notification_list(request):
    notifications = request.user.notifications.all()[:50]
    return JsonResponse({
        'unread': request.user.notifications.filter(read=False).count(),
        'notifications': [
            {
                'id': n.pk,
                'title': n.title,
                'message': n.message,
                'type': n.notification_type,
                'href': n.href,
                'read': n.read,
                'created_at': n.created_at.isoformat(),
            }
            for n in notifications
        ],
    })


@login_required
@require_POST
def mark_notification_read(request, pk):
    updated = Notification.objects.filter(pk=pk, user=request.user).update(read=True)
    if not updated:
        return json_error("Notification not found.", status=404)
    return JsonResponse({"success": True})


@login_required
@require_POST
def mark_all_notifications_read(request):
    count = request.user.notifications.filter(read=False).update(read=True)
    return JsonResponse({"success": True, "updated": count})
