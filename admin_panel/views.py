import datetime

from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required, user_passes_test
from django.db.models import Count, Sum
from django.db.models.functions import TruncDay
from django.http import JsonResponse
from django.utils import timezone

from bookings.models import Booking
from core.models import UserActivity

User = get_user_model()


def staff_required(view_func):
    return login_required(user_passes_test(lambda u: u.is_staff)(view_func))


@staff_required
def dashboard_stats(request):
    bookings = Booking.objects.all()
    total_revenue = (bookings.exclude(status=Booking.Status.CANCELLED)
                     .aggregate(total=Sum('total_amount'))['total'] or 0)
    per_status = {row['status']: row['count']
                  for row in bookings.values('status').annotate(count=Count('id'))}

    thirty_days_ago = timezone.now() - datetime.timedelta(days=30)
    return JsonResponse({
        'total_revenue': str(total_revenue),
        'total_bookings': bookings.count(),
        'bookings_by_status': {status: per_status.get(status, 0) for status in Booking.Status.values},
        'active_users': User.objects.filter(is_active=True).count(),
        'new_signups': User.objects.filter(date_joined__gte=thirty_days_ago).count(),
    })


@staff_required
def booking_chart(request):
    """
    Provides data for the bookings-per-day chart in the admin dashboard.
    """
    days = request.GET.get('days', '30')
    try:
        days = max(1, min(int(days), 365))
    except ValueError:
        days = 30
    since = timezone.now() - datetime.timedelta(days=days)

    chart_data = (
        Booking.objects
        .filter(created_at__gte=since)
        .annotate(date=TruncDay('created_at'))
        .values('date')
        .annotate(count=Count('id'), revenue=Sum('total_amount'))
        .order_by('date')
    )

    # Format the data into lists that Chart.js can read
    return JsonResponse({
        'labels': [row['date'].strftime('%b %d, %Y') for row in chart_data],
        'data': [row['count'] for row in chart_data],
        'revenue': [str(row['revenue'] or 0) for row in chart_data],
    })


@staff_required
def activity_feed(request):
    items = []
    for booking in Booking.objects.order_by('-created_at')[:5]:
        items.append({
            'type': 'booking',
            'title': f"New booking {booking.booking_id}",
            'description': f"{booking.customer_name} booked for {booking.scheduled_date:%d %b %Y} "
                           f"at {booking.scheduled_time_slot} (₹{booking.total_amount}).",
            'timestamp': booking.created_at,
        })
    for user in User.objects.order_by('-date_joined')[:5]:
        items.append({
            'type': 'signup',
            'title': "New user signed up",
            'description': user.get_full_name() or user.email,
            'timestamp': user.date_joined,
        })
    for activity in UserActivity.objects.select_related('user')[:5]:
        items.append({
            'type': 'activity',
            'title': activity.get_event_type_display(),
            'description': str(activity.user or f"Guest {activity.guest_id[:8]}"),
            'timestamp': activity.timestamp,
        })

    items.sort(key=lambda item: item['timestamp'], reverse=True)
    for item in items:
        item['timestamp'] = item['timestamp'].isoformat()
    return JsonResponse({'activities': items[:10]})
