from decimal import Decimal

import pytest
from django.urls import reverse

from bookings.models import Booking
from core.models import UserActivity

pytestmark = pytest.mark.django_db


def test_dashboard_requires_staff(customer_client):
    response = customer_client.get(reverse('admin_panel:dashboard'))
    assert response.status_code == 302


def test_dashboard_requires_login(client):
    assert client.get(reverse('admin_panel:booking_chart')).status_code == 302


def test_dashboard_stats(staff_client, customer, make_booking):
    make_booking(total='500.00')
    make_booking(total='300.00', status=Booking.Status.COMPLETED)
    make_booking(total='999.00', status=Booking.Status.CANCELLED)

    data = staff_client.get(reverse('admin_panel:dashboard')).json()

    assert Decimal(data['total_revenue']) == Decimal('800.00')
    assert data['total_bookings'] == 3
    assert data['bookings_by_status'][Booking.Status.CANCELLED] == 1
    assert data['bookings_by_status'][Booking.Status.PROCESSING] == 0
    assert data['active_users'] == 2
    assert data['new_signups'] == 2


def test_booking_chart(staff_client, make_booking):
    make_booking(total='500.00')
    make_booking(total='250.00')

    data = staff_client.get(reverse('admin_panel:booking_chart'), {'days': '7'}).json()

    assert data['data'] == [2]
    assert Decimal(data['revenue'][0]) == Decimal('750.00')
    assert len(data['labels']) == 1


def test_activity_feed(staff_client, customer, make_booking):
    make_booking(customer_name='Meera Iyer')
    UserActivity.objects.create(user=customer, event_type=UserActivity.EventType.USER_LOGIN)

    activities = staff_client.get(reverse('admin_panel:activity_feed')).json()['activities']

    assert {item['type'] for item in activities} == {'booking', 'signup', 'activity'}
    booking_row = next(item for item in activities if item['type'] == 'booking')
    assert booking_row['description'].startswith('Meera Iyer booked for')
    assert len(activities) <= 10
    timestamps = [item['timestamp'] for item in activities]
    assert timestamps == sorted(timestamps, reverse=True)
