import itertools
from decimal import Decimal

import pytest

from accounts.models import CustomUser
from bookings.models import Booking, BookingItem
from catalog.models import Category, Service, SubCategory, Tax
from core.config import get_app_settings
from providers.models import ProviderProfile

from .helpers import future_date

_booking_numbers = itertools.count(1)


@pytest.fixture
def app_settings(db):
    return get_app_settings()


@pytest.fixture
def customer(db):
    return CustomUser.objects.create_user(
        email='asha@example.com', password='s3cure-pass-123', phone='9876543210',
        first_name='Asha', last_name='Rao')


@pytest.fixture
def other_customer(db):
    return CustomUser.objects.create_user(email='ravi@example.com', password='s3cure-pass-123', phone='9123456780')


@pytest.fixture
def admin_account(db, settings):
    return CustomUser.objects.create_superuser(email=settings.ADMIN_EMAIL, password='admin-pass-123')


@pytest.fixture
def customer_client(client, customer):
    client.force_login(customer)
    return client


@pytest.fixture
def staff_client(client, admin_account):
    client.force_login(admin_account)
    return client


@pytest.fixture
def category(db):
    return Category.objects.create(name='Plumbing')


@pytest.fixture
def other_category(db):
    return Category.objects.create(name='Electrical')


@pytest.fixture
def subcategory(category):
    return SubCategory.objects.create(parent_category=category, name='Tap Repair')


@pytest.fixture
def gst(db):
    return Tax.objects.create(tax_name='GST', tax_percent=Decimal('18.00'))


@pytest.fixture
def make_service(subcategory):
    def _make(name='Tap Fixing', price='300.00', **kwargs):
        kwargs.setdefault('sub_category', subcategory)
        return Service.objects.create(name=name, price=Decimal(price), **kwargs)
    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def make_booking(db):
    def _make(service=None, date=None, slot='10:00 AM', status=Booking.Status.CONFIRMED,
              total='500.00', user=None, **kwargs):
        kwargs.setdefault('customer_name', 'Asha Rao')
        booking = Booking.objects.create(
            booking_id=f"FIXBRO-TEST-{next(_booking_numbers):05d}",
            user=user,
            customer_email='asha@example.com',
            customer_phone='9876543210',
            address_line1='12 MG Road',
            city='Bengaluru',
            state='Karnataka',
            pincode='560001',
            scheduled_date=date or future_date(),
            scheduled_time_slot=slot,
            total_amount=Decimal(total),
            status=status,
            **kwargs
        )
        if service is not None:
            BookingItem.objects.create(booking=booking, service=service, service_name=service.name,
                                       quantity=1, price_at_booking=service.price)
        return booking
    return _make


@pytest.fixture
def provider_user(db):
    return CustomUser.objects.create_user(email='pro@example.com', password='s3cure-pass-123',
                                          phone='9000000001', first_name='Kiran',
                                          user_type=CustomUser.UserType.PROVIDER)


@pytest.fixture
def provider(provider_user, category):
    return ProviderProfile.objects.create(user=provider_user, work_category=category)


@pytest.fixture
def provider_client(client, provider):
    client.force_login(provider.user)
    return client
