from decimal import Decimal

import pytest
from django.contrib.sessions.backends.db import SessionStore
from django.urls import reverse

from cart.cart import CART_SESSION_KEY, Cart
from core.models import UserActivity

from .helpers import post_json, set_session

pytestmark = pytest.mark.django_db


def test_add_to_cart_as_guest(client, service, app_settings):
    response = post_json(client, reverse('cart:add'), {'service_id': service.pk, 'quantity': 2})

    assert response.status_code == 200
    data = response.json()
    assert data['count'] == 2
    assert data['lines'][0]['line_total'] == '600.00'
    assert data['totals']['total'] == '600.00'
    assert client.session[CART_SESSION_KEY] == [{'service_id': service.pk, 'quantity': 2}]

    activity = UserActivity.objects.get(event_type=UserActivity.EventType.ADD_TO_CART)
    assert activity.user is None
    assert activity.guest_id == client.session['guest_id']


def test_adding_same_service_merges_quantity(customer_client, service, app_settings):
    post_json(customer_client, reverse('cart:add'), {'service_id': service.pk})
    data = post_json(customer_client, reverse('cart:add'), {'service_id': service.pk, 'quantity': 3}).json()

    assert len(data['lines']) == 1
    assert data['count'] == 4
    assert UserActivity.objects.filter(user__isnull=False).count() == 2


def test_form_encoded_add_is_accepted(client, service, app_settings):
    response = client.post(reverse('cart:add'), {'service_id': service.pk, 'quantity': '1'})
    assert response.json()['count'] == 1


@pytest.mark.parametrize('payload', [{}, {'service_id': 'abc'}, {'service_id': 1, 'quantity': 0}])
def test_add_rejects_invalid_data(client, payload):
    response = post_json(client, reverse('cart:add'), payload)
    assert response.status_code == 400
    assert response.json()['message'] == "Invalid data provided."


def test_add_unknown_or_inactive_service(client, make_service):
    inactive = make_service(name='Old Service', is_active=False)
    response = post_json(client, reverse('cart:add'), {'service_id': inactive.pk})
    assert response.status_code == 404


def test_update_quantity(client, service, app_settings):
    set_session(client, **{CART_SESSION_KEY: [{'service_id': service.pk, 'quantity': 1}]})
    data = post_json(client, reverse('cart:update'), {'service_id': service.pk, 'quantity': 5}).json()
    assert data['count'] == 5


def test_update_to_zero_removes_line(client, service, app_settings):
    set_session(client, **{CART_SESSION_KEY: [{'service_id': service.pk, 'quantity': 1}]})
    data = post_json(client, reverse('cart:update'), {'service_id': service.pk, 'quantity': 0}).json()
    assert data['count'] == 0
    assert UserActivity.objects.filter(event_type=UserActivity.EventType.REMOVE_FROM_CART).exists()


def test_update_missing_line(client, service):
    response = post_json(client, reverse('cart:update'), {'service_id': service.pk, 'quantity': 2})
    assert response.status_code == 404


def test_remove_line(client, service, make_service, app_settings):
    other = make_service(name='Pipe Leak', price='450.00')
    set_session(client, **{CART_SESSION_KEY: [
        {'service_id': service.pk, 'quantity': 1},
        {'service_id': other.pk, 'quantity': 1},
    ]})

    data = post_json(client, reverse('cart:remove'), {'service_id': service.pk}).json()

    assert data['message'] == "Item removed from cart."
    assert [line['name'] for line in data['lines']] == ['Pipe Leak']


def test_stale_services_are_pruned(client, service, make_service, app_settings):
    gone = make_service(name='Retired', price='100.00')
    set_session(client, **{CART_SESSION_KEY: [
        {'service_id': service.pk, 'quantity': 1},
        {'service_id': gone.pk, 'quantity': 1},
    ]})
    gone.is_active = False
    gone.save()

    data = client.get(reverse('cart:detail')).json()

    assert data['count'] == 1
    assert client.session[CART_SESSION_KEY] == [{'service_id': service.pk, 'quantity': 1}]


def test_discounted_price_is_used(client, make_service, app_settings):
    deal = make_service(name='Deal', price='500.00', discounted_price=Decimal('399.00'))
    set_session(client, **{CART_SESSION_KEY: [{'service_id': deal.pk, 'quantity': 1}]})
    data = client.get(reverse('cart:detail')).json()
    assert data['lines'][0]['displayed_price'] == '399.00'
    assert data['totals']['total'] == '399.00'


def test_cart_object_operations(rf, service):
    request = rf.get('/')
    request.session = SessionStore()
    cart = Cart(request)

    cart.add(service.pk, 2)
    assert len(cart) == 2
    assert cart.set_quantity(service.pk, 3) is True
    assert Cart(request).entries == [{'service_id': service.pk, 'quantity': 3}]
    assert cart.set_quantity(999, 1) is False

    cart.clear()
    assert cart.is_empty()
    assert CART_SESSION_KEY not in request.session


def test_corrupt_session_entries_are_ignored(rf, service):
    request = rf.get('/')
    request.session = SessionStore()
    request.session[CART_SESSION_KEY] = [{'service_id': 'x'}, {'service_id': service.pk, 'quantity': 1}, 'junk']
    assert Cart(request).entries == [{'service_id': service.pk, 'quantity': 1}]
