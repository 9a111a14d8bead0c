from decimal import Decimal

import pytest
from django.urls import reverse

from cart.cart import CART_SESSION_KEY
from promotions.exceptions import PromoCodeError
from promotions.models import PromoCode
from promotions.services import calculate_discount, increment_promo_usage, validate_promo_code

from .helpers import aware, post_json, set_session

pytestmark = pytest.mark.django_db


@pytest.fixture
def promo():
    return PromoCode.objects.create(code='welcome10', discount_type=PromoCode.DiscountType.PERCENTAGE,
                                    discount_value=Decimal('10'))


def test_code_is_stored_uppercase(promo):
    assert promo.code == 'WELCOME10'


def test_lookup_ignores_case(promo):
    found, discount = validate_promo_code(' Welcome10 ', Decimal('500'))
    assert found == promo
    assert discount == Decimal('50')


def test_fixed_discount_never_exceeds_order(promo):
    promo.discount_type = PromoCode.DiscountType.FIXED
    promo.discount_value = Decimal('800')
    assert calculate_discount(promo, Decimal('500')) == Decimal('500')


@pytest.mark.parametrize('code', ['', None, 'NOPE'])
def test_unknown_or_blank_codes_are_rejected(promo, code):
    with pytest.raises(PromoCodeError):
        validate_promo_code(code, Decimal('500'))


def test_inactive_code_is_rejected(promo):
    promo.is_active = False
    promo.save()
    with pytest.raises(PromoCodeError, match='inactive'):
        validate_promo_code('WELCOME10', Decimal('500'))


def test_validity_window(promo):
    promo.valid_from = aware(2030, 1, 1)
    promo.valid_until = aware(2030, 1, 31)
    promo.save()

    with pytest.raises(PromoCodeError, match='not active yet'):
        validate_promo_code('WELCOME10', Decimal('500'), now=aware(2029, 12, 31))
    with pytest.raises(PromoCodeError, match='expired'):
        validate_promo_code('WELCOME10', Decimal('500'), now=aware(2030, 2, 1))
    validate_promo_code('WELCOME10', Decimal('500'), now=aware(2030, 1, 15))


def test_usage_limit(promo):
    promo.max_uses = 1
    promo.uses_count = 1
    promo.save()
    with pytest.raises(PromoCodeError, match='usage limit'):
        validate_promo_code('WELCOME10', Decimal('500'))


def test_minimum_booking_amount(promo):
    promo.min_booking_amount = Decimal('1000.00')
    promo.save()
    with pytest.raises(PromoCodeError, match='minimum booking amount'):
        validate_promo_code('WELCOME10', Decimal('999.99'))
    validate_promo_code('WELCOME10', Decimal('1000'))


def test_increment_usage(promo):
    increment_promo_usage(promo)
    increment_promo_usage(promo)
    assert promo.uses_count == 2
    assert PromoCode.objects.get(pk=promo.pk).uses_count == 2


def test_usage_cap_holds_when_both_checkouts_validated(promo):
    promo.max_uses = 1
    promo.save()
    first, _ = validate_promo_code('WELCOME10', Decimal('500'))
    second, _ = validate_promo_code('WELCOME10', Decimal('500'))

    increment_promo_usage(first)
    with pytest.raises(PromoCodeError, match='usage limit'):
        increment_promo_usage(second)

    assert PromoCode.objects.get(pk=promo.pk).uses_count == 1


def test_apply_promo_view(customer_client, service, promo, app_settings):
    set_session(customer_client, **{CART_SESSION_KEY: [{'service_id': service.pk, 'quantity': 2}]})

    response = post_json(customer_client, reverse('promotions:apply'), {'code': 'welcome10'})

    assert response.status_code == 200
    data = response.json()
    assert data['promo_code'] == 'WELCOME10'
    assert data['totals']['discount'] == '60.00'
    assert data['totals']['total'] == '540.00'


def test_apply_promo_with_empty_cart(customer_client, promo):
    response = post_json(customer_client, reverse('promotions:apply'), {'code': 'WELCOME10'})
    assert response.status_code == 400
    assert response.json()['message'] == "Your cart is empty."


def test_apply_invalid_promo_view(customer_client, service, app_settings):
    set_session(customer_client, **{CART_SESSION_KEY: [{'service_id': service.pk, 'quantity': 1}]})
    response = post_json(customer_client, reverse('promotions:apply'), {'code': 'BOGUS'})
    assert response.status_code == 400
    assert response.json()['success'] is False


def test_remove_promo_view(customer_client, service, promo, app_settings):
    set_session(customer_client, **{
        CART_SESSION_KEY: [{'service_id': service.pk, 'quantity': 1}],
        'checkout_promo': 'WELCOME10',
    })
    response = post_json(customer_client, reverse('promotions:remove'))
    assert response.json()['totals']['discount'] == '0.00'
    assert 'checkout_promo' not in customer_client.session


def test_expired_promo_is_dropped_from_summary(customer_client, service, promo, app_settings):
    promo.valid_until = aware(2000, 1, 1)
    promo.save()
    set_session(customer_client, **{
        CART_SESSION_KEY: [{'service_id': service.pk, 'quantity': 1}],
        'checkout_promo': 'WELCOME10',
    })

    data = customer_client.get(reverse('cart:detail')).json()

    assert data['promo_code'] is None
    assert data['promo_error'] == "This promo code has expired."
    assert 'checkout_promo' not in customer_client.session


def test_promo_requires_login(client):
    response = post_json(client, reverse('promotions:apply'), {'code': 'X'})
    assert response.status_code == 302
