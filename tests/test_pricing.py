from decimal import Decimal
from types import SimpleNamespace

import pytest

from bookings.pricing import PricingLine, compute_order_totals, get_base_price, policy_message, serialize_totals
from core.models import AppSettings, PlatformFee


def line(price, quantity=1, inclusive=False, tax='0', name='Service'):
    return PricingLine(name, Decimal(price), quantity, inclusive, Decimal(tax))


def fee(name, fee_type, value, tax='0'):
    return SimpleNamespace(name=name, fee_type=fee_type, value=Decimal(value), fee_tax_rate_percent=Decimal(tax))


def test_base_price_strips_inclusive_tax():
    assert get_base_price(Decimal('118'), True, Decimal('18')) == Decimal('100')
    assert get_base_price(Decimal('118'), False, Decimal('18')) == Decimal('118')
    assert get_base_price(Decimal('118'), True, Decimal('0')) == Decimal('118')


def test_mixed_inclusive_and_exclusive_items():
    lines = [line('118', inclusive=True, tax='18'), line('200', quantity=2, tax='18')]
    totals = compute_order_totals(lines, AppSettings(), platform_fees=[])

    assert totals['sum_of_displayed_prices'] == Decimal('518.00')
    assert totals['subtotal'] == Decimal('500.00')
    assert totals['tax_amount'] == Decimal('90.00')
    assert totals['total'] == Decimal('590.00')
    assert totals['tax_label'] == 'Tax (18.0%)'
    assert totals['visiting_charge'] == Decimal('0.00')
    assert [item['tax_amount'] for item in totals['items']] == [Decimal('18.00'), Decimal('72.00')]


def test_inclusive_price_total_matches_displayed_price():
    totals = compute_order_totals([line('99.99', inclusive=True, tax='18')], AppSettings(), platform_fees=[])
    assert totals['subtotal'] == Decimal('84.74')
    assert totals['tax_amount'] == Decimal('15.25')
    assert totals['total'] == Decimal('99.99')


def test_untaxed_order_label():
    totals = compute_order_totals([line('100')], AppSettings(), platform_fees=[])
    assert totals['tax_label'] == 'Tax (0%)'
    assert totals['total'] == Decimal('100.00')


def test_visiting_charge_below_minimum():
    app_settings = AppSettings(
        enable_minimum_booking_policy=True,
        minimum_booking_amount=Decimal('500.00'),
        visiting_charge_amount=Decimal('200.00'),
        visiting_charge_tax_percent=Decimal('0'),
    )
    totals = compute_order_totals([line('100', tax='5')], app_settings, platform_fees=[])

    assert totals['displayed_visiting_charge'] == Decimal('200.00')
    assert totals['visiting_charge'] == Decimal('200.00')
    assert totals['visiting_charge_tax'] == Decimal('0.00')
    assert totals['total'] == Decimal('305.00')
    assert totals['tax_label'] == 'Total Tax'


def test_no_visiting_charge_at_or_above_minimum():
    app_settings = AppSettings(enable_minimum_booking_policy=True, minimum_booking_amount=Decimal('500.00'))
    totals = compute_order_totals([line('500')], app_settings, platform_fees=[])
    assert totals['visiting_charge'] == Decimal('0.00')
    assert totals['total'] == Decimal('500.00')


def test_no_visiting_charge_for_empty_order():
    app_settings = AppSettings(enable_minimum_booking_policy=True)
    totals = compute_order_totals([], app_settings, platform_fees=[])
    assert totals['visiting_charge'] == Decimal('0.00')
    assert totals['total'] == Decimal('0.00')


def test_discount_can_trigger_visiting_charge():
    app_settings = AppSettings(
        enable_minimum_booking_policy=True,
        minimum_booking_amount=Decimal('500.00'),
        visiting_charge_amount=Decimal('100.00'),
        visiting_charge_tax_percent=Decimal('5.00'),
    )
    totals = compute_order_totals([line('600')], app_settings, discount=Decimal('150'), platform_fees=[])

    assert totals['visiting_charge'] == Decimal('100.00')
    assert totals['visiting_charge_tax'] == Decimal('5.00')
    assert totals['discount'] == Decimal('150.00')
    assert totals['total'] == Decimal('555.00')
    assert totals['tax_label'] == 'Total Tax'


def test_label_keeps_single_rate_when_visiting_charge_matches():
    app_settings = AppSettings(
        enable_minimum_booking_policy=True,
        minimum_booking_amount=Decimal('500.00'),
        visiting_charge_amount=Decimal('100.00'),
        visiting_charge_tax_percent=Decimal('5.00'),
    )
    totals = compute_order_totals([line('100', tax='5')], app_settings, platform_fees=[])

    assert totals['visiting_charge_tax'] == Decimal('5.00')
    assert totals['tax_amount'] == Decimal('10.00')
    assert totals['total'] == Decimal('210.00')
    assert totals['tax_label'] == 'Tax (5.0%)'


def test_label_for_mixed_item_rates():
    lines = [line('100', tax='5'), line('100', tax='18')]
    totals = compute_order_totals(lines, AppSettings(), platform_fees=[])

    assert totals['tax_amount'] == Decimal('23.00')
    assert totals['total'] == Decimal('223.00')
    assert totals['tax_label'] == 'Total Tax'


def test_visiting_charge_tax_can_be_disabled():
    app_settings = AppSettings(
        enable_minimum_booking_policy=True,
        minimum_booking_amount=Decimal('500.00'),
        visiting_charge_amount=Decimal('100.00'),
        enable_tax_on_visiting_charge=False,
    )
    totals = compute_order_totals([line('100')], app_settings, platform_fees=[])
    assert totals['visiting_charge_tax'] == Decimal('0.00')
    assert totals['total'] == Decimal('200.00')


def test_platform_fees_are_added_with_their_own_tax():
    fees = [fee('Convenience', 'percentage', '10', tax='18'), fee('Safety', 'fixed', '20')]
    totals = compute_order_totals([line('200')], AppSettings(), platform_fees=fees)

    convenience, safety = totals['platform_fees']
    assert convenience['calculated_fee_amount'] == Decimal('20.00')
    assert convenience['tax_amount_on_fee'] == Decimal('3.60')
    assert safety['calculated_fee_amount'] == Decimal('20.00')
    assert safety['tax_amount_on_fee'] == Decimal('0.00')
    assert totals['platform_fees_total'] == Decimal('40.00')
    assert totals['tax_amount'] == Decimal('3.60')
    assert totals['total'] == Decimal('243.60')


def test_policy_message_fills_placeholders():
    app_settings = AppSettings(
        enable_minimum_booking_policy=True,
        minimum_booking_amount=Decimal('500.00'),
        visiting_charge_amount=Decimal('100.00'),
    )
    assert policy_message(app_settings) == (
        "A visiting charge of ₹100.00 will be applied if your booking total is below ₹500.00.")
    assert policy_message(AppSettings()) is None


def test_serialize_totals_stringifies_decimals():
    totals = compute_order_totals([line('118', inclusive=True, tax='18')], AppSettings(), platform_fees=[])
    data = serialize_totals(totals)
    assert data['total'] == '118.00'
    assert data['items'][0]['tax_amount'] == '18.00'


@pytest.mark.django_db
def test_active_platform_fees_are_read_from_settings(app_settings):
    PlatformFee.objects.create(name='Convenience', fee_type='fixed', value=Decimal('25.00'))
    PlatformFee.objects.create(name='Old fee', fee_type='fixed', value=Decimal('99.00'), is_active=False)

    totals = compute_order_totals([line('100')], app_settings)
    assert [row['name'] for row in totals['platform_fees']] == ['Convenience']
    assert totals['total'] == Decimal('125.00')
