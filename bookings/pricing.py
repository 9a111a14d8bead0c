"""
Order total computation shared by the cart summary and booking creation.

Amounts stay unrounded Decimals while they are combined and are quantized
to paise only in the returned summary.
"""
from collections import namedtuple
from decimal import Decimal

from core.utils import money, to_decimal

ZERO = Decimal('0')
HUNDRED = Decimal('100')

PricingLine = namedtuple('PricingLine', ['name', 'displayed_price', 'quantity', 'is_tax_inclusive', 'tax_percent'])


def get_base_price(displayed_price, is_tax_inclusive, tax_percent):
    displayed_price = to_decimal(displayed_price)
    tax_percent = to_decimal(tax_percent)
    if is_tax_inclusive and tax_percent > 0:
        return displayed_price / (1 + tax_percent / HUNDRED)
    return displayed_price


def pricing_line_for_service(service, quantity):
    return PricingLine(
        name=service.name,
        displayed_price=service.displayed_price,
        quantity=quantity,
        is_tax_inclusive=service.is_tax_inclusive,
        tax_percent=service.tax_percent,
    )


def sum_displayed_prices(lines):
    return sum((to_decimal(line.displayed_price) * line.quantity for line in lines), ZERO)


def policy_message(app_settings):
    if not app_settings.enable_minimum_booking_policy or not app_settings.minimum_booking_policy_description:
        return None
    return (app_settings.minimum_booking_policy_description
            .replace('{MINIMUM_BOOKING_AMOUNT}', str(app_settings.minimum_booking_amount))
            .replace('{VISITING_CHARGE}', str(app_settings.visiting_charge_amount)))


def tax_label(item_rates, visiting_charge_base, visiting_charge_rate, total_tax):
    same_rate = len(set(item_rates)) <= 1
    first_rate = item_rates[0] if item_rates else ZERO

    if visiting_charge_base > 0:
        if visiting_charge_rate > 0:
            same_rate = same_rate and visiting_charge_rate == first_rate
        elif first_rate != 0:
            same_rate = False

    if same_rate and first_rate > 0:
        return f"Tax ({first_rate:.1f}%)"
    if total_tax > 0:
        return "Total Tax"
    return "Tax (0%)"


def compute_order_totals(lines, app_settings, discount=ZERO, platform_fees=None):
    """
    Builds the full price breakdown for a set of cart lines.

    ``platform_fees`` defaults to the active fees on ``app_settings``. The
    returned dict carries quantized Decimals plus per-item and per-fee rows.
    """
    discount = to_decimal(discount)
    if platform_fees is None:
        platform_fees = app_settings.active_platform_fees()

    items = []
    item_rates = []
    subtotal = ZERO
    items_tax = ZERO
    for line in lines:
        displayed = to_decimal(line.displayed_price)
        rate = to_decimal(line.tax_percent)
        rate = rate if rate > 0 else ZERO
        base_unit = get_base_price(displayed, line.is_tax_inclusive, rate)
        base_line = base_unit * line.quantity
        item_tax = base_line * rate / HUNDRED

        subtotal += base_line
        items_tax += item_tax
        item_rates.append(rate)
        items.append({
            'name': line.name,
            'quantity': line.quantity,
            'displayed_unit_price': money(displayed),
            'base_unit_price': money(base_unit),
            'item_subtotal': money(base_line),
            'tax_percent': rate,
            'tax_amount': money(item_tax),
            'is_tax_inclusive': line.is_tax_inclusive,
        })

    displayed_sum = sum_displayed_prices(lines)

    # Visiting charge
    displayed_visiting_charge = ZERO
    visiting_charge_base = ZERO
    visiting_charge_tax = ZERO
    visiting_charge_rate = ZERO
    if app_settings.enable_minimum_booking_policy:
        amount_after_discount = displayed_sum - discount
        if 0 < amount_after_discount < app_settings.minimum_booking_amount:
            displayed_visiting_charge = to_decimal(app_settings.visiting_charge_amount)
            visiting_charge_base = get_base_price(
                displayed_visiting_charge,
                app_settings.is_visiting_charge_tax_inclusive,
                app_settings.visiting_charge_tax_percent,
            )
    if (visiting_charge_base > 0 and app_settings.enable_tax_on_visiting_charge
            and app_settings.visiting_charge_tax_percent > 0):
        visiting_charge_rate = to_decimal(app_settings.visiting_charge_tax_percent)
        visiting_charge_tax = visiting_charge_base * visiting_charge_rate / HUNDRED

    # Platform fees
    fees = []
    fees_base = ZERO
    fees_tax = ZERO
    for fee in platform_fees:
        value = to_decimal(fee.value)
        if fee.fee_type == 'percentage':
            fee_amount = subtotal * value / HUNDRED
        else:
            fee_amount = value
        fee_rate = to_decimal(fee.fee_tax_rate_percent)
        fee_tax = fee_amount * fee_rate / HUNDRED if fee_rate > 0 else ZERO
        fees_base += fee_amount
        fees_tax += fee_tax
        fees.append({
            'name': fee.name,
            'type': fee.fee_type,
            'value': value,
            'calculated_fee_amount': money(fee_amount),
            'tax_rate_on_fee': fee_rate,
            'tax_amount_on_fee': money(fee_tax),
        })

    total_tax = items_tax + visiting_charge_tax + fees_tax
    total = subtotal + visiting_charge_base - discount + fees_base + total_tax

    return {
        'items': items,
        'sum_of_displayed_prices': money(displayed_sum),
        'subtotal': money(subtotal),
        'displayed_visiting_charge': money(displayed_visiting_charge),
        'visiting_charge': money(visiting_charge_base),
        'visiting_charge_tax': money(visiting_charge_tax),
        'visiting_charge_tax_percent': visiting_charge_rate,
        'policy_message': policy_message(app_settings),
        'discount': money(discount),
        'platform_fees': fees,
        'platform_fees_total': money(fees_base),
        'tax_amount': money(total_tax),
        'tax_label': tax_label(item_rates, visiting_charge_base, visiting_charge_rate, total_tax),
        'total': money(total),
    }


def serialize_totals(totals):
    """Turns the Decimals of a totals dict into strings for JSON responses."""
    def convert(value):
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, dict):
            return {key: convert(item) for key, item in value.items()}
        if isinstance(value, list):
            return [convert(item) for item in value]
        return value
    return convert(totals)
