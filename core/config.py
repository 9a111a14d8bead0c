from .models import AppSettings


def get_app_settings():
    """Returns the settings row, creating it with defaults on first access."""
    app_settings, _ = AppSettings.objects.get_or_create(pk=1)
    return app_settings


def public_config(app_settings):
    """The subset of settings that the storefront needs to render checkout."""
    return {
        'enable_minimum_booking_policy': app_settings.enable_minimum_booking_policy,
        'minimum_booking_amount': str(app_settings.minimum_booking_amount),
        'visiting_charge_amount': str(app_settings.visiting_charge_amount),
        'enable_online_payment': app_settings.enable_online_payment,
        'enable_cod': app_settings.enable_cod,
        'slot_interval_minutes': app_settings.slot_interval_minutes,
        'enable_cancellation_policy': app_settings.enable_cancellation_policy,
        'is_provider_registration_enabled': app_settings.is_provider_registration_enabled,
        'platform_fees': [
            {
                'name': fee.name,
                'type': fee.fee_type,
                'value': str(fee.value),
                'fee_tax_rate_percent': str(fee.fee_tax_rate_percent),
            }
            for fee in app_settings.active_platform_fees()
        ],
    }
