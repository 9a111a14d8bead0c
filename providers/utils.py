# providers/utils.py

import datetime

from accounts.utils import next_yearly_sequence


def generate_provider_id():
    """
    Generates a unique Provider ID in the format PRV-YYYY-NNNN.
    The sequence resets every year.
    e.g., PRV-2025-0001
    """
    from .models import ProviderProfile  # Import locally to avoid circular import issues

    prefix = f"PRV-{datetime.date.today().year}"
    sequence = next_yearly_sequence(ProviderProfile.objects.all(), 'provider_id', prefix)
    return f"{prefix}-{sequence:04d}"


def parse_pin_codes(raw):
    """Accepts a list or a comma/space separated string of 6-digit PIN codes."""
    if isinstance(raw, (list, tuple)):
        values = raw
    else:
        values = (raw or '').replace(',', ' ').split()
    pins = []
    for value in values:
        value = str(value).strip()
        if value and value not in pins:
            pins.append(value)
    return pins
