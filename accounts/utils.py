# accounts/utils.py

import datetime
from django.db import transaction


def next_yearly_sequence(queryset, field, prefix):
    """
    Returns the next sequence number for IDs shaped like PREFIX-NNNN, where
    the prefix already carries the year so the sequence resets every year.
    """
    with transaction.atomic():
        last = (
            queryset.select_for_update()
            .filter(**{f"{field}__startswith": prefix})
            .order_by(field)
            .last()
        )
        last_value = getattr(last, field, None) if last else None
        if last_value:
            return int(last_value.split('-')[-1]) + 1
    return 1


def generate_customer_id():
    """
    Generates a unique customer ID in the format CUS-YYYY-NNNNN.
    e.g., CUS-2025-00001
    """
    from .models import CustomUser

    prefix = f"CUS-{datetime.date.today().year}"
    sequence = next_yearly_sequence(CustomUser.objects.all(), 'customer_id', prefix)
    return f"{prefix}-{sequence:05d}"
