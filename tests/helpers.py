import datetime
import json

from django.utils import timezone


def aware(year, month, day, hour=0, minute=0):
    return timezone.make_aware(datetime.datetime(year, month, day, hour, minute))


def future_date(days=30):
    return timezone.localdate() + datetime.timedelta(days=days)


def post_json(client, url, payload=None):
    return client.post(url, data=json.dumps(payload or {}), content_type='application/json')


def set_session(client, **values):
    session = client.session
    for key, value in values.items():
        session[key] = value
    session.save()


ADDRESS = {
    'full_name': 'Asha Rao',
    'email': 'asha@example.com',
    'phone': '9876543210',
    'address_line1': '12 MG Road',
    'address_line2': '',
    'city': 'Bengaluru',
    'state': 'Karnataka',
    'pincode': '560001',
    'latitude': None,
    'longitude': None,
}
