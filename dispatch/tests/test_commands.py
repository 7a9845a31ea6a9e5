import pytest
from django.core.management import call_command

from dispatch.models import Ambulance, Booking, Hospital, User

pytestmark = pytest.mark.django_db


def test_ensure_test_users_is_idempotent():
    call_command('ensure_test_users')
    admin = User.objects.get(email='admin@pulseride.test')
    admin.role = User.ROLE_USER
    admin.is_active = False
    admin.save()

    call_command('ensure_test_users', '--password', 'An0ther#Pass')
    admin.refresh_from_db()
    assert admin.role == User.ROLE_ADMIN and admin.is_active
    assert admin.check_password('An0ther#Pass')
    assert User.objects.filter(email__endswith='@pulseride.test').count() == 2


def test_populate_data(monkeypatch):
    monkeypatch.setattr('dispatch.services.booking.broadcast', lambda *a, **k: None)
    call_command('populate_data', '--bookings', '3', '--seed', '1')
    call_command('populate_data', '--bookings', '0')

    assert Hospital.objects.count() == 4
    assert Ambulance.objects.count() == 12
    assert Booking.objects.filter(status='ACTIVE').count() == 3
    assert Ambulance.objects.filter(status=Ambulance.STATUS_ON_DUTY).count() == 3
