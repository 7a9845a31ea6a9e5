from datetime import timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from dispatch.exceptions import Forbidden, IllegalTransition, NotFound, ValidationError
from dispatch.models import Ambulance, AuditEvent, Booking, BookingTransition
from dispatch.services.booking import book
from dispatch.services.lifecycle import change_ambulance_status, change_booking_status, complete_stale_bookings

from .conftest import JANE

pytestmark = pytest.mark.django_db


@pytest.fixture
def active_booking(user, hospital, ambulance, silence_broadcast):
    return book(user.id, hospital.id, ambulance.id, 'NORMAL', JANE)


@pytest.mark.parametrize('target', ['COMPLETED', 'CANCELLED'])
def test_closing_booking_releases_ambulance(admin_user, ambulance, active_booking, target):
    b = change_booking_status(admin_user, active_booking.id, target, reason='done')

    assert b.status == target
    assert b.closed_at is not None
    ambulance.refresh_from_db()
    assert ambulance.status == Ambulance.STATUS_AVAILABLE
    t = BookingTransition.objects.filter(booking=b).order_by('-id').first()
    assert (t.from_status, t.to_status, t.operator_id) == ('ACTIVE', target, admin_user.id)
    assert AuditEvent.objects.filter(action='booking_status', object_id=b.id).exists()


def test_released_ambulance_can_be_booked_again(admin_user, other_user, hospital, ambulance, active_booking):
    change_booking_status(admin_user, active_booking.id, 'COMPLETED')
    again = book(other_user.id, hospital.id, ambulance.id, 'EMERGENCY', JANE)
    assert again.status == Booking.STATUS_ACTIVE


@pytest.mark.parametrize('first, second', [
    ('COMPLETED', 'CANCELLED'),
    ('CANCELLED', 'COMPLETED'),
    ('COMPLETED', 'ACTIVE'),
])
def test_terminal_states_are_final(admin_user, active_booking, first, second):
    change_booking_status(admin_user, active_booking.id, first)
    with pytest.raises(IllegalTransition):
        change_booking_status(admin_user, active_booking.id, second)
    active_booking.refresh_from_db()
    assert active_booking.status == first


def test_active_to_active_is_illegal(admin_user, active_booking):
    with pytest.raises(IllegalTransition):
        change_booking_status(admin_user, active_booking.id, 'ACTIVE')


def test_unknown_status_strings(admin_user, ambulance, active_booking):
    with pytest.raises(ValidationError):
        change_booking_status(admin_user, active_booking.id, 'DONE')
    with pytest.raises(ValidationError):
        change_ambulance_status(admin_user, ambulance.id, 'BROKEN')


def test_status_is_case_insensitive(admin_user, active_booking):
    assert change_booking_status(admin_user, active_booking.id, 'completed').status == 'COMPLETED'


def test_missing_booking(admin_user):
    with pytest.raises(NotFound):
        change_booking_status(admin_user, 424242, 'COMPLETED')


def test_non_admin_cannot_change_anything(user, ambulance, active_booking):
    with pytest.raises(Forbidden):
        change_booking_status(user, active_booking.id, 'CANCELLED')
    with pytest.raises(Forbidden):
        change_ambulance_status(user, ambulance.id, 'MAINTENANCE')
    active_booking.refresh_from_db()
    ambulance.refresh_from_db()
    assert active_booking.status == 'ACTIVE'
    assert ambulance.status == Ambulance.STATUS_ON_DUTY


def test_maintenance_override_keeps_booking_and_survives_completion(admin_user, ambulance, active_booking):
    change_ambulance_status(admin_user, ambulance.id, 'MAINTENANCE')
    active_booking.refresh_from_db()
    assert active_booking.status == 'ACTIVE'

    change_booking_status(admin_user, active_booking.id, 'COMPLETED')
    ambulance.refresh_from_db()
    assert ambulance.status == Ambulance.STATUS_MAINTENANCE


def test_available_refused_while_booking_active(admin_user, ambulance, active_booking):
    with pytest.raises(IllegalTransition):
        change_ambulance_status(admin_user, ambulance.id, 'AVAILABLE')
    change_ambulance_status(admin_user, ambulance.id, 'MAINTENANCE')
    with pytest.raises(IllegalTransition):
        change_ambulance_status(admin_user, ambulance.id, 'AVAILABLE')


def test_maintenance_round_trip(admin_user, ambulance, silence_broadcast):
    a = change_ambulance_status(admin_user, ambulance.id, 'MAINTENANCE')
    assert a.status == Ambulance.STATUS_MAINTENANCE
    a = change_ambulance_status(admin_user, ambulance.id, 'AVAILABLE')
    assert a.status == Ambulance.STATUS_AVAILABLE
    assert a.version == 2
    assert [k for k, _ in silence_broadcast] == ['ambulance.status', 'ambulance.status']


def test_admin_cannot_set_on_duty(admin_user, ambulance):
    with pytest.raises(IllegalTransition):
        change_ambulance_status(admin_user, ambulance.id, 'ON_DUTY')
    ambulance.refresh_from_db()
    assert ambulance.status == Ambulance.STATUS_AVAILABLE


def test_complete_stale_bookings(ambulance, active_booking):
    Booking.objects.filter(pk=active_booking.pk).update(booking_time=timezone.now() - timedelta(hours=30))

    assert complete_stale_bookings(timedelta(hours=48)) == 0
    assert complete_stale_bookings(timedelta(hours=12)) == 1
    active_booking.refresh_from_db()
    ambulance.refresh_from_db()
    assert active_booking.status == 'COMPLETED'
    assert ambulance.status == Ambulance.STATUS_AVAILABLE


def test_complete_stale_bookings_command(ambulance, active_booking, capsys):
    Booking.objects.filter(pk=active_booking.pk).update(booking_time=timezone.now() - timedelta(hours=5))
    call_command('complete_stale_bookings', '--hours', '1')
    assert 'Completed 1 stale booking' in capsys.readouterr().out
