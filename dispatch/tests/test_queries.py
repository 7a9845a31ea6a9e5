from datetime import timedelta

import pytest
from django.utils import timezone

from dispatch.exceptions import NotFound, ValidationError
from dispatch.models import Ambulance, Booking, Hospital
from dispatch.services import queries
from dispatch.services.formats import format_hospital

from .conftest import JANE

pytestmark = pytest.mark.django_db


def _hospitals(n):
    return [Hospital.objects.create(name=f'H{i}', address='-', latitude=0, longitude=i * 0.01) for i in range(n)]


def test_page_payload_shape():
    hs = _hospitals(12)
    page = queries.hospitals_page(0, 5)
    assert page['totalElements'] == 12
    assert page['totalPages'] == 3
    assert page['number'] == 0 and page['size'] == 5
    assert page['first'] is True and page['last'] is False
    assert [h['id'] for h in page['content']] == [h.id for h in hs[:5]]

    last = queries.hospitals_page(2, 5)
    assert [h['id'] for h in last['content']] == [h.id for h in hs[10:]]
    assert last['first'] is False and last['last'] is True


def test_page_beyond_end_is_empty():
    _hospitals(3)
    page = queries.hospitals_page(4, 10)
    assert page['content'] == []
    assert page['totalElements'] == 3
    assert page['last'] is True


def test_empty_table_page():
    page = queries.hospitals_page(0, 10)
    assert page == {'content': [], 'totalPages': 0, 'totalElements': 0, 'number': 0,
                    'size': 10, 'first': True, 'last': True}


@pytest.mark.parametrize('page, size', [(-1, 10), (0, 0), (0, 101)])
def test_page_bounds(page, size):
    with pytest.raises(ValidationError):
        queries.paginate(Hospital.objects.order_by('id'), page, size, format_hospital)


def _booking(user, ambulance, status='ACTIVE', **extra):
    return Booking.objects.create(
        user=user, hospital=ambulance.hospital, ambulance=ambulance,
        hospital_name=ambulance.hospital.name, ambulance_number=ambulance.number,
        patient_name=JANE['name'], patient_age=JANE['age'], patient_gender=JANE['gender'],
        patient_condition=JANE['condition'], status=status, **extra,
    )


def test_booking_history_newest_first(user, other_user, hospital):
    amb = [Ambulance.objects.create(hospital=hospital, number=f'N{i}') for i in range(3)]
    old = _booking(user, amb[0], status='COMPLETED')
    Booking.objects.filter(pk=old.pk).update(booking_time=timezone.now() - timedelta(days=1))
    new = _booking(user, amb[1])
    _booking(other_user, amb[2])

    assert [b.id for b in queries.booking_history(user.id)] == [new.id, old.id]


def test_booking_history_unknown_user():
    with pytest.raises(NotFound):
        queries.booking_history(987654)


def test_all_bookings_ordered_by_id(user, other_user, hospital):
    amb = [Ambulance.objects.create(hospital=hospital, number=f'N{i}') for i in range(3)]
    made = [_booking(u, a) for u, a in zip([other_user, user, other_user], amb)]
    assert [b.id for b in queries.all_bookings()] == [b.id for b in made]

    page = queries.all_bookings_page(1, 2)
    assert [b['id'] for b in page['content']] == [made[2].id]
    assert page['content'][0]['patient']['name'] == 'Jane Doe'


def test_history_survives_fleet_removal(user, hospital):
    amb = Ambulance.objects.create(hospital=hospital, number='GONE-1')
    b = _booking(user, amb, status='COMPLETED')
    hospital.delete()

    [kept] = queries.booking_history(user.id)
    assert kept.id == b.id
    assert kept.hospital_id is None and kept.ambulance_id is None
    assert (kept.hospital_name, kept.ambulance_number) == ('City General', 'GONE-1')


def test_replica_router_without_replica():
    from dispatch.db_routers import ReadReplicaRouter

    router = ReadReplicaRouter()
    assert router.db_for_read(Booking) is None
    assert router.db_for_write(Booking) == 'default'
    assert router.allow_migrate('default', 'dispatch') is True
    assert router.allow_migrate('replica', 'dispatch') is False
