import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from dispatch.models import Ambulance, AuditEvent, Booking, User

from .conftest import JANE, PASSWORD, client_for

pytestmark = pytest.mark.django_db


def login(client, account, password):
    r = client.post(reverse('login_view'), {'email': account, 'password': password}, format='json')
    assert r.status_code in (200, 400, 401)
    return r


def test_register_creates_plain_user_even_if_role_sent():
    client = APIClient()
    r = client.post(reverse('register_view'), {
        'email': 'New@Test.io', 'password': PASSWORD, 'lat': '12.9', 'lng': '77.5', 'role': 'ADMIN',
    }, format='json')
    assert r.status_code == 201
    assert r.data['role'] == 'USER'
    assert r.data['token'] and r.data['jwt_access'] and r.data['jwt_refresh']
    u = User.objects.get(pk=r.data['id'])
    assert u.email == 'new@test.io'
    assert (u.latitude, u.longitude) == (12.9, 77.5)
    assert AuditEvent.objects.filter(action='register', object_id=u.id).exists()


def test_register_rejects_weak_password_and_duplicates(user):
    client = APIClient()
    r = client.post(reverse('register_view'), {'email': 'weak@test.io', 'password': '123'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'
    r = client.post(reverse('register_view'), {'email': user.email, 'password': PASSWORD}, format='json')
    assert r.status_code == 409


def test_register_accepts_empty_location():
    client = APIClient()
    r = client.post(reverse('register_view'), {'email': 'noloc@test.io', 'password': PASSWORD, 'lat': '', 'lng': ''},
                    format='json')
    assert r.status_code == 201
    assert r.data['user']['latitude'] is None


def test_no_role_bypass_in_login(user):
    client = APIClient()
    r = client.post(reverse('login_view'), {'email': user.email, 'password': PASSWORD, 'role': 'ADMIN'}, format='json')
    assert r.status_code == 200
    assert r.data['role'] == 'USER'
    user.refresh_from_db()
    assert user.role == 'USER'


def test_login_failure_is_unauthorized(user):
    r = login(APIClient(), user.email, 'wrong-password')
    assert r.status_code == 401
    assert r.data['error']['code'] == 'unauthorized'
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_login_returns_jwt_and_legacy_token(user):
    r = APIClient().post(reverse('login_view'), {'username': user.username, 'password': PASSWORD}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access'] and r.data['jwt_refresh'] and r.data['token']
    assert r.data['id'] == user.id


@pytest.mark.parametrize('token_field', ['token', 'jwt_access'])
def test_bearer_header_accepts_both_tokens(user, token_field):
    client = APIClient()
    token = login(client, user.email, PASSWORD).data[token_field]
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    r = client.get(reverse('user_profile'))
    assert r.status_code == 200
    assert r.data['id'] == user.id


def test_anonymous_requests_are_unauthorized(hospital):
    client = APIClient()
    for url in (reverse('nearest_hospitals'), reverse('all_available_ambulances'), reverse('booking_history')):
        r = client.get(url)
        assert r.status_code == 401
        assert r.data['error']['code'] == 'unauthorized'
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-real-token')
    assert client.get(reverse('user_profile')).status_code == 401


def test_refresh_and_logout(user):
    client = APIClient()
    data = login(client, user.email, PASSWORD).data
    r = client.post(reverse('jwt_refresh_view'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")
    r = client.post(reverse('jwt_logout_view'), {}, format='json')
    assert r.status_code == 200
    # the DRF token is revoked on logout
    assert client.get(reverse('user_profile')).status_code == 401


@pytest.mark.parametrize('method, name, query', [
    ('patch', 'admin_booking_status', '?bookingId=1&status=COMPLETED'),
    ('patch', 'admin_ambulance_status', '?ambulanceId=1&status=MAINTENANCE'),
    ('get', 'admin_all_bookings', ''),
    ('get', 'admin_all_bookings_paged', ''),
    ('get', 'admin_all_ambulances', ''),
    ('post', 'admin_add_hospital', ''),
    ('delete', 'admin_remove_hospital', '?hospitalId=1'),
    ('post', 'admin_add_ambulance', ''),
    ('delete', 'admin_remove_ambulance', '?ambulanceId=1'),
])
def test_admin_endpoints_reject_users(user, method, name, query):
    r = getattr(client_for(user), method)(reverse(name) + query, {}, format='json')
    assert r.status_code == 403
    assert r.data['error']['code'] == 'forbidden'


def test_user_status_change_leaves_state_untouched(user, hospital, ambulance, silence_broadcast):
    client = client_for(user)
    booking_id = client.post(reverse('book_ambulance'), {
        'hospitalId': hospital.id, 'ambulanceId': ambulance.id, 'bookingType': 'EMERGENCY', 'patient': JANE,
    }, format='json').data['id']

    r = client.patch(reverse('admin_booking_status') + f'?bookingId={booking_id}&status=CANCELLED')
    assert r.status_code == 403
    r = client.patch(reverse('admin_ambulance_status') + f'?ambulanceId={ambulance.id}&status=MAINTENANCE')
    assert r.status_code == 403
    assert Booking.objects.get(pk=booking_id).status == 'ACTIVE'
    ambulance.refresh_from_db()
    assert ambulance.status == Ambulance.STATUS_ON_DUTY


def test_users_cannot_read_or_book_for_others(user, other_user, hospital, ambulance):
    client = client_for(user)
    assert client.get(reverse('booking_history') + f'?userId={other_user.id}').status_code == 403
    assert client.get(reverse('user_profile') + f'?userId={other_user.id}').status_code == 403
    r = client.post(reverse('book_ambulance') + f'?userId={other_user.id}', {
        'hospitalId': hospital.id, 'ambulanceId': ambulance.id, 'patient': JANE,
    }, format='json')
    assert r.status_code == 403
    assert not Booking.objects.exists()


def test_admin_can_book_and_read_for_a_user(admin_user, user, hospital, ambulance, silence_broadcast):
    client = client_for(admin_user)
    r = client.post(reverse('book_ambulance') + f'?userId={user.id}', {
        'hospitalId': hospital.id, 'ambulanceId': ambulance.id, 'patient': JANE,
    }, format='json')
    assert r.status_code == 201
    assert r.data['userId'] == user.id
    r = client.get(reverse('booking_history') + f'?userId={user.id}')
    assert [b['id'] for b in r.data] == [Booking.objects.get().id]


def test_server_errors_hide_internals(user, monkeypatch):
    def boom(*a, **k):
        raise RuntimeError('secret stack detail')

    monkeypatch.setattr('dispatch.services.queries.booking_history', boom)
    r = client_for(user).get(reverse('booking_history'))
    assert r.status_code == 500
    assert r.data == {'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}}
