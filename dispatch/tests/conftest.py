import pytest
from rest_framework.test import APIClient

from dispatch.models import Ambulance, Hospital, User

PASSWORD = 'P@ssw0rd1'

JANE = {'name': 'Jane Doe', 'age': 34, 'gender': 'Female', 'condition': 'fracture'}


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(username='admin@test.io', email='admin@test.io', password=PASSWORD,
                                    role=User.ROLE_ADMIN)


@pytest.fixture
def user(db):
    return User.objects.create_user(username='u1@test.io', email='u1@test.io', password=PASSWORD,
                                    role=User.ROLE_USER, latitude=12.97, longitude=77.59)


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username='u2@test.io', email='u2@test.io', password=PASSWORD,
                                    role=User.ROLE_USER)


@pytest.fixture
def hospital(db):
    return Hospital.objects.create(name='City General', address='1 Main St', latitude=12.97, longitude=77.59)


@pytest.fixture
def ambulance(hospital):
    return Ambulance.objects.create(hospital=hospital, number='KA-01-001', driver_info='Ravi')


@pytest.fixture
def silence_broadcast(monkeypatch):
    """Collect realtime events instead of sending them."""
    sent = []

    def fake(kind, **data):
        sent.append((kind, data))

    for mod in ('booking', 'lifecycle', 'fleet'):
        monkeypatch.setattr(f'dispatch.services.{mod}.broadcast', fake)
    return sent


def client_for(u):
    client = APIClient()
    client.force_authenticate(user=u)
    return client
