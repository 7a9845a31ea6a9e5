"""Administrative management of hospitals and their ambulance fleets."""
import logging

from django.db import IntegrityError, transaction

from dispatch.exceptions import Conflict, NotFound, ValidationError
from dispatch.models import Ambulance, Booking, Hospital
from dispatch.permissions import require_admin
from dispatch.services import availability
from dispatch.services.audit import log_action
from dispatch.services.geo import validate_point
from dispatch.services.notify import broadcast

logger = logging.getLogger(__name__)

INITIAL_AMBULANCE_STATUSES = (Ambulance.STATUS_AVAILABLE, Ambulance.STATUS_MAINTENANCE)


def _audit(actor, action, object_type, object_id, detail):
    try:
        log_action(user=actor, action=action, object_type=object_type, object_id=object_id, detail=detail)
    except Exception:
        logger.exception('audit failed for %s %s', object_type, object_id)


def add_hospital(actor, *, name: str, address: str, latitude: float, longitude: float,
                 contact_info: str = '') -> Hospital:
    require_admin(actor)
    try:
        validate_point(latitude, longitude)
    except ValueError as e:
        raise ValidationError(str(e))
    hospital = Hospital.objects.create(
        name=name, address=address, latitude=latitude, longitude=longitude, contact_info=contact_info or '',
    )
    _audit(actor, 'hospital_added', 'hospital', hospital.id, {'name': name})
    return hospital


def remove_hospital(actor, hospital_id: int) -> None:
    """Delete a hospital and its fleet.

    Refused while any of its bookings is ACTIVE; past bookings keep the
    hospital name they recorded.
    """
    require_admin(actor)
    with transaction.atomic():
        hospital = Hospital.objects.select_for_update().filter(pk=hospital_id).first()
        if not hospital:
            raise NotFound('hospital not found')
        if Booking.objects.filter(hospital_id=hospital.id, status=Booking.STATUS_ACTIVE).exists():
            raise Conflict('hospital has active bookings')
        name = hospital.name
        hospital.delete()
    _audit(actor, 'hospital_removed', 'hospital', hospital_id, {'name': name})
    availability.refresh(hospital_id)


def add_ambulance(actor, *, hospital_id: int, number: str, status: str = Ambulance.STATUS_AVAILABLE,
                  driver_info: str = '') -> Ambulance:
    require_admin(actor)
    status = (status or Ambulance.STATUS_AVAILABLE).upper()
    if status not in INITIAL_AMBULANCE_STATUSES:
        raise ValidationError({'status': 'new ambulances start AVAILABLE or MAINTENANCE'})
    hospital = Hospital.objects.filter(pk=hospital_id).first()
    if not hospital:
        raise NotFound('hospital not found')
    if Ambulance.objects.filter(hospital=hospital, number=number).exists():
        raise Conflict(f'ambulance {number} already exists at this hospital')
    try:
        with transaction.atomic():
            ambulance = Ambulance.objects.create(
                hospital=hospital, number=number, status=status, driver_info=driver_info or '',
            )
    except IntegrityError:
        raise Conflict(f'ambulance {number} already exists at this hospital')
    _audit(actor, 'ambulance_added', 'ambulance', ambulance.id, {'hospitalId': hospital.id, 'number': number})
    availability.refresh(hospital.id)
    broadcast('ambulance.status', ambulanceId=ambulance.id, hospitalId=hospital.id, status=status)
    return ambulance


def remove_ambulance(actor, ambulance_id: int) -> None:
    require_admin(actor)
    with transaction.atomic():
        ambulance = Ambulance.objects.select_for_update().filter(pk=ambulance_id).first()
        if not ambulance:
            raise NotFound('ambulance not found')
        if Booking.objects.filter(ambulance_id=ambulance.id, status=Booking.STATUS_ACTIVE).exists():
            raise Conflict('ambulance is held by an active booking')
        hospital_id = ambulance.hospital_id
        ambulance.delete()
    _audit(actor, 'ambulance_removed', 'ambulance', ambulance_id, {'hospitalId': hospital_id})
    availability.refresh(hospital_id)
