"""
Booking engine.

A booking reserves one ambulance with a single conditional update
(``AVAILABLE`` -> ``ON_DUTY``) executed in the same transaction as the
booking insert.  Either both happen or neither does; a second request
for the same ambulance finds zero rows to update and is rejected.
"""
import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from dispatch.exceptions import AmbulanceUnavailable, Conflict, NotFound, ValidationError
from dispatch.models import Ambulance, Booking, BookingTransition, Hospital, User
from dispatch.serializers.booking import PatientSerializer
from dispatch.services import availability
from dispatch.services.audit import log_action
from dispatch.services.notify import broadcast

logger = logging.getLogger(__name__)

BOOKING_TYPES = (Booking.TYPE_NORMAL, Booking.TYPE_EMERGENCY)


def find_replay(user_id: int, idempotency_key: Optional[str]) -> Optional[Booking]:
    """Return the booking an earlier submission with the same key created."""
    if not idempotency_key:
        return None
    return (
        Booking.objects.using('default')
        .select_related('user', 'hospital', 'ambulance')
        .filter(user_id=user_id, idempotency_key=idempotency_key)
        .first()
    )


def _validated_patient(patient) -> dict:
    ser = PatientSerializer(data=patient if isinstance(patient, dict) else {})
    if not ser.is_valid():
        raise ValidationError({'patient': ser.errors})
    return ser.validated_data


def book(user_id: int, hospital_id: int, ambulance_id: int, booking_type: str, patient: dict,
         *, idempotency_key: Optional[str] = None, actor: Optional[User] = None) -> Booking:
    if booking_type is not None and not isinstance(booking_type, str):
        raise ValidationError({'bookingType': 'must be a string'})
    booking_type = (booking_type or Booking.TYPE_NORMAL).strip().upper()
    if booking_type not in BOOKING_TYPES:
        raise ValidationError({'bookingType': f'must be one of {", ".join(BOOKING_TYPES)}'})
    p = _validated_patient(patient)
    if idempotency_key is not None and len(idempotency_key) > 64:
        raise ValidationError({'idempotencyKey': 'must be at most 64 characters'})

    # Existence checks read the primary: a replica may lag behind a fresh insert.
    user = User.objects.using('default').filter(pk=user_id, is_active=True).first()
    if not user:
        raise NotFound('user not found')
    hospital = Hospital.objects.using('default').filter(pk=hospital_id).first()
    if not hospital:
        raise NotFound('hospital not found')
    ambulance = Ambulance.objects.using('default').filter(pk=ambulance_id).first()
    if not ambulance:
        raise NotFound('ambulance not found')
    if ambulance.hospital_id != hospital.id:
        raise Conflict('ambulance does not belong to the selected hospital')

    now = timezone.now()
    try:
        with transaction.atomic():
            claimed = Ambulance.objects.filter(
                pk=ambulance.id, status=Ambulance.STATUS_AVAILABLE,
            ).update(status=Ambulance.STATUS_ON_DUTY, version=F('version') + 1, updated_at=now)
            if not claimed:
                raise AmbulanceUnavailable()
            booking = Booking.objects.create(
                user=user,
                hospital=hospital,
                ambulance=ambulance,
                hospital_name=hospital.name,
                ambulance_number=ambulance.number,
                booking_type=booking_type,
                patient_name=p['name'],
                patient_age=p['age'],
                patient_gender=p['gender'],
                patient_condition=p['condition'],
                idempotency_key=idempotency_key or None,
            )
            BookingTransition.objects.create(
                booking=booking, from_status=None, to_status=Booking.STATUS_ACTIVE,
                operator=actor or user, reason='booked',
            )
    except IntegrityError:
        # Lost a race on the unique constraints.
        existing = find_replay(user.id, idempotency_key)
        if existing:
            return existing
        raise AmbulanceUnavailable()

    logger.info('booking %s: user=%s ambulance=%s type=%s', booking.id, user.id, ambulance.id, booking_type)
    try:
        log_action(user=actor or user, action='booking_created', object_type='booking', object_id=booking.id,
                   detail={'ambulanceId': ambulance.id, 'hospitalId': hospital.id, 'bookingType': booking_type})
    except Exception:
        logger.exception('audit failed for booking %s', booking.id)
    availability.refresh(hospital.id)
    broadcast('booking.created', bookingId=booking.id, hospitalId=hospital.id,
              ambulanceId=ambulance.id, bookingType=booking_type)
    return booking
