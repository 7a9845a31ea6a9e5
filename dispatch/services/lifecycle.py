"""
Status lifecycle for bookings and ambulances.

Booking:   ACTIVE -> COMPLETED | CANCELLED, terminal states are final.
Ambulance: AVAILABLE -> ON_DUTY only through a booking; ON_DUTY ->
AVAILABLE when the booking closes; MAINTENANCE at any time by an admin.
"""
import logging
from datetime import timedelta
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from dispatch.exceptions import IllegalTransition, NotFound, ValidationError
from dispatch.models import Ambulance, Booking, BookingTransition, User
from dispatch.permissions import require_admin
from dispatch.services import availability
from dispatch.services.audit import log_action
from dispatch.services.notify import broadcast

logger = logging.getLogger(__name__)

BOOKING_TRANSITIONS = {
    Booking.STATUS_ACTIVE: {Booking.STATUS_COMPLETED, Booking.STATUS_CANCELLED},
    Booking.STATUS_COMPLETED: set(),
    Booking.STATUS_CANCELLED: set(),
}

BOOKING_STATUSES = {s for s, _ in Booking.STATUS_CHOICES}
AMBULANCE_STATUSES = {s for s, _ in Ambulance.STATUS_CHOICES}


def _can_transition(cur: str, new: str) -> bool:
    return new in BOOKING_TRANSITIONS.get(cur, set())


def _normalize(value, allowed, label):
    value = (value or '').strip().upper()
    if value not in allowed:
        raise ValidationError({'status': f'unknown {label} status: {value or "<empty>"}'})
    return value


def _release_ambulance(ambulance_id: Optional[int], now) -> int:
    """ON_DUTY -> AVAILABLE; an ambulance put in maintenance stays there."""
    if ambulance_id is None:
        return 0
    return Ambulance.objects.filter(pk=ambulance_id, status=Ambulance.STATUS_ON_DUTY).update(
        status=Ambulance.STATUS_AVAILABLE, version=F('version') + 1, updated_at=now,
    )


def _close_booking(booking: Booking, new_status: str, operator: Optional[User], reason: str) -> Booking:
    if not _can_transition(booking.status, new_status):
        raise IllegalTransition(f'cannot change booking from {booking.status} to {new_status}')
    now = timezone.now()
    with transaction.atomic():
        changed = Booking.objects.filter(pk=booking.pk, status=Booking.STATUS_ACTIVE).update(
            status=new_status, closed_at=now,
        )
        if not changed:
            raise IllegalTransition('booking is no longer active')
        released = _release_ambulance(booking.ambulance_id, now)
        BookingTransition.objects.create(
            booking=booking, from_status=Booking.STATUS_ACTIVE, to_status=new_status,
            operator=operator, reason=reason or '',
        )
    booking.refresh_from_db()
    logger.info('booking %s -> %s (ambulance %s released=%s)', booking.id, new_status, booking.ambulance_id, bool(released))
    try:
        log_action(user=operator, action='booking_status', object_type='booking', object_id=booking.id,
                   detail={'from': Booking.STATUS_ACTIVE, 'to': new_status, 'reason': reason or ''})
    except Exception:
        logger.exception('audit failed for booking %s', booking.id)
    availability.refresh(booking.hospital_id)
    broadcast('booking.status', bookingId=booking.id, status=new_status,
              ambulanceId=booking.ambulance_id, hospitalId=booking.hospital_id)
    return booking


def change_booking_status(actor: User, booking_id: int, new_status: str, reason: str = '') -> Booking:
    require_admin(actor)
    new_status = _normalize(new_status, BOOKING_STATUSES, 'booking')
    booking = Booking.objects.using('default').select_related('user', 'hospital', 'ambulance').filter(pk=booking_id).first()
    if not booking:
        raise NotFound('booking not found')
    return _close_booking(booking, new_status, actor, reason)


def change_ambulance_status(actor: User, ambulance_id: int, new_status: str) -> Ambulance:
    """Administrative override of an ambulance's status.

    MAINTENANCE is always accepted, even while a booking is in progress;
    that booking stays ACTIVE and closing it later leaves the ambulance in
    maintenance.  AVAILABLE is refused while an ACTIVE booking holds the
    ambulance.  ON_DUTY is only ever set by a booking.
    """
    require_admin(actor)
    new_status = _normalize(new_status, AMBULANCE_STATUSES, 'ambulance')
    if new_status == Ambulance.STATUS_ON_DUTY:
        raise IllegalTransition('ON_DUTY is only set by a booking')
    now = timezone.now()
    with transaction.atomic():
        ambulance = Ambulance.objects.select_for_update().filter(pk=ambulance_id).first()
        if not ambulance:
            raise NotFound('ambulance not found')
        previous = ambulance.status
        if new_status == Ambulance.STATUS_AVAILABLE and Booking.objects.filter(
            ambulance_id=ambulance.id, status=Booking.STATUS_ACTIVE,
        ).exists():
            raise IllegalTransition('ambulance is held by an active booking')
        if previous != new_status:
            Ambulance.objects.filter(pk=ambulance.id).update(
                status=new_status, version=F('version') + 1, updated_at=now,
            )
    ambulance.refresh_from_db()
    if previous == new_status:
        return ambulance
    logger.info('ambulance %s: %s -> %s by %s', ambulance.id, previous, new_status, actor.id)
    try:
        log_action(user=actor, action='ambulance_status', object_type='ambulance', object_id=ambulance.id,
                   detail={'from': previous, 'to': new_status})
    except Exception:
        logger.exception('audit failed for ambulance %s', ambulance.id)
    availability.refresh(ambulance.hospital_id)
    broadcast('ambulance.status', ambulanceId=ambulance.id, hospitalId=ambulance.hospital_id, status=new_status)
    return ambulance


def complete_stale_bookings(older_than: timedelta, operator: Optional[User] = None) -> int:
    """Complete ACTIVE bookings created more than ``older_than`` ago."""
    cutoff = timezone.now() - older_than
    stale = Booking.objects.using('default').filter(
        status=Booking.STATUS_ACTIVE, booking_time__lt=cutoff,
    ).order_by('id')
    done = 0
    for booking in stale:
        try:
            _close_booking(booking, Booking.STATUS_COMPLETED, operator, 'auto-completed')
        except IllegalTransition:
            # closed by an admin meanwhile
            continue
        done += 1
    return done
