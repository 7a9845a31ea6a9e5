"""
Database models for the dispatch backend.

These models capture the core concepts of the system: users who book
ambulances, hospitals that own ambulance fleets, and bookings that hold
an ambulance for the lifetime of a patient transfer.  Field names follow
the JSON exposed to the front end where practical so that the
formatting layer stays a thin mapping.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q


class User(AbstractUser):
    """Custom user model with a role and an optional home location.

    Roles are a capability tag checked per operation: ``USER`` books
    ambulances for patients, ``ADMIN`` manages hospitals, fleets and
    booking lifecycles.  Users are never hard-deleted; deactivation goes
    through ``is_active``.
    """
    ROLE_USER = 'USER'
    ROLE_ADMIN = 'ADMIN'
    ROLE_CHOICES = [
        (ROLE_USER, 'User'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    email = models.EmailField('email address', unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_USER, db_index=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class Hospital(models.Model):
    """A hospital that owns a fleet of ambulances."""
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=512)
    # Indexed for the bounding-box prefilter of radius searches
    latitude = models.FloatField(db_index=True)
    longitude = models.FloatField(db_index=True)
    contact_info = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} (#{self.id})"


class Ambulance(models.Model):
    """An ambulance exclusively owned by one hospital.

    ``status`` is only ever changed through conditional updates in the
    booking and lifecycle services; ``version`` increases with each
    change so that stale reads are easy to spot in audit trails.
    """
    STATUS_AVAILABLE = 'AVAILABLE'
    STATUS_ON_DUTY = 'ON_DUTY'
    STATUS_MAINTENANCE = 'MAINTENANCE'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_ON_DUTY, 'On duty'),
        (STATUS_MAINTENANCE, 'Maintenance'),
    ]
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='ambulances')
    number = models.CharField(max_length=32)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    driver_info = models.CharField(max_length=255, blank=True)
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['hospital', 'number'], name='uniq_ambulance_number_per_hospital'),
        ]
        indexes = [
            models.Index(fields=['hospital', 'status'], name='ambulance_hospital_status_idx'),
        ]

    def __str__(self) -> str:
        return f"Ambulance {self.number} @ {self.hospital_id} ({self.status})"


class Booking(models.Model):
    """A patient transfer holding one ambulance while ACTIVE.

    The hospital name and ambulance number are copied at creation time so
    that booking history still reads correctly after an administrator
    removes the hospital or ambulance.
    """
    TYPE_NORMAL = 'NORMAL'
    TYPE_EMERGENCY = 'EMERGENCY'
    TYPE_CHOICES = [
        (TYPE_NORMAL, 'Normal'),
        (TYPE_EMERGENCY, 'Emergency'),
    ]

    STATUS_ACTIVE = 'ACTIVE'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)

    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name='bookings')
    hospital = models.ForeignKey(Hospital, null=True, on_delete=models.SET_NULL, related_name='bookings')
    ambulance = models.ForeignKey(Ambulance, null=True, on_delete=models.SET_NULL, related_name='bookings')
    hospital_name = models.CharField(max_length=255)
    ambulance_number = models.CharField(max_length=32)
    booking_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_NORMAL)

    patient_name = models.CharField(max_length=128)
    patient_age = models.PositiveSmallIntegerField()
    patient_gender = models.CharField(max_length=32)
    patient_condition = models.CharField(max_length=512)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    booking_time = models.DateTimeField(auto_now_add=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    idempotency_key = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['ambulance'],
                condition=Q(status='ACTIVE'),
                name='uniq_active_booking_per_ambulance',
            ),
            models.UniqueConstraint(
                fields=['user', 'idempotency_key'],
                condition=Q(idempotency_key__isnull=False),
                name='uniq_booking_idempotency_key',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'booking_time'], name='booking_user_time_idx'),
            models.Index(fields=['status', 'booking_time'], name='booking_status_time_idx'),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def __str__(self) -> str:
        return f"Booking #{self.id} {self.status} amb={self.ambulance_id}"


class BookingTransition(models.Model):
    """Records a status transition for a booking."""
    booking = models.ForeignKey(Booking, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=16, null=True, blank=True)
    to_status = models.CharField(max_length=16)
    operator = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='booking_transitions')
    timestamp = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.booking_id}: {self.from_status} → {self.to_status}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_time_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_time_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.object_type}#{self.object_id}"
