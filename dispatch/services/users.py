import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from dispatch.exceptions import Conflict, NotFound, ValidationError
from dispatch.permissions import require_self_or_admin

logger = logging.getLogger(__name__)

User = get_user_model()


def _check_password(password: str, user) -> None:
    try:
        validate_password(password, user=user)
    except DjangoValidationError as e:
        raise ValidationError({'password': e.messages})


def register_user(*, email: str, password: str, latitude: Optional[float] = None,
                  longitude: Optional[float] = None):
    """Create a USER account; the role is never taken from the request."""
    email = email.strip().lower()
    if User.objects.filter(email__iexact=email).exists():
        raise Conflict('email already registered')
    _check_password(password, User(username=email, email=email))
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email, email=email, password=password,
                role=User.ROLE_USER, latitude=latitude, longitude=longitude,
            )
    except IntegrityError:
        raise Conflict('email already registered')
    logger.info('registered user %s', user.id)
    return user


def get_profile(actor, user_id: int):
    require_self_or_admin(actor, user_id)
    user = User.objects.filter(pk=user_id).first()
    if not user:
        raise NotFound('user not found')
    return user


def update_profile(actor, user_id: int, changes: dict):
    """Apply ``email``/``latitude``/``longitude``/``password`` from ``changes``.

    Only keys present in ``changes`` are touched; a ``None`` coordinate
    clears the stored location.
    """
    require_self_or_admin(actor, user_id)
    user = User.objects.using('default').filter(pk=user_id).first()
    if not user:
        raise NotFound('user not found')

    if 'email' in changes and changes['email']:
        email = changes['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
            raise Conflict('email already registered')
        user.email = email
        user.username = email
    has_lat, has_lng = 'latitude' in changes, 'longitude' in changes
    if has_lat or has_lng:
        lat = changes.get('latitude', user.latitude)
        lng = changes.get('longitude', user.longitude)
        if (lat is None) != (lng is None):
            raise ValidationError('latitude and longitude must be given together')
        user.latitude, user.longitude = lat, lng
    if changes.get('password'):
        _check_password(changes['password'], user)
        user.set_password(changes['password'])
    try:
        user.save()
    except IntegrityError:
        raise Conflict('email already registered')
    return user
