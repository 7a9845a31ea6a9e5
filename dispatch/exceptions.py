"""
Error taxonomy and the unified API exception handler.

Services raise these exceptions directly; the handler renders every
failure as ``{"ok": false, "error": {"code": ..., "message": ...}}``
with a stable machine-readable code.  Internal details never leave the
process: unexpected exceptions are logged and reported as a generic
``server_error``.
"""
import logging

from django.db import DatabaseError, IntegrityError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

__all__ = [
    'ValidationError',
    'NotFound',
    'Forbidden',
    'AmbulanceUnavailable',
    'IllegalTransition',
    'Conflict',
    'ServiceUnavailable',
    'api_exception_handler',
]

# DRF already provides these; re-exported under the names used by the services.
Forbidden = PermissionDenied


class AmbulanceUnavailable(APIException):
    """The ambulance was already reserved or is in maintenance."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Ambulance is not available'
    default_code = 'ambulance_unavailable'


class IllegalTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Illegal status transition'
    default_code = 'illegal_transition'


class Conflict(APIException):
    """Cross-entity mismatch, e.g. an ambulance that belongs to another hospital."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflicting request'
    default_code = 'conflict'


class ServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Service temporarily unavailable, please retry'
    default_code = 'unavailable'


# DRF default codes folded into the public taxonomy
CODE_ALIASES = {
    'invalid': 'validation_error',
    'parse_error': 'validation_error',
    'permission_denied': 'forbidden',
    'not_authenticated': 'unauthorized',
    'authentication_failed': 'unauthorized',
    'token_not_valid': 'unauthorized',
}


def _error_code(exc) -> str:
    if isinstance(exc, Http404):
        return 'not_found'
    code = getattr(exc, 'default_code', None) or 'api_error'
    return CODE_ALIASES.get(code, code)


def api_exception_handler(exc, context):
    # Lock waits and dropped connections are transient: report them as retryable.
    if isinstance(exc, DatabaseError) and not isinstance(exc, IntegrityError):
        logger.warning('database unavailable: %s', exc)
        exc = ServiceUnavailable()

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'), exc_info=exc)
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}},
            status=500,
        )
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    elif isinstance(resp.data, list) and len(resp.data) == 1:
        detail = resp.data[0]
    else:
        detail = resp.data
    return Response(
        {'ok': False, 'error': {'code': _error_code(exc), 'message': detail}},
        status=resp.status_code,
        headers={k: v for k, v in resp.items() if k.lower() != 'content-type'},
    )
