"""
Bearer token authentication.

The front end sends ``Authorization: Bearer <token>`` where the token is
whatever the login/register endpoints returned as ``token``.  That is a
DRF token; simplejwt access tokens issued alongside it are accepted
under the same keyword so clients can move to JWT without a header
change.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication


class BearerTokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Bearer`` keyword, with JWT fallback."""

    keyword = 'Bearer'

    def authenticate_credentials(self, key):
        try:
            return super().authenticate_credentials(key)
        except exceptions.AuthenticationFailed:
            # DRF token keys are 40 hex chars; JWTs always carry dots.
            if '.' not in key:
                raise
        jwt_auth = JWTAuthentication()
        validated = jwt_auth.get_validated_token(key)
        user = jwt_auth.get_user(validated)
        if not user.is_active:
            raise exceptions.AuthenticationFailed('User inactive or deleted.')
        return user, validated
