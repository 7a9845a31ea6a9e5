"""
Authentication views.

Register and login return the same payload: a DRF token under ``token``
(sent back as ``Authorization: Bearer <token>``) plus a simplejwt
access/refresh pair.  The role always comes from the stored user and is
never read from the request body.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from .models import User
from .serializers.auth import LoginSerializer, RegisterSerializer
from .services.audit import log_action
from .services.formats import format_user
from .services.users import register_user


def _session_payload(user: User) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'id': user.id,
        'role': user.role,
        'user': format_user(user),
    }


# ---------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = register_user(**s.validated_data)
    try:
        log_action(user=user, action='register', object_type='user', object_id=user.id,
                   detail={'ip': request.META.get('REMOTE_ADDR')})
    except Exception:
        pass
    return Response(_session_payload(user), status=201)

register_view.cls.throttle_scope = 'register'


# ---------------------------------------------------------------------
# Email/password login (no role bypass)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Accepts fields:
      - username or email
      - password
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    account = s.validated_data['account']
    password = s.validated_data['password']

    username = account
    if '@' in account:
        match = User.objects.filter(email__iexact=account).only('username').first()
        if match:
            username = match.username

    user = authenticate(request, username=username, password=password)
    if not user:
        try:
            log_action(user=None, action='login', object_type='user', object_id=None,
                       detail={'result': 'fail', 'account': account, 'ip': request.META.get('REMOTE_ADDR')})
        except Exception:
            pass
        return Response({'ok': False, 'error': {'code': 'unauthorized', 'message': 'Invalid credentials'}},
                        status=401)

    try:
        log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})
    except Exception:
        pass
    return Response(_session_payload(user), status=200)

# DRF ScopedRateThrottle reads throttle_scope from the wrapped view class
login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response) and resp.status_code == 200:
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or all of the caller's, and drop the DRF token."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except Exception:
            pass
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    return Response({'ok': True, 'blacklisted': count})
