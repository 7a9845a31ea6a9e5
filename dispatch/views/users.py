from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dispatch.serializers.auth import ProfileUpdateSerializer
from dispatch.services.audit import log_action
from dispatch.services.formats import format_user
from dispatch.services.users import get_profile, update_profile

from .params import target_user_id


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def user_profile(request):
    """GET returns the profile; PUT updates email, location or password.

    ``userId`` (query string or body) selects another user; only
    administrators may use it for anyone but themselves.
    """
    if request.method == 'GET':
        user = get_profile(request.user, target_user_id(request))
        return Response(format_user(user))

    s = ProfileUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    changes = dict(s.validated_data)
    uid = target_user_id(request, changes.pop('userId', None))
    user = update_profile(request.user, uid, changes)
    try:
        log_action(user=request.user, action='profile_update', object_type='user', object_id=user.id,
                   detail={'fields': sorted(k for k in changes if k != 'password')})
    except Exception:
        pass
    return Response(format_user(user))
