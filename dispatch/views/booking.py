from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dispatch.permissions import require_self_or_admin
from dispatch.serializers.booking import BookingRequestSerializer
from dispatch.services import booking as booking_engine
from dispatch.services import queries
from dispatch.services.formats import format_booking

from .params import target_user_id


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def book_ambulance(request):
    """
    Body: {hospitalId, ambulanceId, bookingType, patient: {name, age, gender, condition}}
    Query: userId (defaults to the caller; admins may book for anyone)
    Header: Idempotency-Key (optional) makes resubmission return the first booking.
    """
    uid = target_user_id(request)
    require_self_or_admin(request.user, uid)
    key = (request.headers.get('Idempotency-Key') or '').strip() or None

    replay = booking_engine.find_replay(uid, key)
    if replay:
        return Response(format_booking(replay), status=200)

    s = BookingRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    booking = booking_engine.book(
        uid, v['hospitalId'], v['ambulanceId'], v['bookingType'], request.data.get('patient'),
        idempotency_key=key, actor=request.user,
    )
    return Response(format_booking(booking), status=201)

book_ambulance.cls.throttle_scope = 'booking'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def booking_history(request):
    uid = target_user_id(request)
    require_self_or_admin(request.user, uid)
    return Response([format_booking(b) for b in queries.booking_history(uid)])
