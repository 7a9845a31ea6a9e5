from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dispatch.exceptions import ValidationError
from dispatch.serializers.fleet import NearestQuerySerializer, PageQuerySerializer
from dispatch.services import availability, queries
from dispatch.services.formats import format_hospital

from .params import query_params


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def nearest_hospitals(request):
    """Hospitals ordered by distance from ``lat``/``lng``.

    Without coordinates the caller's stored location is used.
    """
    q = query_params(NearestQuerySerializer, request)
    lat, lng = q.get('lat'), q.get('lng')
    if lat is None or lng is None:
        if (lat is None) != (lng is None):
            raise ValidationError('lat and lng must be given together')
        if not request.user.has_location:
            raise ValidationError('location is required: pass lat/lng or set it in your profile')
        lat, lng = request.user.latitude, request.user.longitude
    ranked = availability.query_nearest(lat, lng, q.get('radiusKm'))
    return Response([format_hospital(h, distance=d) for h, d in ranked])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def all_hospitals(request):
    q = query_params(PageQuerySerializer, request)
    return Response(queries.hospitals_page(q['page'], q['size']))
