from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dispatch.serializers.fleet import HospitalIdQuerySerializer
from dispatch.services import availability
from dispatch.services.formats import format_ambulance

from .params import query_params


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_ambulances(request):
    hospital_id = query_params(HospitalIdQuerySerializer, request)['hospitalId']
    # key taken before the read so a concurrent refresh orphans what we store
    ck = availability.cache_key(hospital_id)
    payload = cache.get(ck)
    if payload is None:
        payload = [format_ambulance(a) for a in availability.query_available(hospital_id)]
        cache.set(ck, payload, settings.AVAILABILITY_CACHE_TTL)
    return Response(payload)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def all_available_ambulances(request):
    ck = availability.all_cache_key()
    payload = cache.get(ck)
    if payload is None:
        payload = [format_ambulance(a) for a in availability.query_available_all()]
        cache.set(ck, payload, settings.AVAILABILITY_CACHE_TTL)
    return Response(payload)
