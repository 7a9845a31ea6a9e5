"""
Availability index: which ambulances can be booked and which hospitals
are closest to a point.

Reads here always reflect the database at query time.  The listing
endpoints cache the rendered payloads under generation-stamped keys.
Every committed status change calls :func:`refresh`, which bumps the
generations, so a payload rendered before the change is stored under a
key nobody reads any more.
"""
import logging
import time
from typing import List, Optional, Tuple

from django.core.cache import cache
from django.db.models import Q

from dispatch.exceptions import NotFound, ValidationError
from dispatch.models import Ambulance, Hospital
from dispatch.services.geo import bounding_box, haversine_distance, validate_point

logger = logging.getLogger(__name__)

GEN_ALL_KEY = 'availability:gen:all'


def _gen_key(hospital_id: int) -> str:
    return f'availability:gen:h={hospital_id}'


def _generation(gen_key: str) -> int:
    gen = cache.get(gen_key)
    if gen is None:
        # seeded from the clock so an evicted counter never reuses an old key
        cache.add(gen_key, time.time_ns(), None)
        gen = cache.get(gen_key)
    return gen


def _bump(gen_key: str) -> None:
    try:
        cache.incr(gen_key)
    except ValueError:
        cache.add(gen_key, time.time_ns(), None)


def cache_key(hospital_id: int) -> str:
    """Payload key for one hospital's listing at its current generation."""
    return f'availability:h={hospital_id}:g={_generation(_gen_key(hospital_id))}'


def all_cache_key() -> str:
    return f'availability:all:g={_generation(GEN_ALL_KEY)}'


def query_available(hospital_id: int) -> List[Ambulance]:
    if not Hospital.objects.filter(pk=hospital_id).exists():
        raise NotFound('hospital not found')
    qs = Ambulance.objects.select_related('hospital').filter(
        hospital_id=hospital_id, status=Ambulance.STATUS_AVAILABLE,
    ).order_by('id')
    return list(qs)


def query_available_all() -> List[Ambulance]:
    qs = Ambulance.objects.select_related('hospital').filter(
        status=Ambulance.STATUS_AVAILABLE,
    ).order_by('id')
    return list(qs)


def _longitude_q(min_lng: float, max_lng: float) -> Q:
    # A box crossing the antimeridian becomes two longitude ranges.
    if min_lng <= -180.0 and max_lng >= 180.0:
        return Q()
    if min_lng < -180.0:
        return Q(longitude__gte=min_lng + 360.0) | Q(longitude__lte=max_lng)
    if max_lng > 180.0:
        return Q(longitude__gte=min_lng) | Q(longitude__lte=max_lng - 360.0)
    return Q(longitude__gte=min_lng, longitude__lte=max_lng)


def query_nearest(lat: float, lng: float, radius_km: Optional[float] = None) -> List[Tuple[Hospital, float]]:
    """All hospitals ordered by great-circle distance, then by id.

    With ``radius_km`` the candidates are first narrowed with an indexed
    bounding box and then filtered by exact distance.
    """
    try:
        validate_point(lat, lng)
    except ValueError as e:
        raise ValidationError(str(e))
    qs = Hospital.objects.all()
    if radius_km is not None:
        if radius_km < 0:
            raise ValidationError('radiusKm must not be negative')
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
        qs = qs.filter(Q(latitude__gte=min_lat, latitude__lte=max_lat) & _longitude_q(min_lng, max_lng))

    ranked = []
    for h in qs:
        d = haversine_distance(lat, lng, h.latitude, h.longitude)
        if radius_km is not None and d > radius_km:
            continue
        ranked.append((h, d))
    ranked.sort(key=lambda item: (item[1], item[0].id))
    return ranked


def refresh(hospital_id: Optional[int]) -> None:
    """Retire cached availability for a hospital and for the global listing."""
    keys = [GEN_ALL_KEY]
    if hospital_id is not None:
        keys.append(_gen_key(hospital_id))
    for gen_key in keys:
        _bump(gen_key)
    logger.debug('availability refreshed: %s', keys)
