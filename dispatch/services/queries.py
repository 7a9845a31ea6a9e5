"""Read-side listings: booking history, admin listings and paging."""
import math
from typing import Callable, List

from django.conf import settings
from django.db.models import QuerySet

from dispatch.exceptions import NotFound, ValidationError
from dispatch.models import Ambulance, Booking, Hospital, User
from dispatch.services.formats import format_booking, format_hospital


def paginate(qs: QuerySet, page: int, size: int, fmt: Callable) -> dict:
    """Slice ``qs`` into a zero-indexed page rendered with ``fmt``."""
    if page is None or page < 0:
        raise ValidationError({'page': 'must be zero or greater'})
    if size is None or not 1 <= size <= settings.PAGE_SIZE_MAX:
        raise ValidationError({'size': f'must be between 1 and {settings.PAGE_SIZE_MAX}'})
    total = qs.count()
    total_pages = math.ceil(total / size) if total else 0
    start = page * size
    content = [fmt(obj) for obj in qs[start:start + size]] if start < total else []
    return {
        'content': content,
        'totalPages': total_pages,
        'totalElements': total,
        'number': page,
        'size': size,
        'first': page == 0,
        'last': page >= total_pages - 1,
    }


def _bookings() -> QuerySet:
    return Booking.objects.select_related('user', 'hospital', 'ambulance')


def booking_history(user_id: int) -> List[Booking]:
    if not User.objects.filter(pk=user_id).exists():
        raise NotFound('user not found')
    return list(_bookings().filter(user_id=user_id).order_by('-booking_time', '-id'))


def all_bookings() -> List[Booking]:
    return list(_bookings().order_by('id'))


def all_bookings_page(page: int, size: int) -> dict:
    return paginate(_bookings().order_by('id'), page, size, format_booking)


def hospitals_page(page: int, size: int) -> dict:
    return paginate(Hospital.objects.order_by('id'), page, size, format_hospital)


def all_ambulances() -> List[Ambulance]:
    return list(Ambulance.objects.select_related('hospital').order_by('id'))
