"""Administrator endpoints: booking and fleet management."""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dispatch.permissions import IsAdminRole
from dispatch.serializers.booking import AmbulanceStatusQuerySerializer, BookingStatusQuerySerializer
from dispatch.serializers.fleet import (
    AmbulanceCreateSerializer,
    AmbulanceIdQuerySerializer,
    HospitalCreateSerializer,
    HospitalIdQuerySerializer,
    PageQuerySerializer,
)
from dispatch.services import fleet, lifecycle, queries
from dispatch.services.formats import format_ambulance, format_booking, format_hospital

from .params import query_params


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def booking_status(request):
    q = query_params(BookingStatusQuerySerializer, request)
    booking = lifecycle.change_booking_status(request.user, q['bookingId'], q['status'], reason=q.get('reason', ''))
    return Response(format_booking(booking))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def ambulance_status(request):
    q = query_params(AmbulanceStatusQuerySerializer, request)
    ambulance = lifecycle.change_ambulance_status(request.user, q['ambulanceId'], q['status'])
    return Response(format_ambulance(ambulance))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def all_bookings(request):
    return Response([format_booking(b) for b in queries.all_bookings()])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def all_bookings_paged(request):
    q = query_params(PageQuerySerializer, request)
    return Response(queries.all_bookings_page(q['page'], q['size']))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def add_hospital(request):
    s = HospitalCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    hospital = fleet.add_hospital(
        request.user, name=v['name'], address=v['address'],
        latitude=v['latitude'], longitude=v['longitude'], contact_info=v['contactInfo'],
    )
    return Response(format_hospital(hospital), status=201)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def remove_hospital(request):
    hospital_id = query_params(HospitalIdQuerySerializer, request)['hospitalId']
    fleet.remove_hospital(request.user, hospital_id)
    return Response({'ok': True, 'id': hospital_id})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def all_ambulances(request):
    return Response([format_ambulance(a) for a in queries.all_ambulances()])


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def add_ambulance(request):
    s = AmbulanceCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    ambulance = fleet.add_ambulance(
        request.user, hospital_id=v['hospital_id'], number=v['number'],
        status=v['status'], driver_info=v['driverInfo'],
    )
    return Response(format_ambulance(ambulance), status=201)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def remove_ambulance(request):
    ambulance_id = query_params(AmbulanceIdQuerySerializer, request)['ambulanceId']
    fleet.remove_ambulance(request.user, ambulance_id)
    return Response({'ok': True, 'id': ambulance_id})
