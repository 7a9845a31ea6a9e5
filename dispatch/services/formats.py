"""
JSON shapes returned to the front end.

Every endpoint renders entities through these helpers so that a booking
looks the same in history, admin listings and the booking response.
Keys are camelCase because the client reads them verbatim.
"""
from typing import Optional

from dispatch.models import Ambulance, Booking, Hospital, User


def _iso(value):
    return value.isoformat() if value else None


def format_user(user: User) -> dict:
    return {
        'id': user.id,
        'email': user.email,
        'username': user.username,
        'role': user.role,
        'latitude': user.latitude,
        'longitude': user.longitude,
        'createdAt': _iso(user.date_joined),
    }


def format_hospital(hospital: Hospital, distance: Optional[float] = None) -> dict:
    data = {
        'id': hospital.id,
        'name': hospital.name,
        'address': hospital.address,
        'latitude': hospital.latitude,
        'longitude': hospital.longitude,
        'contactInfo': hospital.contact_info,
    }
    if distance is not None:
        data['distance'] = round(distance, 3)
    return data


def format_ambulance(ambulance: Ambulance) -> dict:
    hospital = ambulance.hospital
    return {
        'id': ambulance.id,
        'number': ambulance.number,
        'status': ambulance.status,
        'driverInfo': ambulance.driver_info,
        'hospitalId': ambulance.hospital_id,
        'hospitalName': hospital.name,
        'hospital': {'id': hospital.id, 'name': hospital.name, 'address': hospital.address},
    }


def format_booking(booking: Booking) -> dict:
    hospital = booking.hospital
    ambulance = booking.ambulance
    return {
        'id': booking.id,
        'userId': booking.user_id,
        'userEmail': booking.user.email,
        'bookingType': booking.booking_type,
        'bookingStatus': booking.status,
        'bookingTime': _iso(booking.booking_time),
        'closedAt': _iso(booking.closed_at),
        'hospitalId': booking.hospital_id,
        'hospitalName': booking.hospital_name,
        'hospital': (
            {'id': hospital.id, 'name': hospital.name, 'address': hospital.address}
            if hospital else None
        ),
        'ambulanceId': booking.ambulance_id,
        'ambulanceNumber': booking.ambulance_number,
        'ambulance': (
            {'id': ambulance.id, 'number': ambulance.number, 'driverInfo': ambulance.driver_info}
            if ambulance else None
        ),
        'patient': {
            'name': booking.patient_name,
            'age': booking.patient_age,
            'gender': booking.patient_gender,
            'condition': booking.patient_condition,
        },
    }
