"""
URL mappings for the dispatch API.

Paths mirror the front end's endpoint table exactly; trailing slashes
are deliberately omitted.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, register_view
from .views import admin, ambulances, booking, health, hospitals, users

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    # User
    path('api/user/profile', users.user_profile, name='user_profile'),
    path('api/user/booking/history', booking.booking_history, name='user_booking_history'),
    # Hospitals
    path('api/hospitals/nearest', hospitals.nearest_hospitals, name='nearest_hospitals'),
    path('api/hospitals/all', hospitals.all_hospitals, name='all_hospitals'),
    # Ambulances
    path('api/ambulances/available', ambulances.available_ambulances, name='available_ambulances'),
    path('api/ambulances/available/all', ambulances.all_available_ambulances, name='all_available_ambulances'),
    # Booking
    path('api/booking/book', booking.book_ambulance, name='book_ambulance'),
    path('api/booking/history', booking.booking_history, name='booking_history'),
    # Admin: bookings
    path('api/admin/bookings/status', admin.booking_status, name='admin_booking_status'),
    path('api/admin/bookings/all', admin.all_bookings, name='admin_all_bookings'),
    path('api/admin/bookings/all/paged', admin.all_bookings_paged, name='admin_all_bookings_paged'),
    # Admin: fleet
    path('api/admin/ambulance/status', admin.ambulance_status, name='admin_ambulance_status'),
    path('api/admin/hospitals/add', admin.add_hospital, name='admin_add_hospital'),
    path('api/admin/hospitals/remove', admin.remove_hospital, name='admin_remove_hospital'),
    path('api/admin/ambulances/all', admin.all_ambulances, name='admin_all_ambulances'),
    path('api/admin/ambulances/add', admin.add_ambulance, name='admin_add_ambulance'),
    path('api/admin/ambulances/remove', admin.remove_ambulance, name='admin_remove_ambulance'),
]
