"""
Django admin registrations for the dispatch models.

Bookings and transitions are read-mostly here: status changes should go
through the API so ambulances are released consistently.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Ambulance, AuditEvent, Booking, BookingTransition, Hospital, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('id', 'email', 'role', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'username')
    ordering = ('id',)
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Dispatch', {'fields': ('role', 'latitude', 'longitude')}),
    )


class AmbulanceInline(admin.TabularInline):
    model = Ambulance
    extra = 0
    fields = ('number', 'status', 'driver_info')
    readonly_fields = ('status',)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'address', 'latitude', 'longitude', 'contact_info')
    search_fields = ('name', 'address')
    inlines = [AmbulanceInline]


@admin.register(Ambulance)
class AmbulanceAdmin(admin.ModelAdmin):
    list_display = ('id', 'number', 'hospital', 'status', 'version', 'updated_at')
    list_filter = ('status', 'hospital')
    search_fields = ('number', 'driver_info')
    readonly_fields = ('status', 'version')


class BookingTransitionInline(admin.TabularInline):
    model = BookingTransition
    extra = 0
    can_delete = False
    readonly_fields = ('from_status', 'to_status', 'operator', 'timestamp', 'reason')


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'hospital_name', 'ambulance_number', 'booking_type', 'status', 'booking_time')
    list_filter = ('status', 'booking_type')
    search_fields = ('patient_name', 'hospital_name', 'ambulance_number', 'user__email')
    readonly_fields = ('status', 'booking_time', 'closed_at', 'idempotency_key')
    inlines = [BookingTransitionInline]


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
