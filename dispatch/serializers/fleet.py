import bleach
from django.conf import settings
from rest_framework import serializers

from .fields import OptionalFloatField


class NearestQuerySerializer(serializers.Serializer):
    lat = OptionalFloatField(min_value=-90, max_value=90)
    lng = OptionalFloatField(min_value=-180, max_value=180)
    radiusKm = OptionalFloatField(min_value=0)


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=0, required=False, default=0)
    size = serializers.IntegerField(min_value=1, max_value=settings.PAGE_SIZE_MAX, required=False,
                                    default=settings.PAGE_SIZE_DEFAULT)


class HospitalIdQuerySerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1)


class AmbulanceIdQuerySerializer(serializers.Serializer):
    ambulanceId = serializers.IntegerField(min_value=1)


class HospitalCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=512)
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    contactInfo = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('name may not be blank')
        return v

    def validate_address(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('address may not be blank')
        return v

    def validate_contactInfo(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class HospitalRefSerializer(serializers.Serializer):
    id = serializers.IntegerField(min_value=1)


class AmbulanceCreateSerializer(serializers.Serializer):
    number = serializers.CharField(max_length=32)
    # An ambulance can only become ON_DUTY through a booking.
    status = serializers.ChoiceField(choices=['AVAILABLE', 'MAINTENANCE'], required=False, default='AVAILABLE')
    hospital = HospitalRefSerializer(required=False)
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    driverInfo = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    def validate_number(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('number may not be blank')
        return v

    def validate_driverInfo(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate(self, attrs):
        hospital_id = attrs.get('hospitalId') or (attrs.get('hospital') or {}).get('id')
        if not hospital_id:
            raise serializers.ValidationError({'hospital': 'hospital id is required'})
        attrs['hospital_id'] = hospital_id
        return attrs
