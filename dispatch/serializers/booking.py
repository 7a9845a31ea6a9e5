import bleach
from rest_framework import serializers

BOOKING_TYPES = ('NORMAL', 'EMERGENCY')


def _clean_text(value: str) -> str:
    value = bleach.clean((value or '').strip(), strip=True)
    if not value:
        raise serializers.ValidationError('This field may not be blank.')
    return value


class PatientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128)
    age = serializers.IntegerField(min_value=0, max_value=150)
    gender = serializers.CharField(max_length=32)
    condition = serializers.CharField(max_length=512)

    def validate_name(self, v):
        return _clean_text(v)

    def validate_gender(self, v):
        return _clean_text(v)

    def validate_condition(self, v):
        return _clean_text(v)


class BookingRequestSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1)
    ambulanceId = serializers.IntegerField(min_value=1)
    bookingType = serializers.CharField(max_length=16, required=False, default='NORMAL')
    patient = PatientSerializer()

    def validate_bookingType(self, v):
        v = v.strip().upper()
        if v not in BOOKING_TYPES:
            raise serializers.ValidationError(f'must be one of {", ".join(BOOKING_TYPES)}')
        return v


class BookingStatusQuerySerializer(serializers.Serializer):
    bookingId = serializers.IntegerField(min_value=1)
    status = serializers.CharField(max_length=16)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class AmbulanceStatusQuerySerializer(serializers.Serializer):
    ambulanceId = serializers.IntegerField(min_value=1)
    status = serializers.CharField(max_length=16)
