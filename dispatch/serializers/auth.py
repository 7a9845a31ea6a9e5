from rest_framework import serializers

from .fields import OptionalFloatField


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        account = (attrs.get('username') or attrs.get('email') or '').strip()
        if not account:
            raise serializers.ValidationError({'username': 'username or email is required'})
        attrs['account'] = account
        return attrs


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    lat = OptionalFloatField(min_value=-90, max_value=90)
    lng = OptionalFloatField(min_value=-180, max_value=180)
    latitude = OptionalFloatField(min_value=-90, max_value=90)
    longitude = OptionalFloatField(min_value=-180, max_value=180)

    def validate(self, attrs):
        lat = attrs.get('latitude') if attrs.get('latitude') is not None else attrs.get('lat')
        lng = attrs.get('longitude') if attrs.get('longitude') is not None else attrs.get('lng')
        if (lat is None) != (lng is None):
            raise serializers.ValidationError('latitude and longitude must be given together')
        return {'email': attrs['email'].lower(), 'password': attrs['password'], 'latitude': lat, 'longitude': lng}


class ProfileUpdateSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1, required=False)
    email = serializers.EmailField(max_length=254, required=False)
    latitude = OptionalFloatField(min_value=-90, max_value=90)
    longitude = OptionalFloatField(min_value=-180, max_value=180)
    password = serializers.CharField(required=False, allow_blank=True, write_only=True, trim_whitespace=False)


class UserQuerySerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1, required=False)
