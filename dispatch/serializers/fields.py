from rest_framework import serializers


class OptionalFloatField(serializers.FloatField):
    """Float that treats an empty string like a missing value.

    HTML number inputs submit ``''`` when left empty.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data == '':
            data = None
        return super().validate_empty_values(data)
