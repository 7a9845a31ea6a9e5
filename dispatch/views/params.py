from rest_framework.exceptions import ValidationError


def query_params(serializer_class, request) -> dict:
    """Validate ``request.query_params`` with ``serializer_class``."""
    s = serializer_class(data=request.query_params)
    s.is_valid(raise_exception=True)
    return s.validated_data


def target_user_id(request, value=None) -> int:
    """``userId`` from the query string, defaulting to the caller."""
    raw = value if value is not None else request.query_params.get('userId')
    if raw in (None, ''):
        return request.user.id
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({'userId': 'must be an integer'})
