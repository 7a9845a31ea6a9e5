from django.http import JsonResponse


class JsonNotFoundMiddleware:
    """Render unmatched ``/api/*`` paths with the API error envelope.

    Django's URL resolver answers unknown paths with an HTML 404 page;
    API clients expect the same ``{ok, error: {code, message}}`` body
    every other failure uses.
    """
    API_PREFIX = '/api/'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        path = request.path or ''
        if (
            response.status_code == 404
            and path.startswith(self.API_PREFIX)
            and not response.get('Content-Type', '').startswith('application/json')
        ):
            return JsonResponse(
                {'ok': False, 'error': {'code': 'not_found', 'message': f'No endpoint at {path}'}},
                status=404,
            )
        return response
