# apps/core/middleware.py
import logging
import time

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    """
    Logs one line per API request: method, path, status and duration.
    Non-API paths (admin, static) are left alone.
    """

    API_PREFIX = "/api/"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith(self.API_PREFIX):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        log = logger.warning if response.status_code >= 500 else logger.info
        log(f"{request.method} {request.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
        return response
