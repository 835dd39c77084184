"""Core middleware."""
import logging
import threading

logger = logging.getLogger("internhub")

_thread_locals = threading.local()


def get_current_user():
    return getattr(_thread_locals, "user", None)


def get_current_ip():
    return getattr(_thread_locals, "ip", None)


def _client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.META.get("REMOTE_ADDR") or None


class AuditLogMiddleware:
    """Keep the authenticated user and client address in thread-local for audit logging."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        user = getattr(request, "user", None)
        _thread_locals.user = user if user is not None and user.is_authenticated else None
        _thread_locals.ip = _client_ip(request)
        try:
            return self.get_response(request)
        finally:
            _thread_locals.user = None
            _thread_locals.ip = None
