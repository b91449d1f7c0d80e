from functools import wraps

from .policy import require


def action_required(action):
    """
    Decorator for DRF function views: reject the request with 403 unless the
    authenticated user's role grants `action`.
    Place it below @api_view so it sees the DRF request.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            require(request.user, action)
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator
