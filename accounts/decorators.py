from functools import wraps
from django.contrib.auth.views import redirect_to_login
from django.http import HttpResponseForbidden


def require_role(*roles):
    """
    Decorator to guard views by user role.
    Anonymous users are sent to login; authenticated users without one of
    the given roles get a 403.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = request.user
            if not user.is_authenticated:
                return redirect_to_login(request.get_full_path())
            if user.role not in roles:
                return HttpResponseForbidden("Not authorized")
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator
