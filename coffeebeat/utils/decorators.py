from functools import wraps
from flask import jsonify
from coffeebeat.services.session_service import SessionService
from coffeebeat.utils.roles import parse_role

def login_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        current_user = SessionService.load()
        if not current_user:
            return jsonify({'message': 'Login required', 'redirect': '/login'}), 401
        return f(current_user, *args, **kwargs)

    return decorated

def role_required(*roles):
    """
    Restrict a view to the given roles. Stack under @login_required:

        @login_required
        @role_required(Role.WAITER, Role.ADMIN)
        def view(current_user): ...
    """
    allowed = {parse_role(r) for r in roles}

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            current_user = args[0] # passed by login_required
            if SessionService.role(current_user) not in allowed:
                return jsonify({
                    'message': 'Access denied',
                    'redirect': SessionService.dashboard_path(current_user)
                }), 403
            return f(*args, **kwargs)
        return decorated

    return decorator
