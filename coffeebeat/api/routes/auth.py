from flask import Blueprint, request, jsonify, current_app
import jwt
from coffeebeat.errors import AuthenticationError
from coffeebeat.services.api_client import BackendClient
from coffeebeat.services.session_service import SessionService
from coffeebeat.utils.decorators import login_required

auth_bp = Blueprint('auth', __name__)

def _session_payload(user):
    role = SessionService.role(user)
    return {
        'user': user,
        'role': role.value if role else None,
        'dashboard': SessionService.dashboard_path(user)
    }

@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json() or {}
    if not data.get('email') or not data.get('password'):
        return jsonify({'message': 'Email and password are required'}), 400

    client = BackendClient.from_config(current_app.config)
    response = client.login(data['email'], data['password'])

    try:
        user = SessionService.start(response or {})
    except (ValueError, jwt.PyJWTError) as e:
        current_app.logger.error(f"Unusable login response: {e}")
        raise AuthenticationError("Login failed. Please try again.")

    return jsonify(_session_payload(user))

@auth_bp.route('/logout', methods=['POST'])
def logout():
    SessionService.clear()
    return jsonify({'message': 'Logged out'})

@auth_bp.route('/me', methods=['GET'])
@login_required
def me(current_user):
    return jsonify(_session_payload(current_user))
