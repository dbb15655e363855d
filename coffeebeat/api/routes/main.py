from flask import Blueprint, jsonify
from coffeebeat.services.session_service import SessionService
from coffeebeat.utils.decorators import login_required

main_bp = Blueprint('main', __name__)

@main_bp.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok", "app": "CoffeeBeat"})

@main_bp.route('/dashboard', methods=['GET'])
@login_required
def dashboard(current_user):
    return jsonify({'redirect': SessionService.dashboard_path(current_user)})
