"""Dashboard analytics blueprint."""
from flask import Blueprint, jsonify, current_app
from app.database import get_session
from app.middleware import require_login
from app.services.analytics_service import get_analytics

analytics_bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')


@analytics_bp.route('', methods=['GET'])
@require_login
def dashboard():
    stats = get_analytics(get_session(), expiring_days=current_app.config.get('WARRANTY_EXPIRING_DAYS', 30))
    stats['recent_activations'] = [
        {
            'serial_key': unit.serial_key,
            'product_name': unit.product.name if unit.product else None,
            'customer_name': unit.customer_name,
            'activated_at': unit.activated_at.isoformat() if unit.activated_at else None,
        }
        for unit in stats['recent_activations']
    ]
    return jsonify({'status': 'ok', 'analytics': stats})
