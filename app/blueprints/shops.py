"""Shops blueprint (admin)."""
from flask import Blueprint, request, jsonify
from app.database import get_session
from app.middleware import require_login, require_role
from app.models import UserRole
from app.services import shop_service
from app.utils.pagination import read_page_args
from app.utils.validators import read_body

shops_bp = Blueprint('shops', __name__, url_prefix='/api/shops')


def _shop_payload(session, shop):
    data = shop.to_dict()
    owner = shop_service.get_shop_owner(session, shop.id)
    data['owner'] = owner.to_dict() if owner else None
    return data


@shops_bp.route('', methods=['GET'])
@require_login
def list_shops():
    page, limit = read_page_args()
    shops, pagination = shop_service.list_shops(
        get_session(),
        search=request.args.get('search', '').strip() or None,
        status=request.args.get('status', '').strip() or None,
        page=page,
        limit=limit
    )
    return jsonify({
        'status': 'ok',
        'shops': [s.to_dict() for s in shops],
        'pagination': pagination
    })


@shops_bp.route('', methods=['POST'])
@require_role(UserRole.ADMIN.value)
def create_shop():
    """Create a shop together with its owner account."""
    session = get_session()
    data = read_body()
    shop, _ = shop_service.create_shop_with_owner(session, data)
    return jsonify({'status': 'ok', 'shop': _shop_payload(session, shop)}), 201


@shops_bp.route('/<int:shop_id>', methods=['GET'])
@require_role(UserRole.ADMIN.value)
def get_shop(shop_id):
    session = get_session()
    shop = shop_service.get_shop(session, shop_id)
    return jsonify({'status': 'ok', 'shop': _shop_payload(session, shop)})


@shops_bp.route('/<int:shop_id>', methods=['PUT'])
@require_role(UserRole.ADMIN.value)
def update_shop(shop_id):
    session = get_session()
    data = read_body()
    shop = shop_service.update_shop(session, shop_id, data)
    return jsonify({'status': 'ok', 'shop': _shop_payload(session, shop)})


@shops_bp.route('/<int:shop_id>', methods=['DELETE'])
@require_role(UserRole.ADMIN.value)
def delete_shop(shop_id):
    shop_service.delete_shop(get_session(), shop_id)
    return jsonify({'status': 'ok', 'message': 'Shop deleted'})
