"""Product catalog blueprint."""
from flask import Blueprint, request, jsonify, g
from app.database import get_session
from app.middleware import require_role
from app.models import UserRole
from app.services import product_service
from app.utils.pagination import read_page_args
from app.utils.validators import read_body

products_bp = Blueprint('products', __name__, url_prefix='/api/products')

CATALOG_EDITORS = (UserRole.ADMIN.value, UserRole.SHOP_OWNER.value)


@products_bp.route('', methods=['GET'])
def list_products():
    """Public catalog listing with ?search=&category=&page=&limit=."""
    page, limit = read_page_args()
    products, pagination = product_service.list_products(
        get_session(),
        search=request.args.get('search', '').strip() or None,
        category=request.args.get('category', '').strip() or None,
        page=page,
        limit=limit
    )
    return jsonify({
        'status': 'ok',
        'products': [p.to_dict() for p in products],
        'pagination': pagination
    })


@products_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id):
    product = product_service.get_product(get_session(), product_id)
    return jsonify({'status': 'ok', 'product': product.to_dict()})


@products_bp.route('', methods=['POST'])
@require_role(*CATALOG_EDITORS)
def create_product():
    data = read_body()
    product = product_service.create_product(get_session(), data, created_by=g.user.id)
    return jsonify({'status': 'ok', 'product': product.to_dict()}), 201


@products_bp.route('/<int:product_id>', methods=['PUT'])
@require_role(*CATALOG_EDITORS)
def update_product(product_id):
    data = read_body()
    product = product_service.update_product(get_session(), product_id, data)
    return jsonify({'status': 'ok', 'product': product.to_dict()})


@products_bp.route('/<int:product_id>', methods=['DELETE'])
@require_role(*CATALOG_EDITORS)
def delete_product(product_id):
    product_service.deactivate_product(get_session(), product_id)
    return jsonify({'status': 'ok', 'message': 'Product deactivated'})
