"""
Unit endpoints.

units_bp serves the back office listing and the QR images; public_bp is the
page a customer lands on after scanning a sticker. The QR token in the URL is
the only credential on the public side.
"""
from flask import Blueprint, request, jsonify, current_app, Response
from app.blueprints.metrics import activations_total
from app.database import get_session
from app.exceptions import BusinessLogicError, AlreadyActivatedError
from app.middleware import require_login
from app.services import batch_service
from app.services.activation_service import get_unit_by_token, activate_unit, warranty_status
from app.services.claim_service import file_claim
from app.services.identifier_service import build_activation_url
from app.services.qr_image_service import render_qr_png
from app.utils.pagination import read_page_args
from app.utils.validators import read_body

units_bp = Blueprint('units', __name__, url_prefix='/api/units')
public_bp = Blueprint('public', __name__, url_prefix='/product')


def _public_unit(unit):
    """Unit fields safe to show to whoever holds the sticker."""
    return {
        'serial_key': unit.serial_key,
        'status': unit.status,
        'activated_at': unit.activated_at.isoformat() if unit.activated_at else None,
        'warranty_expires_at': unit.warranty_expires_at.isoformat() if unit.warranty_expires_at else None,
    }


@units_bp.route('', methods=['GET'])
@require_login
def list_units():
    page, limit = read_page_args()
    units, pagination = batch_service.list_units(
        get_session(),
        batch_id=request.args.get('batch_id', type=int),
        status=request.args.get('status', '').strip() or None,
        search=request.args.get('search', '').strip() or None,
        page=page,
        limit=limit
    )
    return jsonify({
        'status': 'ok',
        'units': [u.to_dict() for u in units],
        'pagination': pagination
    })


@units_bp.route('/<qr_token>/qr.png', methods=['GET'])
def qr_image(qr_token):
    """PNG of the unit's activation QR code."""
    unit = get_unit_by_token(get_session(), qr_token)
    png = render_qr_png(
        build_activation_url(unit.qr_token, current_app.config['PUBLIC_BASE_URL']),
        size=current_app.config.get('QR_IMAGE_SIZE', 200)
    )
    response = Response(png, mimetype='image/png')
    response.headers['Cache-Control'] = 'public, max-age=86400'
    return response


@public_bp.route('/<qr_token>', methods=['GET'])
def product_page(qr_token):
    """Product and warranty state behind a scanned code."""
    unit = get_unit_by_token(get_session(), qr_token)
    return jsonify({
        'status': 'ok',
        'unit': _public_unit(unit),
        'product': unit.product.to_dict() if unit.product else None,
        'warranty': warranty_status(unit)
    })


@public_bp.route('/<qr_token>/activate', methods=['POST'])
def activate(qr_token):
    """
    Activate the warranty.

    Body: name, email, optional phone and shop_id.
    """
    data = read_body(allow_form=True)
    shop_id = data.get('shop_id')
    if shop_id is not None and not isinstance(shop_id, int):
        try:
            shop_id = int(shop_id)
        except (TypeError, ValueError):
            raise BusinessLogicError('shop_id must be a number')

    try:
        unit = activate_unit(get_session(), qr_token, {
            'name': data.get('name'),
            'email': data.get('email'),
            'phone': data.get('phone'),
            'shop_id': shop_id,
        })
    except AlreadyActivatedError:
        activations_total.labels(result='already_activated').inc()
        raise
    activations_total.labels(result='activated').inc()
    return jsonify({
        'status': 'ok',
        'message': 'Warranty activated',
        'unit': _public_unit(unit),
        'warranty': warranty_status(unit)
    })


@public_bp.route('/<qr_token>/claims', methods=['POST'])
def create_claim(qr_token):
    """File a warranty claim for an activated unit."""
    data = read_body()
    images = data.get('images') or []
    if not isinstance(images, list):
        raise BusinessLogicError('images must be a list of URLs')

    claim = file_claim(
        get_session(),
        qr_token,
        claim_type=data.get('claim_type'),
        description=data.get('description'),
        customer={
            'name': data.get('name'),
            'email': data.get('email'),
            'phone': data.get('phone'),
        },
        images=images
    )
    return jsonify({'status': 'ok', 'claim': claim.to_dict()}), 201
