"""Warranty claim handling blueprint."""
from flask import Blueprint, request, jsonify, g
from app.database import get_session
from app.exceptions import BusinessLogicError
from app.middleware import require_role
from app.models import UserRole
from app.services import claim_service
from app.utils.pagination import read_page_args
from app.utils.validators import read_body, clean_text

claims_bp = Blueprint('claims', __name__, url_prefix='/api/claims')

CLAIM_HANDLERS = (UserRole.ADMIN.value, UserRole.SHOP_OWNER.value)


@claims_bp.route('', methods=['GET'])
@require_role(*CLAIM_HANDLERS)
def list_claims():
    page, limit = read_page_args()
    claims, pagination = claim_service.list_claims(
        get_session(),
        status=request.args.get('status', '').strip() or None,
        unit_id=request.args.get('unit_id', type=int),
        page=page,
        limit=limit
    )
    return jsonify({
        'status': 'ok',
        'claims': [c.to_dict() for c in claims],
        'pagination': pagination
    })


@claims_bp.route('/<int:claim_id>', methods=['GET'])
@require_role(*CLAIM_HANDLERS)
def get_claim(claim_id):
    claim = claim_service.get_claim(get_session(), claim_id)
    data = claim.to_dict()
    data['unit'] = claim.unit.to_dict() if claim.unit else None
    return jsonify({'status': 'ok', 'claim': data})


@claims_bp.route('/<int:claim_id>/status', methods=['POST'])
@require_role(*CLAIM_HANDLERS)
def update_status(claim_id):
    data = read_body()
    target = clean_text(data.get('status'), 'status')
    if not target:
        raise BusinessLogicError('status is required')

    claim = claim_service.update_claim_status(
        get_session(),
        claim_id,
        target,
        resolution=data.get('resolution'),
        assigned_to=g.user.id
    )
    return jsonify({'status': 'ok', 'claim': claim.to_dict()})
