"""Batch blueprint: creation, unit generation, lifecycle and sticker printing."""
import logging

from flask import Blueprint, request, jsonify, g, send_file, current_app
from app.blueprints.metrics import units_generated_total
from app.database import get_session
from app.exceptions import BusinessLogicError
from app.middleware import require_login, require_role
from app.models import UserRole
from app.services import batch_service
from app.services.identifier_service import build_activation_url
from app.services.qr_image_service import render_qr_data_url
from app.services.sticker_layout import layout_for_print
from app.services.sticker_pdf_service import render_stickers_pdf
from app.utils.dates import parse_date
from app.utils.pagination import read_page_args
from app.utils.validators import read_body, clean_text

logger = logging.getLogger(__name__)

batches_bp = Blueprint('batches', __name__, url_prefix='/api/batches')

BATCH_OPERATORS = (UserRole.ADMIN.value, UserRole.SHOP_OWNER.value, UserRole.INVENTORY_USER.value)


def _int_or_raw(value):
    """JSON numbers pass through; numeric strings from forms become ints."""
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    return value


def _sticker_grid():
    return current_app.config.get('STICKER_COLUMNS', 5), current_app.config.get('STICKER_ROWS', 5)


def _batch_payload(session, batch):
    data = batch.to_dict(include_product=True)
    data['units_generated'] = batch_service.count_units(session, batch.id)
    return data


@batches_bp.route('', methods=['GET'])
@require_login
def list_batches():
    page, limit = read_page_args()
    batches, pagination = batch_service.list_batches(
        get_session(),
        search=request.args.get('search', '').strip() or None,
        status=request.args.get('status', '').strip() or None,
        product_id=request.args.get('product_id', type=int),
        page=page,
        limit=limit
    )
    return jsonify({
        'status': 'ok',
        'batches': [b.to_dict(include_product=True) for b in batches],
        'pagination': pagination
    })


@batches_bp.route('/<int:batch_id>', methods=['GET'])
@require_login
def get_batch(batch_id):
    session = get_session()
    batch = batch_service.get_batch(session, batch_id)
    return jsonify({'status': 'ok', 'batch': _batch_payload(session, batch)})


@batches_bp.route('', methods=['POST'])
@require_role(*BATCH_OPERATORS)
def create_batch():
    """
    Create a batch and, unless generate_units is false, fill it with units.

    Body: product_id, batch_number, quantity, manufacturing_date (YYYY-MM-DD),
    optional expiry_date and generate_units.
    """
    session = get_session()
    data = read_body()

    product_id = _int_or_raw(data.get('product_id'))
    if not isinstance(product_id, int):
        raise BusinessLogicError('product_id is required')

    batch = batch_service.create_batch(
        session,
        product_id=product_id,
        batch_number=data.get('batch_number'),
        quantity=_int_or_raw(data.get('quantity')),
        manufacturing_date=parse_date(data.get('manufacturing_date'), 'manufacturing_date'),
        expiry_date=parse_date(data.get('expiry_date'), 'expiry_date'),
        created_by=g.user.id,
        max_quantity=current_app.config.get('MAX_BATCH_QUANTITY', 100000)
    )

    if data.get('generate_units', True):
        units = batch_service.generate_batch_units(
            session,
            batch.id,
            base_url=current_app.config['PUBLIC_BASE_URL'],
            max_retries=current_app.config.get('IDENTIFIER_MAX_RETRIES', 5)
        )
        units_generated_total.inc(len(units))

    return jsonify({'status': 'ok', 'batch': _batch_payload(session, batch)}), 201


@batches_bp.route('/<int:batch_id>/units', methods=['POST'])
@require_role(*BATCH_OPERATORS)
def generate_units(batch_id):
    """Generate `count` more units, or fill the batch up when count is omitted."""
    session = get_session()
    data = read_body()
    count = _int_or_raw(data.get('count'))

    units = batch_service.generate_batch_units(
        session,
        batch_id,
        count=count,
        base_url=current_app.config['PUBLIC_BASE_URL'],
        max_retries=current_app.config.get('IDENTIFIER_MAX_RETRIES', 5)
    )
    units_generated_total.inc(len(units))
    batch = batch_service.get_batch(session, batch_id)
    return jsonify({
        'status': 'ok',
        'batch': _batch_payload(session, batch),
        'units': [u.to_dict() for u in units]
    }), 201


@batches_bp.route('/<int:batch_id>/status', methods=['POST'])
@require_role(*BATCH_OPERATORS)
def change_status(batch_id):
    session = get_session()
    data = read_body()
    target = clean_text(data.get('status'), 'status')
    if not target:
        raise BusinessLogicError('status is required')

    batch = batch_service.change_batch_status(session, batch_id, target)
    return jsonify({'status': 'ok', 'batch': _batch_payload(session, batch)})


@batches_bp.route('/<int:batch_id>/reconcile', methods=['GET'])
@require_login
def reconcile(batch_id):
    return jsonify({'status': 'ok', 'reconciliation': batch_service.reconcile_batch(get_session(), batch_id)})


def _sticker_cell(unit, base_url, include_qr=False):
    activation_url = build_activation_url(unit.qr_token, base_url)
    cell = {
        'serial_key': unit.serial_key,
        'qr_token': unit.qr_token,
        'activation_url': activation_url,
        'qr_code_url': unit.qr_code_url,
    }
    if include_qr:
        cell['qr_data_url'] = render_qr_data_url(activation_url, current_app.config.get('QR_IMAGE_SIZE', 200))
    return cell


@batches_bp.route('/<int:batch_id>/layout', methods=['GET'])
@require_login
def sticker_layout(batch_id):
    """
    Print preview: the batch's units arranged on sticker pages.

    ?include_qr=1 adds each sticker's QR code as a PNG data URL.
    """
    session = get_session()
    batch = batch_service.get_batch(session, batch_id)
    columns, rows = _sticker_grid()
    base_url = current_app.config['PUBLIC_BASE_URL']
    include_qr = request.args.get('include_qr', '0').lower() in ('1', 'true', 'yes')

    pages = layout_for_print(batch_service.get_batch_units(session, batch.id), columns, rows)
    for page in pages:
        page['rows'] = [[_sticker_cell(unit, base_url, include_qr) for unit in row] for row in page['rows']]

    return jsonify({
        'status': 'ok',
        'batch_number': batch.batch_number,
        'columns': columns,
        'rows': rows,
        'pages': pages
    })


@batches_bp.route('/<int:batch_id>/pdf', methods=['GET'])
@require_login
def sticker_pdf(batch_id):
    """Download the batch's QR sticker sheets."""
    session = get_session()
    batch = batch_service.get_batch(session, batch_id)
    columns, rows = _sticker_grid()

    pages = layout_for_print(batch_service.get_batch_units(session, batch.id), columns, rows)
    pdf_buffer = render_stickers_pdf(
        pages,
        batch_number=batch.batch_number,
        product_name=batch.product.name if batch.product else None,
        base_url=current_app.config['PUBLIC_BASE_URL'],
        columns=columns,
        rows=rows
    )
    logger.info(f"Sticker PDF for batch {batch.batch_number}: {len(pages)} pages")

    return send_file(
        pdf_buffer,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f"QR_Codes_{batch.batch_number}.pdf"
    )
