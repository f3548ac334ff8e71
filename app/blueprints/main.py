"""Main blueprint: health check for load balancers and uptime probes."""
import logging

from flask import Blueprint, jsonify
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_session
from app.models import ProductBatch, ProductUnit

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Report whether the unit registry is reachable.

    Counts batches and units so a missing or unmigrated schema shows up as
    unhealthy, not only a dead connection.

    Returns:
        200: healthy, with batch and unit counts
        503: the database or the warranty tables cannot be queried
    """
    session = get_session()
    try:
        batches = session.query(func.count(ProductBatch.id)).scalar()
        units = session.query(func.count(ProductUnit.id)).scalar()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'database': 'unavailable',
            'message': 'Unit registry is not reachable'
        }), 503

    return jsonify({
        'status': 'healthy',
        'database': 'connected',
        'batches': batches,
        'units': units
    })
