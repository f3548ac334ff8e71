"""
Unit tests for the batch lifecycle service.
"""

from datetime import date

import pytest

from app.exceptions import (
    BusinessLogicError, NotFoundError, InvalidQuantityError,
    InvalidTransitionError, DuplicateIdentifierError
)
from app.models import ProductBatch, ProductUnit, BatchStatus, UnitStatus
from app.services import batch_service, unit_factory
from app.services.batch_service import (
    can_transition, transition_batch, create_batch, generate_batch_units,
    change_batch_status, reconcile_batch, count_units, list_units
)

TEST_BASE_URL = 'https://warranty.test'


class TestTransitions:
    """Pure state machine checks."""

    @pytest.mark.parametrize('current,target', [
        ('created', 'printed'),
        ('printed', 'distributed'),
        ('printed', 'activated'),
        ('distributed', 'activated'),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)
        batch = ProductBatch(status=current)
        transition_batch(batch, target)
        assert batch.status == target

    @pytest.mark.parametrize('current,target', [
        ('created', 'distributed'),
        ('created', 'activated'),
        ('printed', 'created'),
        ('distributed', 'printed'),
        ('activated', 'distributed'),
        ('printed', 'printed'),
        ('created', 'unknown'),
    ])
    def test_rejected(self, current, target):
        batch = ProductBatch(status=current)
        with pytest.raises(InvalidTransitionError) as exc:
            transition_batch(batch, target)
        assert batch.status == current
        assert exc.value.status_code == 409

    def test_accepts_enum(self):
        batch = ProductBatch(status='created')
        transition_batch(batch, BatchStatus.PRINTED)
        assert batch.status == 'printed'


class TestCreateBatch:

    def test_create_batch(self, session, product):
        batch = create_batch(session, product.id, ' LOT-1 ', 10, date(2024, 5, 1))

        assert batch.id is not None
        assert batch.batch_number == 'LOT-1'
        assert batch.status == BatchStatus.CREATED.value
        assert count_units(session, batch.id) == 0

    def test_duplicate_batch_number(self, session, product, batch):
        with pytest.raises(BusinessLogicError):
            create_batch(session, product.id, batch.batch_number, 5, date(2024, 5, 1))

    def test_unknown_product(self, session):
        with pytest.raises(NotFoundError):
            create_batch(session, 999999, 'LOT-X', 5, date(2024, 5, 1))

    @pytest.mark.parametrize('quantity', [0, -3, '5', None])
    def test_invalid_quantity(self, session, product, quantity):
        with pytest.raises(InvalidQuantityError):
            create_batch(session, product.id, 'LOT-Q', quantity, date(2024, 5, 1))

    def test_quantity_limit(self, session, product):
        with pytest.raises(InvalidQuantityError):
            create_batch(session, product.id, 'LOT-BIG', 11, date(2024, 5, 1), max_quantity=10)

    def test_expiry_before_manufacturing(self, session, product):
        with pytest.raises(BusinessLogicError):
            create_batch(session, product.id, 'LOT-E', 5, date(2024, 5, 1), expiry_date=date(2024, 4, 1))


class TestGenerateUnits:

    def test_fill_batch_moves_it_to_printed(self, session, batch):
        units = generate_batch_units(session, batch.id, base_url=TEST_BASE_URL)

        assert len(units) == 3
        assert batch.status == BatchStatus.PRINTED.value
        stored = session.query(ProductUnit).filter_by(batch_id=batch.id).all()
        assert len(stored) == 3
        assert {u.status for u in stored} == {UnitStatus.PRINTED.value}
        assert all(u.qr_code_url.startswith(TEST_BASE_URL) for u in stored)

    def test_partial_generation_keeps_batch_created(self, session, batch):
        units = generate_batch_units(session, batch.id, count=2, base_url=TEST_BASE_URL)

        assert len(units) == 2
        assert batch.status == BatchStatus.CREATED.value
        assert {u.status for u in units} == {UnitStatus.CREATED.value}

        generate_batch_units(session, batch.id, count=1, base_url=TEST_BASE_URL)
        assert batch.status == BatchStatus.PRINTED.value
        assert session.query(ProductUnit).filter_by(
            batch_id=batch.id, status=UnitStatus.CREATED.value
        ).count() == 0

    def test_never_exceeds_declared_quantity(self, session, batch):
        generate_batch_units(session, batch.id, count=2, base_url=TEST_BASE_URL)

        with pytest.raises(InvalidQuantityError):
            generate_batch_units(session, batch.id, count=2, base_url=TEST_BASE_URL)
        assert count_units(session, batch.id) == 2

    def test_full_batch_rejects_more_units(self, session, batch, units):
        with pytest.raises(BusinessLogicError):
            generate_batch_units(session, batch.id, base_url=TEST_BASE_URL)
        assert count_units(session, batch.id) == 3

    def test_collision_is_retried(self, session, batch, monkeypatch):
        first = generate_batch_units(session, batch.id, count=1, base_url=TEST_BASE_URL)[0]
        taken = first.serial_key

        keys = iter([taken, taken, 'FRESHKEY0001'])
        monkeypatch.setattr(unit_factory, 'generate_serial_key', lambda: next(keys))

        units = generate_batch_units(session, batch.id, count=1, base_url=TEST_BASE_URL)

        assert units[0].serial_key == 'FRESHKEY0001'
        assert count_units(session, batch.id) == 2

    def test_collision_retries_exhausted(self, session, batch, monkeypatch):
        taken = generate_batch_units(session, batch.id, count=1, base_url=TEST_BASE_URL)[0].serial_key
        monkeypatch.setattr(unit_factory, 'generate_serial_key', lambda: taken)

        with pytest.raises(DuplicateIdentifierError):
            generate_batch_units(session, batch.id, count=1, base_url=TEST_BASE_URL, max_retries=3)

        report = reconcile_batch(session, batch.id)
        assert report['realized'] == 1
        assert report['missing'] == 2

    def test_generation_closed_after_distribution(self, session, product):
        batch = create_batch(session, product.id, 'LOT-D', 2, date(2024, 5, 1))
        generate_batch_units(session, batch.id, base_url=TEST_BASE_URL)
        change_batch_status(session, batch.id, 'distributed')

        with pytest.raises(BusinessLogicError):
            generate_batch_units(session, batch.id, count=1, base_url=TEST_BASE_URL)


class TestChangeStatus:

    def test_print_requires_all_units(self, session, batch):
        generate_batch_units(session, batch.id, count=1, base_url=TEST_BASE_URL)

        with pytest.raises(BusinessLogicError):
            change_batch_status(session, batch.id, 'printed')
        assert batch_service.get_batch(session, batch.id).status == 'created'

    def test_distribute_cascades_to_units(self, session, batch, units):
        change_batch_status(session, batch.id, 'distributed')

        statuses = {s for (s,) in session.query(ProductUnit.status).filter_by(batch_id=batch.id)}
        assert statuses == {UnitStatus.DISTRIBUTED.value}

    def test_created_to_distributed_rejected(self, session, batch):
        with pytest.raises(InvalidTransitionError):
            change_batch_status(session, batch.id, 'distributed')

    def test_unknown_batch(self, session):
        with pytest.raises(NotFoundError):
            change_batch_status(session, 424242, 'printed')


class TestQueries:

    def test_reconcile(self, session, batch, units):
        report = reconcile_batch(session, batch.id)

        assert report['declared'] == 3
        assert report['realized'] == 3
        assert report['missing'] == 0
        assert report['units_by_status']['printed'] == 3
        assert report['units_by_status']['activated'] == 0

    def test_list_units_filters(self, session, batch, units):
        items, pagination = list_units(session, batch_id=batch.id, page=1, limit=2)
        assert len(items) == 2
        assert pagination['total'] == 3
        assert pagination['pages'] == 2

        items, _ = list_units(session, search=units[0].serial_key[:12])
        assert [u.id for u in items] == [units[0].id]

        items, pagination = list_units(session, status='activated')
        assert items == []
        assert pagination['total'] == 0

    def test_units_are_in_print_order(self, session, batch, units):
        assert [u.id for u in units] == sorted(u.id for u in units)
        assert all(isinstance(u, ProductUnit) for u in units)

