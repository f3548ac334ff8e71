"""
Unit tests for SQLAlchemy models.
"""

import pytest
import uuid
from datetime import date
from sqlalchemy.exc import IntegrityError

from app.models import (
    AppUser, Shop, Product, ProductBatch, ProductUnit, WarrantyClaim,
    UserRole
)


class TestAppUserModel:
    """Tests for AppUser model."""

    def test_create_user(self, session):
        """Test creating a user."""
        suffix = str(uuid.uuid4())[:8]
        email = f'test_{suffix}@example.com'
        user = AppUser(
            email=email,
            full_name='Test User',
            role=UserRole.ADMIN.value,
            active=True
        )
        user.set_password('securepassword')
        session.add(user)
        session.commit()

        assert user.id is not None
        assert user.email == email
        assert user.password_hash != 'securepassword'

    def test_password_check(self, admin_user):
        assert admin_user.check_password('password123')
        assert not admin_user.check_password('wrong')

    def test_has_role(self, shop_owner):
        assert shop_owner.has_role('shop_owner', 'admin')
        assert not shop_owner.has_role('admin')

    def test_email_unique(self, session, admin_user):
        duplicate = AppUser(email=admin_user.email, full_name='Dup', role='admin')
        duplicate.set_password('password123')
        session.add(duplicate)

        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_to_dict_hides_password(self, admin_user):
        data = admin_user.to_dict()
        assert data['email'] == admin_user.email
        assert data['role'] == 'admin'
        assert 'password_hash' not in data


class TestShopModel:

    def test_shop_owner_relationship(self, session, shop, shop_owner):
        loaded = session.get(Shop, shop.id)
        assert [u.id for u in loaded.users] == [shop_owner.id]
        assert loaded.to_dict()['name'] == shop.name


class TestProductUnitModel:

    def test_serial_key_unique(self, session, units):
        clone = ProductUnit(
            product_id=units[0].product_id,
            batch_id=units[0].batch_id,
            serial_key=units[0].serial_key,
            qr_token='t' * 32,
            qr_code_url='https://warranty.test/api/units/x/qr.png',
        )
        session.add(clone)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_qr_token_unique(self, session, units):
        clone = ProductUnit(
            product_id=units[0].product_id,
            batch_id=units[0].batch_id,
            serial_key='ZZZZZZZZZZZZ',
            qr_token=units[0].qr_token,
            qr_code_url='https://warranty.test/api/units/x/qr.png',
        )
        session.add(clone)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_to_dict(self, units):
        data = units[0].to_dict()
        assert data['serial_key'] == units[0].serial_key
        assert data['status'] == 'printed'
        assert data['activated_at'] is None
        assert units[0].is_activated is False


class TestProductBatchModel:

    def test_quantity_must_be_positive(self, session, product):
        batch = ProductBatch(
            product_id=product.id,
            batch_number='LOT-ZERO',
            quantity=0,
            manufacturing_date=date(2024, 1, 1)
        )
        session.add(batch)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_to_dict_with_product(self, session, batch):
        data = session.get(ProductBatch, batch.id).to_dict(include_product=True)
        assert data['status'] == 'created'
        assert data['manufacturing_date'] == '2024-01-01'
        assert data['product']['name'] == 'Smart TV 55"'


class TestWarrantyClaimModel:

    def test_claim_defaults(self, session, units):
        claim = WarrantyClaim(
            product_unit_id=units[0].id,
            claim_type='repair',
            description='Screen flickers',
            customer_name='Alice',
            customer_email='alice@example.com',
            customer_phone='555'
        )
        session.add(claim)
        session.commit()

        assert claim.status == 'pending'
        assert claim.to_dict()['images'] == []


def test_product_to_dict(product):
    data = product.to_dict()
    assert data['warranty_duration_months'] == 12
    assert data['specifications'] == {'screen': '55 inch'}
    assert isinstance(product, Product)
