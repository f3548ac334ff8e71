"""
Unit tests for products, shops and authentication services.
"""

import pytest

from app.exceptions import BusinessLogicError, NotFoundError, UnauthorizedError
from app.models import AppUser, Shop, UserRole
from app.services import product_service, shop_service
from app.services.auth_service import authenticate, create_user

PRODUCT_DATA = {
    'name': 'Blender',
    'category': 'Kitchen',
    'brand': 'Mixo',
    'model': 'BX-1',
    'warranty_duration_months': 24,
    'specifications': {'power': '800W'},
}

SHOP_DATA = {
    'shop_name': 'Corner Electronics',
    'owner_name': 'Olivia Owner',
    'owner_email': 'Olivia@Corner.test',
    'owner_password': 'secret123',
    'phone': '555-0199',
    'address': '12 Main St',
    'city': 'Springfield',
    'country': 'US',
}


class TestProductService:

    def test_create_and_get(self, session, admin_user):
        product = product_service.create_product(session, PRODUCT_DATA, created_by=admin_user.id)

        loaded = product_service.get_product(session, product.id)
        assert loaded.name == 'Blender'
        assert loaded.warranty_duration_months == 24
        assert loaded.specifications == {'power': '800W'}
        assert loaded.description == ''

    def test_missing_fields(self, session):
        with pytest.raises(BusinessLogicError) as exc:
            product_service.create_product(session, {'name': 'Only name'})
        assert 'warranty_duration_months' in exc.value.message

    @pytest.mark.parametrize('months', [0, 121, 'ten'])
    def test_warranty_bounds(self, session, months):
        with pytest.raises(BusinessLogicError):
            product_service.create_product(session, dict(PRODUCT_DATA, warranty_duration_months=months))

    def test_specifications_must_be_mapping(self, session):
        with pytest.raises(BusinessLogicError):
            product_service.create_product(session, dict(PRODUCT_DATA, specifications=['a']))

    def test_update(self, session, product):
        updated = product_service.update_product(session, product.id, {'name': ' Smart TV 65" ', 'warranty_duration_months': 36})
        assert updated.name == 'Smart TV 65"'
        assert updated.warranty_duration_months == 36

    def test_update_cannot_blank_required_field(self, session, product):
        with pytest.raises(BusinessLogicError):
            product_service.update_product(session, product.id, {'brand': ''})

    def test_deactivate_hides_from_catalog(self, session, product):
        product_service.deactivate_product(session, product.id)

        items, pagination = product_service.list_products(session)
        assert items == []
        assert pagination['total'] == 0
        with pytest.raises(NotFoundError):
            product_service.get_product(session, product.id)
        assert product_service.get_product(session, product.id, include_inactive=True).active is False

    def test_search(self, session, product):
        product_service.create_product(session, PRODUCT_DATA)

        items, _ = product_service.list_products(session, search='acme')
        assert [p.id for p in items] == [product.id]
        items, _ = product_service.list_products(session, category='Kitchen')
        assert [p.name for p in items] == ['Blender']


class TestShopService:

    def test_create_shop_with_owner(self, session):
        shop, owner = shop_service.create_shop_with_owner(session, SHOP_DATA)

        assert shop.address == '12 Main St, Springfield, US'
        assert shop.email == 'olivia@corner.test'
        assert owner.role == UserRole.SHOP_OWNER.value
        assert owner.shop_id == shop.id
        assert owner.check_password('secret123')
        assert shop_service.get_shop_owner(session, shop.id).id == owner.id

    def test_duplicate_email(self, session):
        shop_service.create_shop_with_owner(session, SHOP_DATA)
        with pytest.raises(BusinessLogicError):
            shop_service.create_shop_with_owner(session, dict(SHOP_DATA, shop_name='Other'))

    def test_validation(self, session):
        with pytest.raises(BusinessLogicError):
            shop_service.create_shop_with_owner(session, dict(SHOP_DATA, owner_password='123'))
        with pytest.raises(BusinessLogicError):
            shop_service.create_shop_with_owner(session, dict(SHOP_DATA, owner_email='not-an-email'))

    def test_numeric_address_parts(self, session):
        shop, _ = shop_service.create_shop_with_owner(session, dict(SHOP_DATA, zip_code=12345, phone=5550199))

        assert shop.address == '12 Main St, Springfield, 12345, US'
        assert shop.phone == '5550199'

    def test_non_text_fields_rejected(self, session):
        with pytest.raises(BusinessLogicError):
            shop_service.create_shop_with_owner(session, dict(SHOP_DATA, city={'name': 'Springfield'}))
        with pytest.raises(BusinessLogicError):
            shop_service.create_shop_with_owner(session, dict(SHOP_DATA, owner_password=12345678))

    def test_update_status(self, session, shop):
        updated = shop_service.update_shop(session, shop.id, {'status': 'inactive', 'phone': '555-9999'})
        assert updated.status == 'inactive'
        assert updated.phone == '555-9999'

        with pytest.raises(BusinessLogicError):
            shop_service.update_shop(session, shop.id, {'status': 'closed-forever'})

    def test_delete_removes_accounts(self, session, shop, shop_owner):
        shop_service.delete_shop(session, shop.id)

        assert session.get(Shop, shop.id) is None
        assert session.query(AppUser).filter_by(id=shop_owner.id).first() is None


class TestAuthService:

    def test_authenticate(self, session, admin_user):
        assert authenticate(session, admin_user.email.upper(), 'password123').id == admin_user.id

    def test_wrong_password(self, session, admin_user):
        with pytest.raises(UnauthorizedError) as exc:
            authenticate(session, admin_user.email, 'nope')
        assert exc.value.status_code == 401

    def test_inactive_user(self, session, admin_user):
        admin_user.active = False
        session.commit()
        with pytest.raises(UnauthorizedError):
            authenticate(session, admin_user.email, 'password123')

    def test_create_user_roles(self, session, shop):
        user = create_user(session, 'staff@shop.test', 'password123', 'Staff', role='inventory_user', shop_id=shop.id)
        assert user.role == 'inventory_user'

        with pytest.raises(BusinessLogicError):
            create_user(session, 'orphan@shop.test', 'password123', 'Orphan', role='inventory_user')
        with pytest.raises(BusinessLogicError):
            create_user(session, 'who@shop.test', 'password123', 'Who', role='superuser')

    def test_create_user_duplicate(self, session, admin_user):
        with pytest.raises(BusinessLogicError):
            create_user(session, admin_user.email, 'password123', 'Again', role='admin')
