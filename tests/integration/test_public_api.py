"""
Integration tests for the public scan / activation / claim endpoints.
"""

from app.models import ProductUnit

CUSTOMER = {'name': 'Carla Customer', 'email': 'carla@example.com', 'phone': '555-4321'}


class TestProductPage:

    def test_unactivated_unit(self, client, units):
        token = units[0].qr_token
        serial = units[0].serial_key

        response = client.get(f'/product/{token}')

        assert response.status_code == 200
        assert response.json['unit']['serial_key'] == serial
        assert response.json['product']['name'] == 'Smart TV 55"'
        assert response.json['warranty']['state'] == 'not_activated'
        assert 'customer_email' not in response.json['unit']

    def test_unknown_token(self, client, session):
        response = client.get('/product/doesnotexist')

        assert response.status_code == 404
        assert response.json['message'] == 'Product not found'


class TestActivation:

    def test_activate_once(self, client, units, session):
        token = units[0].qr_token

        response = client.post(f'/product/{token}/activate', json=CUSTOMER)
        assert response.status_code == 200
        assert response.json['unit']['status'] == 'activated'
        assert response.json['warranty']['state'] == 'active'
        assert response.json['warranty']['days_remaining'] > 360

        again = client.post(f'/product/{token}/activate', json={'name': 'Eve', 'email': 'eve@example.com'})
        assert again.status_code == 409

        stored = session.query(ProductUnit).filter_by(qr_token=token).one()
        assert stored.customer_name == 'Carla Customer'

        page = client.get(f'/product/{token}')
        assert page.json['warranty']['active'] is True

    def test_activate_with_form_and_shop(self, client, shop, units, session):
        token, shop_id = units[0].qr_token, shop.id

        response = client.post(f'/product/{token}/activate', data=dict(CUSTOMER, shop_id=str(shop_id)))

        assert response.status_code == 200
        assert session.query(ProductUnit.shop_id).filter_by(qr_token=token).scalar() == shop_id

    def test_activate_invalid_input(self, client, units):
        token = units[0].qr_token

        assert client.post(f'/product/{token}/activate', json={'name': 'No Email'}).status_code == 400
        assert client.post(f'/product/{token}/activate', json=dict(CUSTOMER, shop_id='abc')).status_code == 400

    def test_activate_body_must_be_object(self, client, units):
        response = client.post(f'/product/{units[0].qr_token}/activate', json=['x'])

        assert response.status_code == 400
        assert response.json['status'] == 'error'

    def test_activate_numeric_name(self, client, units, session):
        token = units[0].qr_token

        response = client.post(f'/product/{token}/activate', json=dict(CUSTOMER, name=12345))

        assert response.status_code == 200
        assert session.query(ProductUnit.customer_name).filter_by(qr_token=token).scalar() == '12345'

    def test_activate_unknown_token(self, client, session):
        assert client.post('/product/nope/activate', json=CUSTOMER).status_code == 404


class TestQrImage:

    def test_png(self, client, units):
        response = client.get(f'/api/units/{units[0].qr_token}/qr.png')

        assert response.status_code == 200
        assert response.mimetype == 'image/png'
        assert response.data.startswith(b'\x89PNG')

    def test_qr_code_url_resolves(self, app, client, units):
        path = units[0].qr_code_url.replace(app.config['PUBLIC_BASE_URL'], '')
        assert client.get(path).status_code == 200

    def test_unknown_token(self, client, session):
        assert client.get('/api/units/nope/qr.png').status_code == 404


class TestPublicClaims:

    def test_claim_after_activation(self, client, units):
        token = units[0].qr_token
        client.post(f'/product/{token}/activate', json=CUSTOMER)

        response = client.post(f'/product/{token}/claims', json=dict(
            CUSTOMER, claim_type='repair', description='No picture', images=['https://img.test/a.jpg']
        ))

        assert response.status_code == 201
        assert response.json['claim']['status'] == 'pending'
        assert client.get(f'/product/{token}').json['unit']['status'] == 'claimed'

    def test_claim_before_activation(self, client, units):
        response = client.post(f'/product/{units[0].qr_token}/claims', json=dict(
            CUSTOMER, claim_type='repair', description='No picture'
        ))
        assert response.status_code == 400

    def test_claim_images_must_be_list(self, client, units):
        token = units[0].qr_token
        client.post(f'/product/{token}/activate', json=CUSTOMER)

        response = client.post(f'/product/{token}/claims', json=dict(
            CUSTOMER, claim_type='repair', description='No picture', images='a.jpg'
        ))
        assert response.status_code == 400
