import pytest

from app_shop.main import create_app

from conftest import set_failing


@pytest.fixture
def client(facade):
    app = create_app(facade)
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c


def test_list_and_search_customers(client):
    r = client.get('/api/customers')
    assert r.status_code == 200
    assert r.json['count'] == 2

    r = client.get('/api/customers?q=SILVA')
    assert [c['name'] for c in r.json['items']] == ['João Silva']


def test_get_unknown_entity_is_404(client):
    r = client.get('/api/products/999')
    assert r.status_code == 404
    assert r.json['success'] is False


def test_unknown_collection_is_404(client):
    assert client.get('/api/suppliers').status_code == 404


def test_create_update_delete_product(client):
    r = client.post('/api/products', json={'name': 'Câmera iPhone 12', 'price': 250, 'stock': 3})
    assert r.status_code == 201
    product_id = r.json['item']['id']

    r = client.patch(f'/api/products/{product_id}', json={'stock': 2})
    assert r.status_code == 200
    assert r.json['item']['stock'] == 2
    assert r.json['item']['price'] == 250

    assert client.delete(f'/api/products/{product_id}').status_code == 200
    assert client.get(f'/api/products/{product_id}').status_code == 404
    assert client.delete(f'/api/products/{product_id}').status_code == 404


def test_validation_errors_are_400(client):
    r = client.post('/api/customers', json={'phone': '11999'})
    assert r.status_code == 400
    assert r.json['field'] == 'name'

    r = client.post('/api/customers', data='no es json', content_type='text/plain')
    assert r.status_code == 400


def test_receipt_before_minimum_date_is_rejected(client):
    r = client.post('/api/receipts', json={
        'customer_id': '1', 'employee_id': '1', 'payment_method': 'Cash',
        'items': [{'product_id': '1', 'quantity': 1}],
        'created_at': '2023-12-31T10:00:00Z',
    })
    assert r.status_code == 400
    assert r.json['field'] == 'created_at'


def test_create_and_read_receipt(client):
    r = client.post('/api/receipts', json={
        'customer_id': '1', 'employee_id': '2', 'payment_method': 'Cartão de Débito',
        'items': [{'product_id': '2', 'quantity': 2}], 'warranty_months': 6,
    })
    assert r.status_code == 201
    receipt_id = r.json['item']['id']
    assert r.json['item']['total'] == 360

    r = client.get(f'/api/receipts/{receipt_id}')
    item = r.json['item']
    assert item['customer_name'] == 'João Silva'
    assert item['employee_name'] == 'Ana Lima'
    assert item['payment_method'] == 'Debit Card'
    assert item['lines'][0]['product_name'] == 'Bateria iPhone 11'


def test_receipts_cannot_be_updated(client):
    assert client.patch('/api/receipts/1', json={'notes': 'x'}).status_code == 405


def test_report_endpoint(client):
    r = client.get('/api/reports?start=2024-06-01&end=2024-06-30')
    assert r.status_code == 200
    report = r.json['report']
    assert report['total_receipts'] == 2
    assert report['total_amount'] == 480
    assert report['sales']['by_product'][0]['product_name'] == 'Tela iPhone XR'

    r = client.get('/api/reports?start=junio&end=2024-06-30')
    assert r.status_code == 400


def test_report_comparison(client):
    r = client.get('/api/reports?period=custom&start=2024-06-01&end=2024-06-30&compare=1')
    assert r.status_code == 200
    assert r.json['current']['total_receipts'] == 2
    assert r.json['previous']['total_receipts'] == 0
    assert r.json['change']['receipts'] == 100.0


def test_status_and_error_slots(client, gateways):
    set_failing(gateways)

    r = client.get('/api/status')
    assert r.json['degraded'] is True

    client.delete('/api/customers/999')
    assert client.get('/api/status').json['collections']['customers']['error']

    assert client.delete('/api/status/errors').status_code == 200
    assert client.get('/api/status').json['collections']['customers']['error'] is None


def test_offline_create_still_works(client, gateways):
    set_failing(gateways)

    r = client.post('/api/customers', json={'name': 'Sem Rede'})

    assert r.status_code == 201
    assert r.json['item']['id'].startswith('local-')


def test_service_orders_endpoints(client):
    r = client.get('/api/services?q=bateria')
    assert [s['id'] for s in r.json['items']] == ['2']

    r = client.patch('/api/services/2', json={'status': 'concluido'})
    assert r.status_code == 200
    assert r.json['item']['status'] == 'completed'
    assert r.json['item']['completed_at'] is not None

    r = client.post('/api/services', json={'customer_id': '999', 'device': 'iPad', 'model': 'Air', 'problem': 'x'})
    assert r.status_code == 400
    assert r.json['field'] == 'customer_id'
