import dataclasses
import logging
from datetime import datetime, timezone

import pytest

from app_shop.errors import NotFoundError, ValidationError
from app_shop.models import LineItem, ServiceStatus
from app_shop.services import PRODUCT_NOT_FOUND

from conftest import set_failing


async def test_load_all_from_backend(facade, gateways):
    gateways['customers'].entities.pop()

    await facade.load_all()

    assert facade.loaded
    assert not facade.is_degraded
    assert [c.name for c in facade.customers] == ['João Silva']


async def test_load_all_offline_uses_seed(facade, gateways):
    set_failing(gateways)

    await facade.load_all()

    assert facade.is_degraded
    assert facade.degraded_collections() == ['customers', 'products', 'employees', 'receipts', 'services']
    assert [p.name for p in facade.products] == ['Tela iPhone XR', 'Bateria iPhone 11']
    assert facade.errors() == {}


async def test_customer_crud_round_trip(facade):
    await facade.load_all()

    customer = await facade.add_customer({'name': 'Pedro Santos', 'phone': '11977776666'})
    assert facade.get_customer_by_id(customer.id) == customer

    updated = await facade.update_customer(customer.id, {'email': 'pedro@example.com'})
    assert updated.phone == '11977776666'

    await facade.delete_customer(customer.id)
    assert facade.get_customer_by_id(customer.id) is None
    assert facade.search_customers('pedro') == []


async def test_employee_and_product_operations(facade):
    await facade.load_all()

    employee = await facade.add_employee({'name': 'Bruno Costa', 'phone': '11955554444', 'role': 'Vendedor'})
    assert facade.search_employees('55554444') == [employee]

    product = await facade.update_product('2', {'price': 199.9})
    assert facade.get_product_by_id('2').price == 199.9
    assert product.name == 'Bateria iPhone 11'

    await facade.delete_product('1')
    assert [p.id for p in facade.search_products('iphone')] == ['2']


async def test_add_receipt_validates_references(facade):
    await facade.load_all()
    base = {'customer_id': '1', 'employee_id': '1', 'payment_method': 'Cash', 'items': [{'product_id': '1', 'quantity': 1}]}

    with pytest.raises(ValidationError):
        await facade.add_receipt(dict(base, customer_id='999'))
    with pytest.raises(ValidationError):
        await facade.add_receipt(dict(base, employee_id='999'))
    with pytest.raises(ValidationError):
        await facade.add_receipt(dict(base, items=[{'product_id': '999', 'quantity': 1, 'price': 10}]))

    assert 'receipts' in facade.errors()
    facade.clear_errors()
    assert facade.errors() == {}


async def test_add_receipt_uses_product_price_when_missing(facade):
    await facade.load_all()

    receipt = await facade.add_receipt({
        'customer_id': '2',
        'employee_id': '2',
        'payment_method': 'Dinheiro',
        'installments': 2,
        'items': [{'product_id': '1', 'quantity': 2}],
    })

    assert receipt.items[0].price == 300
    assert receipt.total == 600
    assert receipt.installment_value == 300
    assert receipt.payment_method == 'Cash'
    assert facade.receipts[0].id == receipt.id


async def test_add_receipt_offline_still_succeeds(facade, gateways):
    set_failing(gateways)
    await facade.load_all()

    receipt = await facade.add_receipt({
        'customer_id': '1', 'employee_id': '1', 'payment_method': 'PIX',
        'items': [{'product_id': '2', 'quantity': 1, 'price': 180}],
    })

    assert receipt.id.startswith('local-')
    assert facade.get_receipt_by_id(receipt.id) == receipt


async def test_explicit_total_mismatch_is_logged(facade, caplog):
    await facade.load_all()

    with caplog.at_level(logging.WARNING, logger='app_shop'):
        receipt = await facade.add_receipt({
            'customer_id': '1', 'employee_id': '1', 'payment_method': 'Cash', 'total': 250,
            'items': [{'product_id': '1', 'quantity': 1, 'price': 300}],
        })

    assert receipt.total == 250
    assert 'distinto del calculado' in caplog.text


async def test_receipts_have_no_update(facade):
    assert not hasattr(facade, 'update_receipt')


async def test_receipt_lines_resolve_missing_products(facade):
    await facade.load_all()
    receipt = facade.get_receipt_by_id('1')

    await facade.delete_product('1')

    lines = facade.receipt_lines(receipt)
    assert lines == [{
        'product_id': '1', 'product_name': PRODUCT_NOT_FOUND, 'quantity': 1, 'price': 300.0, 'line_total': 300.0,
    }]


async def test_delete_unknown_receipt(facade):
    await facade.load_all()
    with pytest.raises(NotFoundError):
        await facade.delete_receipt('nope')


async def test_search_receipts_by_customer_name(facade):
    await facade.load_all()
    assert [r.id for r in facade.search_receipts('OLIVEIRA')] == ['2']


async def test_generate_report_over_seed(facade):
    await facade.load_all()

    report = facade.generate_report('2024-06-01', '2024-06-30')

    assert report.total_receipts == 2
    assert report.total_amount == 480
    assert report.payment_method_totals == {'Credit Card': 300, 'Cash': 180}
    assert report.average_warranty_months == 2
    assert [c.customer_name for c in report.top_customers] == ['João Silva', 'Maria Oliveira']


async def test_deleted_receipt_leaves_report(facade):
    await facade.load_all()
    await facade.delete_receipt('2')

    report = facade.generate_report('2024-06-01', '2024-06-30')

    assert report.total_receipts == 1
    assert report.total_amount == 300


async def test_report_for_period_and_comparison(facade):
    await facade.load_all()
    now = datetime(2024, 6, 20, tzinfo=timezone.utc)

    month = facade.generate_report_for_period('month', now=now)
    assert month.period == '2024-06-01 - 2024-06-20'
    assert month.total_receipts == 2

    comparison = facade.compare_with_previous_period('month', now=now)
    assert comparison['previous'].total_receipts == 0
    assert comparison['change'] == {'amount': 100.0, 'receipts': 100.0}


async def test_status_reports_each_collection(facade, gateways):
    gateways['products'].fail = True
    await facade.load_all()

    status = facade.status()

    assert status['degraded'] is True
    assert status['collections']['products']['degraded'] is True
    assert status['collections']['customers']['degraded'] is False
    assert status['collections']['receipts']['count'] == 2


async def test_returned_entities_cannot_rewrite_the_snapshot(facade):
    await facade.load_all()
    customer = await facade.add_customer({'name': 'Pedro Alves', 'phone': '11966665555'})

    with pytest.raises(dataclasses.FrozenInstanceError):
        customer.name = 'Outro Nome'
    with pytest.raises(dataclasses.FrozenInstanceError):
        facade.search_customers('pedro')[0].phone = '0'

    assert facade.get_customer_by_id(customer.id).name == 'Pedro Alves'


async def test_offline_fallback_is_not_changed_by_callers(facade, gateways):
    set_failing(gateways)
    await facade.load_all()

    with pytest.raises(dataclasses.FrozenInstanceError):
        facade.customers[0].name = 'Outro Nome'
    await facade.load_all()

    assert facade.customers[0].name == 'João Silva'


async def test_receipt_items_are_read_only(facade):
    await facade.load_all()
    receipt = facade.get_receipt_by_id('1')

    with pytest.raises(AttributeError):
        receipt.items.append(LineItem('2', 1, 180.0))
    with pytest.raises(dataclasses.FrozenInstanceError):
        receipt.items[0].quantity = 5

    assert facade.get_receipt_by_id('1').items == (LineItem('1', 1, 300.0),)


async def test_search_services_by_device_problem_and_customer(facade):
    await facade.load_all()

    assert [s.id for s in facade.search_services('TELA')] == ['1']
    assert [s.id for s in facade.search_services('oliveira')] == ['2']
    assert [s.id for s in facade.search_services('iphone')] == ['1', '2']


async def test_add_service_checks_customer(facade):
    await facade.load_all()

    with pytest.raises(ValidationError):
        await facade.add_service({'customer_id': '999', 'device': 'iPad', 'model': 'Air', 'problem': 'Não liga'})
    assert 'services' in facade.errors()

    order = await facade.add_service({
        'customer_id': '2', 'device': 'iPad', 'model': 'Air', 'problem': 'Não liga', 'status': 'pendente',
    })
    assert order.status is ServiceStatus.PENDING
    assert order.completed_at is None
    assert facade.services[0].id == order.id


async def test_completing_a_service_stamps_completion_date(facade):
    await facade.load_all()

    done = await facade.update_service('2', {'status': 'concluido'})
    assert done.status is ServiceStatus.COMPLETED
    assert done.completed_at is not None
    assert done.problem == 'Bateria não segura carga'

    reopened = await facade.update_service('2', {'status': 'in_progress'})
    assert reopened.completed_at is None


async def test_service_lifecycle_offline(facade, gateways):
    set_failing(gateways)
    await facade.load_all()

    order = await facade.add_service({'customer_id': '1', 'device': 'iPhone', 'model': '12', 'problem': 'Câmera'})
    assert order.id.startswith('local-')

    await facade.delete_service(order.id)
    assert facade.get_service_by_id(order.id) is None
    with pytest.raises(NotFoundError):
        await facade.update_service(order.id, {'price': 10})
