import dataclasses
from datetime import datetime, timezone

import pytest

from app_shop.errors import ValidationError
from app_shop.models import (
    Customer, Employee, EmployeeRole, LineItem, PaymentMethod, Product, Receipt, ServiceOrder, ServiceStatus,
)


def test_customer_requires_name():
    with pytest.raises(ValidationError) as exc:
        Customer.normalize_input({'phone': '11999887766'})
    assert exc.value.field == 'name'


def test_unknown_and_protected_fields_are_rejected():
    with pytest.raises(ValidationError):
        Customer.normalize_input({'name': 'João', 'nome': 'João'})
    with pytest.raises(ValidationError):
        Customer.normalize_input({'id': 'x'}, partial=True)
    with pytest.raises(ValidationError):
        Product.normalize_input({'created_at': '2024-05-01'}, partial=True)


def test_product_price_is_coerced_and_checked():
    data = Product.normalize_input({'name': ' Tela ', 'price': '300', 'stock': '5'})
    assert data == {'name': 'Tela', 'price': 300.0, 'stock': 5}
    with pytest.raises(ValidationError):
        Product.normalize_input({'name': 'Tela', 'price': -1})
    with pytest.raises(ValidationError):
        Product.normalize_input({'name': 'Tela', 'price': 'caro'})


def test_employee_role_synonyms_and_labels():
    assert EmployeeRole.normalize('Vendedor') is EmployeeRole.SELLER
    assert EmployeeRole.normalize('Técnico') is EmployeeRole.MANAGER
    assert EmployeeRole.normalize('ADMIN') is EmployeeRole.ADMIN
    assert EmployeeRole.MANAGER.label == 'Assistente Técnico'
    with pytest.raises(ValidationError):
        EmployeeRole.normalize('gerente general')


def test_employee_from_dict_tolerates_unknown_role():
    employee = Employee.from_dict({'id': '9', 'name': 'Ana', 'role': '???'})
    assert employee.role is EmployeeRole.SELLER


def test_payment_method_aliases():
    assert PaymentMethod.normalize('Dinheiro') is PaymentMethod.CASH
    assert PaymentMethod.normalize('cartão de crédito') is PaymentMethod.CREDIT_CARD
    assert PaymentMethod.normalize('pix') is PaymentMethod.PIX
    with pytest.raises(ValidationError):
        PaymentMethod.normalize('Cheque')


def test_line_item_validation():
    assert LineItem.parse({'product_id': '1', 'quantity': '2', 'price': 10}) == LineItem('1', 2, 10.0)
    with pytest.raises(ValidationError):
        LineItem.parse({'product_id': '1', 'quantity': 0, 'price': 10})
    with pytest.raises(ValidationError):
        LineItem.parse({'quantity': 1, 'price': 10})
    with pytest.raises(ValidationError):
        LineItem.parse({'product_id': '1', 'quantity': '', 'price': 10})


def _receipt_input(**overrides):
    data = {
        'customer_id': '1',
        'employee_id': '1',
        'items': [{'product_id': '1', 'quantity': 2, 'price': 150}, {'product_id': '2', 'quantity': 1, 'price': 180}],
        'payment_method': 'PIX',
        'installments': 3,
    }
    data.update(overrides)
    return Receipt.normalize_input(data)


def test_receipt_total_is_computed_once_at_build():
    receipt = Receipt.build(_receipt_input(), 'r1')
    assert receipt.total == 480.0
    assert receipt.computed_total == 480.0
    assert receipt.installment_value == 160.0


def test_explicit_receipt_total_takes_precedence():
    receipt = Receipt.build(_receipt_input(total=450), 'r1')
    assert receipt.total == 450.0
    assert receipt.computed_total == 480.0


def test_receipt_requires_items_and_valid_installments():
    with pytest.raises(ValidationError):
        _receipt_input(items=[])
    with pytest.raises(ValidationError):
        _receipt_input(installments=0)


def test_warranty_expiration_clamps_day():
    receipt = Receipt.build(
        _receipt_input(warranty_months=1, created_at='2024-01-31T12:00:00Z'), 'r1'
    )
    assert receipt.warranty_expires_at == datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)
    assert Receipt.build(_receipt_input(), 'r2').warranty_expires_at is None


def test_receipt_survives_serialization():
    receipt = Receipt.build(_receipt_input(warranty_months=3, notes='Troca de tela'), 'r1')
    assert Receipt.from_dict(receipt.to_dict()) == receipt


def test_naive_timestamps_are_taken_as_utc():
    customer = Customer.from_dict({'id': '1', 'name': 'João', 'created_at': '2024-03-10T08:00:00'})
    assert customer.created_at == datetime(2024, 3, 10, 8, 0, tzinfo=timezone.utc)


def test_entities_are_frozen():
    customer = Customer.build({'name': 'João Silva'}, 'c1')
    with pytest.raises(dataclasses.FrozenInstanceError):
        customer.name = 'Outro'

    receipt = Receipt.build(_receipt_input(), 'r1')
    assert isinstance(receipt.items, tuple)
    with pytest.raises(dataclasses.FrozenInstanceError):
        receipt.items[0].price = 1.0


def test_product_cost_price_is_optional_and_checked():
    data = Product.normalize_input({'name': 'Tela', 'price': 300, 'cost_price': '120.5'})
    assert data['cost_price'] == 120.5
    assert Product.from_dict({'id': '1', 'name': 'Tela', 'price': 300}).cost_price is None
    with pytest.raises(ValidationError):
        Product.normalize_input({'name': 'Tela', 'price': 300, 'cost_price': -5})


def test_service_status_accepts_legacy_values():
    assert ServiceStatus.normalize('pendente') is ServiceStatus.PENDING
    assert ServiceStatus.normalize('Em Andamento') is ServiceStatus.IN_PROGRESS
    assert ServiceStatus.normalize('completed') is ServiceStatus.COMPLETED
    assert ServiceStatus.COMPLETED.legacy_value == 'concluido'
    assert ServiceStatus.IN_PROGRESS.label == 'Em Andamento'
    with pytest.raises(ValidationError):
        ServiceStatus.normalize('cancelado')


def test_service_order_requires_device_fields():
    with pytest.raises(ValidationError) as exc:
        ServiceOrder.normalize_input({'customer_id': '1', 'device': 'iPhone', 'model': 'XR'})
    assert exc.value.field == 'problem'

    data = ServiceOrder.normalize_input({
        'customer_id': '1', 'device': ' iPhone ', 'model': 'XR', 'problem': 'Tela quebrada',
        'status': 'em_andamento', 'price': '250', 'received_at': '2024-06-02T11:00:00Z',
    })
    assert data['device'] == 'iPhone'
    assert data['status'] is ServiceStatus.IN_PROGRESS
    assert data['price'] == 250.0
    assert data['received_at'] == datetime(2024, 6, 2, 11, 0, tzinfo=timezone.utc)

    with pytest.raises(ValidationError):
        ServiceOrder.normalize_input({'completed_at': 'ontem'}, partial=True)


def test_service_order_survives_serialization():
    order = ServiceOrder.build({
        'customer_id': '1', 'device': 'iPhone', 'model': '11', 'problem': 'Bateria',
        'status': ServiceStatus.COMPLETED, 'price': 180.0,
        'completed_at': datetime(2024, 6, 4, 10, 0, tzinfo=timezone.utc),
    }, 's1')

    assert order.is_completed
    assert ServiceOrder.from_dict(order.to_dict()) == order
    assert ServiceOrder.from_dict({'id': 's2', 'customer_id': '1', 'status': 'concluido'}).is_completed
