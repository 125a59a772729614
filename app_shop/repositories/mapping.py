# ==============================================================================
# MAPEO DE CAMPOS - Frontera con el backend
# ==============================================================================
# Las entidades usan UN nombre canónico por campo. Si el esquema del backend
# es distinto (columnas en portugués, camelCase), la traducción ocurre
# SOLO aquí, en ambos sentidos.
# ==============================================================================

from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from app_shop.models import LineItem, ServiceStatus


def to_payload(value: Any) -> Any:
    """Convierte datos normalizados a tipos serializables en JSON."""
    if isinstance(value, dict):
        return {k: to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(v) for v in value]
    if isinstance(value, LineItem):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class FieldMapping:
    """
    Traducción canónico ↔ backend para una colección.

    Attributes:
        resource: Nombre de la colección en el backend
        renames: {campo_canónico: campo_backend}
        outbound: Ajuste adicional al enviar (opcional)
        inbound: Ajuste adicional al recibir (opcional)
    """

    def __init__(
        self,
        resource: str,
        renames: Optional[Dict[str, str]] = None,
        outbound: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
        inbound: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
    ):
        self.resource = resource
        self.renames = dict(renames or {})
        self._reverse = {backend: canonical for canonical, backend in self.renames.items()}
        self._outbound = outbound
        self._inbound = inbound

    def to_backend(self, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = to_payload(data)
        if self._outbound:
            payload = self._outbound(payload)
        return {self.renames.get(key, key): value for key, value in payload.items()}

    def from_backend(self, row: Dict[str, Any]) -> Dict[str, Any]:
        data = {self._reverse.get(key, key): value for key, value in row.items()}
        if self._inbound:
            data = self._inbound(data)
        return data


# ==============================================================================
# ESQUEMA LEGACY (tablas en portugués del backend original)
# ==============================================================================

def _receipt_out(data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    if 'warranty_months' in data:
        months = data.pop('warranty_months')
        data['warranty'] = {'durationMonths': months} if months is not None else None
    if 'items' in data:
        data['items'] = [
            {'productId': i['product_id'], 'quantity': i['quantity'], 'price': i['price']}
            for i in data['items']
        ]
    return data


def _receipt_in(data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    warranty = data.pop('warranty', None)
    if isinstance(warranty, dict):
        data['warranty_months'] = warranty.get('durationMonths')
    data['items'] = [
        {
            'product_id': i.get('productId', i.get('product_id')),
            'quantity': i.get('quantity', 1),
            'price': i.get('price', 0),
        }
        for i in data.get('items') or []
    ]
    return data


def _service_out(data: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(data)
    if data.get('status'):
        data['status'] = ServiceStatus.normalize(data['status']).legacy_value
    return data


LEGACY_MAPPINGS = {
    'customers': FieldMapping('clientes', {
        'name': 'nome',
        'phone': 'telefone',
        'address': 'endereco',
    }),
    'products': FieldMapping('pecas', {
        'name': 'nome',
        'price': 'preco_venda',
        'cost_price': 'preco_custo',
        'stock': 'quantidade',
        'description': 'descricao',
    }),
    'employees': FieldMapping('funcionarios', {
        'name': 'nome',
        'phone': 'whatsapp',
        'role': 'cargo',
        'age': 'idade',
    }),
    'receipts': FieldMapping('recibos', {
        'customer_id': 'customerId',
        'employee_id': 'employeeId',
        'payment_method': 'paymentMethod',
        'total': 'totalAmount',
        'created_at': 'createdAt',
    }, outbound=_receipt_out, inbound=_receipt_in),
    'services': FieldMapping('servicos', {
        'customer_id': 'cliente_id',
        'device': 'dispositivo',
        'model': 'modelo',
        'problem': 'problema',
        'price': 'valor',
        'notes': 'observacoes',
        'received_at': 'data_entrada',
        'completed_at': 'data_conclusao',
    }, outbound=_service_out),
}


def default_mapping(collection: str, schema: str = 'canonical') -> FieldMapping:
    """
    Mapeo para una colección según el esquema configurado.

    Args:
        collection: customers, products, employees, receipts o services
        schema: 'canonical' (sin traducción) o 'legacy'
    """
    if schema == 'legacy':
        return LEGACY_MAPPINGS[collection]
    return FieldMapping(collection)
