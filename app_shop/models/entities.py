# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Un solo nombre de campo por dato (sin alias legacy como nome/name):
# las diferencias de esquema con el backend se resuelven en
# repositories/mapping.py, nunca aquí.
# ==============================================================================

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app_shop.errors import ValidationError
from app_shop.utils import add_months, format_timestamp, parse_timestamp, utc_now


# ==============================================================================
# ENUMERACIONES - Conjuntos cerrados
# ==============================================================================

class EmployeeRole(str, Enum):
    """Roles de empleado disponibles en el sistema."""
    ADMIN = "admin"
    MANAGER = "manager"    # Assistente Técnico
    SELLER = "seller"

    @property
    def label(self) -> str:
        """Etiqueta para mostrar en pantalla."""
        return _ROLE_LABELS[self]

    @classmethod
    def normalize(cls, value: Any) -> 'EmployeeRole':
        """
        Normaliza un rol aceptando distintas grafías y sinónimos.

        Raises:
            ValidationError: si el rol no pertenece al conjunto cerrado
        """
        if isinstance(value, cls):
            return value
        low = str(value or '').strip().lower()
        if low in ('admin', 'administrador', 'administrator'):
            return cls.ADMIN
        if low in ('manager', 'assistente técnico', 'assistente', 'assistant', 'técnico', 'tecnico'):
            return cls.MANAGER
        if low in ('seller', 'vendedor', 'vendedora'):
            return cls.SELLER
        raise ValidationError(f"Rol inválido: {value!r}", field='role')


_ROLE_LABELS = {
    EmployeeRole.ADMIN: 'Administrador',
    EmployeeRole.MANAGER: 'Assistente Técnico',
    EmployeeRole.SELLER: 'Vendedor',
}


class PaymentMethod(str, Enum):
    """Métodos de pago aceptados."""
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    PIX = "PIX"

    @classmethod
    def normalize(cls, value: Any) -> 'PaymentMethod':
        """Acepta el valor canónico o la etiqueta en portugués del formulario."""
        if isinstance(value, cls):
            return value
        low = str(value or '').strip().lower()
        for method in cls:
            if method.value.lower() == low:
                return method
        alias = _PAYMENT_ALIASES.get(low)
        if alias is None:
            raise ValidationError(f"Método de pago inválido: {value!r}", field='payment_method')
        return alias


_PAYMENT_ALIASES = {
    'dinheiro': PaymentMethod.CASH,
    'efectivo': PaymentMethod.CASH,
    'cartão de crédito': PaymentMethod.CREDIT_CARD,
    'cartao de credito': PaymentMethod.CREDIT_CARD,
    'cartão de débito': PaymentMethod.DEBIT_CARD,
    'cartao de debito': PaymentMethod.DEBIT_CARD,
}


class ServiceStatus(str, Enum):
    """Estados de una orden de servicio (reparación)."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def legacy_value(self) -> str:
        """Valor en la tabla servicos del backend legacy."""
        return _STATUS_LEGACY[self]

    @classmethod
    def normalize(cls, value: Any) -> 'ServiceStatus':
        if isinstance(value, cls):
            return value
        low = str(value or '').strip().lower().replace(' ', '_')
        for status in cls:
            if low in (status.value, _STATUS_LEGACY[status]):
                return status
        raise ValidationError(f"Estado inválido: {value!r}", field='status')


_STATUS_LABELS = {
    ServiceStatus.PENDING: 'Pendente',
    ServiceStatus.IN_PROGRESS: 'Em Andamento',
    ServiceStatus.COMPLETED: 'Concluído',
}

_STATUS_LEGACY = {
    ServiceStatus.PENDING: 'pendente',
    ServiceStatus.IN_PROGRESS: 'em_andamento',
    ServiceStatus.COMPLETED: 'concluido',
}


# ==============================================================================
# CONVERSIONES DE ENTRADA
# ==============================================================================

def _as_text(data: Dict[str, Any], name: str) -> None:
    if name in data and data[name] is not None:
        data[name] = str(data[name]).strip()


def _as_optional_text(data: Dict[str, Any], name: str) -> None:
    if name in data:
        value = data[name]
        data[name] = str(value).strip() or None if value is not None else None


def _as_float(data: Dict[str, Any], name: str, minimum: float = 0.0) -> None:
    if name not in data or data[name] is None:
        return
    try:
        value = float(data[name])
    except (TypeError, ValueError):
        raise ValidationError(f"'{name}' debe ser numérico", field=name)
    if value < minimum:
        raise ValidationError(f"'{name}' no puede ser menor que {minimum}", field=name)
    data[name] = value


def _as_int(data: Dict[str, Any], name: str, minimum: int = 0) -> None:
    if name not in data or data[name] is None or data[name] == '':
        if name in data:
            data[name] = None
        return
    try:
        value = int(data[name])
    except (TypeError, ValueError):
        raise ValidationError(f"'{name}' debe ser entero", field=name)
    if value < minimum:
        raise ValidationError(f"'{name}' no puede ser menor que {minimum}", field=name)
    data[name] = value


def _as_timestamp(data: Dict[str, Any], name: str) -> None:
    if name not in data:
        return
    if data[name] in (None, ''):
        data[name] = None
        return
    value = parse_timestamp(data[name])
    if value is None:
        raise ValidationError(f"Fecha inválida: {data[name]!r}", field=name)
    data[name] = value


# ==============================================================================
# COMPORTAMIENTO COMÚN
# ==============================================================================

class EntityMixin:
    """
    Comportamiento compartido por todas las entidades.

    Cada entidad define:
        ENTITY_NAME: Nombre legible (para mensajes y logs)
        REQUIRED_FIELDS: Campos obligatorios al crear
        _coerce(): Normalización de tipos de su entrada
    """

    ENTITY_NAME = 'Entidad'
    REQUIRED_FIELDS: Tuple[str, ...] = ()

    # Nunca se modifican vía update
    PROTECTED_FIELDS = ('id', 'created_at', 'deleted')

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in dataclasses.fields(cls)]

    @classmethod
    def _coerce(cls, data: Dict[str, Any]) -> None:
        """Convierte tipos en sitio. Las subclases lo sobrescriben."""

    @classmethod
    def normalize_input(cls, data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
        """
        Valida y normaliza datos de entrada.

        Args:
            data: Campos recibidos
            partial: True para updates (sin campos obligatorios)

        Returns:
            Copia normalizada de los datos

        Raises:
            ValidationError: campo desconocido, obligatorio faltante o tipo inválido
        """
        if not isinstance(data, dict):
            raise ValidationError(f"{cls.ENTITY_NAME}: se esperaba un diccionario")

        allowed = set(cls.field_names()) - {'id', 'deleted'}
        if partial:
            allowed -= set(cls.PROTECTED_FIELDS)
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ValidationError(
                f"{cls.ENTITY_NAME}: campos no permitidos {', '.join(unknown)}",
                field=unknown[0]
            )

        normalized = dict(data)
        cls._coerce(normalized)

        required = cls.REQUIRED_FIELDS if not partial else [
            name for name in cls.REQUIRED_FIELDS if name in normalized
        ]
        for name in required:
            value = normalized.get(name)
            if value is None or (isinstance(value, (str, list, tuple)) and not value):
                raise ValidationError(f"{cls.ENTITY_NAME}: '{name}' es obligatorio", field=name)

        if 'created_at' in normalized:
            created_at = parse_timestamp(normalized['created_at'])
            if created_at is None:
                raise ValidationError(f"Fecha inválida: {normalized['created_at']!r}", field='created_at')
            normalized['created_at'] = created_at
        return normalized

    @classmethod
    def build(cls, data: Dict[str, Any], entity_id: str, created_at: Optional[datetime] = None):
        """
        Crea una entidad nueva a partir de datos ya normalizados.
        Una fecha explícita en los datos tiene prioridad sobre created_at.
        """
        values = dict(data)
        values.setdefault('created_at', created_at or utc_now())
        return cls(id=entity_id, deleted=False, **values)

    def merged(self, partial: Dict[str, Any]):
        """Copia superficial con los campos de partial sobrescritos."""
        return dataclasses.replace(self, **self.normalize_input(partial, partial=True))

    def mark_deleted(self):
        return dataclasses.replace(self, deleted=True)


# ==============================================================================
# CLIENTES
# ==============================================================================

@dataclass(frozen=True)
class Customer(EntityMixin):
    """
    Cliente de la tienda.

    Attributes:
        id: Identificador opaco
        name: Nombre para mostrar
        phone: Teléfono de contacto
        email: Correo (opcional)
        address: Dirección (opcional)
        created_at: Fecha de alta (UTC)
        deleted: Marca de borrado lógico
    """
    id: str
    name: str
    phone: str = ''
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    deleted: bool = False

    ENTITY_NAME = 'Cliente'
    REQUIRED_FIELDS = ('name',)

    @classmethod
    def _coerce(cls, data: Dict[str, Any]) -> None:
        _as_text(data, 'name')
        _as_text(data, 'phone')
        _as_optional_text(data, 'email')
        _as_optional_text(data, 'address')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'address': self.address,
            'created_at': format_timestamp(self.created_at),
            'deleted': self.deleted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            phone=data.get('phone') or '',
            email=data.get('email'),
            address=data.get('address'),
            created_at=parse_timestamp(data.get('created_at')) or utc_now(),
            deleted=bool(data.get('deleted', False)),
        )


# ==============================================================================
# PRODUCTOS
# ==============================================================================

@dataclass(frozen=True)
class Product(EntityMixin):
    """
    Producto o pieza en venta.

    Attributes:
        price: Precio unitario de venta
        cost_price: Precio de costo (opcional)
        stock: Cantidad en inventario (opcional)
        description: Descripción libre (opcional)
    """
    id: str
    name: str
    price: float = 0.0
    cost_price: Optional[float] = None
    stock: Optional[int] = None
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    deleted: bool = False

    ENTITY_NAME = 'Producto'
    REQUIRED_FIELDS = ('name', 'price')

    @classmethod
    def _coerce(cls, data: Dict[str, Any]) -> None:
        _as_text(data, 'name')
        _as_float(data, 'price')
        _as_float(data, 'cost_price')
        _as_int(data, 'stock')
        _as_optional_text(data, 'description')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'cost_price': self.cost_price,
            'stock': self.stock,
            'description': self.description,
            'created_at': format_timestamp(self.created_at),
            'deleted': self.deleted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        stock = data.get('stock')
        cost_price = data.get('cost_price')
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            price=float(data.get('price') or 0.0),
            cost_price=float(cost_price) if cost_price is not None else None,
            stock=int(stock) if stock is not None else None,
            description=data.get('description'),
            created_at=parse_timestamp(data.get('created_at')) or utc_now(),
            deleted=bool(data.get('deleted', False)),
        )


# ==============================================================================
# EMPLEADOS
# ==============================================================================

@dataclass(frozen=True)
class Employee(EntityMixin):
    """
    Empleado (vendedor, técnico o administrador).

    Attributes:
        phone: Teléfono / WhatsApp
        role: Rol dentro del conjunto cerrado EmployeeRole
        age: Edad (opcional)
        email: Correo (opcional)
    """
    id: str
    name: str
    phone: str = ''
    role: EmployeeRole = EmployeeRole.SELLER
    age: Optional[int] = None
    email: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    deleted: bool = False

    ENTITY_NAME = 'Funcionário'
    REQUIRED_FIELDS = ('name',)

    @classmethod
    def _coerce(cls, data: Dict[str, Any]) -> None:
        _as_text(data, 'name')
        _as_text(data, 'phone')
        if 'role' in data:
            data['role'] = EmployeeRole.normalize(data['role'])
        _as_int(data, 'age')
        _as_optional_text(data, 'email')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'role': self.role.value,
            'age': self.age,
            'email': self.email,
            'created_at': format_timestamp(self.created_at),
            'deleted': self.deleted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        try:
            role = EmployeeRole.normalize(data.get('role', 'seller'))
        except ValidationError:
            role = EmployeeRole.SELLER
        age = data.get('age')
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            phone=data.get('phone') or '',
            role=role,
            age=int(age) if age not in (None, '') else None,
            email=data.get('email'),
            created_at=parse_timestamp(data.get('created_at')) or utc_now(),
            deleted=bool(data.get('deleted', False)),
        )


# ==============================================================================
# ÓRDENES DE SERVICIO
# ==============================================================================

@dataclass(frozen=True)
class ServiceOrder(EntityMixin):
    """
    Orden de servicio técnico (reparación de un equipo de un cliente).

    Attributes:
        customer_id: Cliente dueño del equipo
        device: Tipo de equipo (iPhone, iPad, ...)
        model: Modelo del equipo
        problem: Falla informada
        status: Estado dentro de ServiceStatus
        price: Valor cobrado por el servicio
        notes: Observaciones (opcional)
        received_at: Fecha de entrada del equipo
        completed_at: Fecha de conclusión (solo si está concluido)
    """
    id: str
    customer_id: str
    device: str
    model: str
    problem: str
    status: ServiceStatus = ServiceStatus.PENDING
    price: float = 0.0
    notes: Optional[str] = None
    received_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    deleted: bool = False

    ENTITY_NAME = 'Serviço'
    REQUIRED_FIELDS = ('customer_id', 'device', 'model', 'problem')

    @classmethod
    def _coerce(cls, data: Dict[str, Any]) -> None:
        for name in ('customer_id', 'device', 'model', 'problem'):
            _as_text(data, name)
        if 'status' in data:
            data['status'] = ServiceStatus.normalize(data['status'])
        if data.get('price') is None:
            data.pop('price', None)
        _as_float(data, 'price')
        _as_optional_text(data, 'notes')
        _as_timestamp(data, 'received_at')
        if 'received_at' in data and data['received_at'] is None:
            data.pop('received_at')
        _as_timestamp(data, 'completed_at')

    @property
    def is_completed(self) -> bool:
        return self.status == ServiceStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'device': self.device,
            'model': self.model,
            'problem': self.problem,
            'status': self.status.value,
            'price': self.price,
            'notes': self.notes,
            'received_at': format_timestamp(self.received_at),
            'completed_at': format_timestamp(self.completed_at),
            'created_at': format_timestamp(self.created_at),
            'deleted': self.deleted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServiceOrder':
        try:
            status = ServiceStatus.normalize(data.get('status', 'pending'))
        except ValidationError:
            status = ServiceStatus.PENDING
        created_at = parse_timestamp(data.get('created_at')) or utc_now()
        return cls(
            id=str(data['id']),
            customer_id=str(data.get('customer_id', '')),
            device=data.get('device', ''),
            model=data.get('model', ''),
            problem=data.get('problem', ''),
            status=status,
            price=float(data.get('price') or 0.0),
            notes=data.get('notes'),
            received_at=parse_timestamp(data.get('received_at')) or created_at,
            completed_at=parse_timestamp(data.get('completed_at')),
            created_at=created_at,
            deleted=bool(data.get('deleted', False)),
        )


# ==============================================================================
# RECIBOS
# ==============================================================================

@dataclass(frozen=True)
class LineItem:
    """
    Ítem de un recibo: producto, cantidad y precio unitario al momento de la venta.
    """
    product_id: str
    quantity: int = 1
    price: float = 0.0

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'quantity': self.quantity,
            'price': self.price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        return cls(
            product_id=str(data.get('product_id', '')),
            quantity=int(data.get('quantity', 1) or 1),
            price=float(data.get('price', 0.0) or 0.0),
        )

    @classmethod
    def parse(cls, value: Any) -> 'LineItem':
        """Valida un ítem de entrada (dict o LineItem)."""
        if isinstance(value, LineItem):
            value = value.to_dict()
        if not isinstance(value, dict):
            raise ValidationError("Ítem de recibo inválido", field='items')
        data = dict(value)
        if not str(data.get('product_id') or '').strip():
            raise ValidationError("Ítem sin producto", field='items')
        data.setdefault('quantity', 1)
        data.setdefault('price', 0.0)
        _as_int(data, 'quantity', minimum=1)
        _as_float(data, 'price')
        if data['quantity'] is None or data['price'] is None:
            raise ValidationError("Ítem sin cantidad o precio", field='items')
        return cls(product_id=str(data['product_id']).strip(), quantity=data['quantity'], price=data['price'])


@dataclass(frozen=True)
class Receipt(EntityMixin):
    """
    Recibo de venta. Inmutable una vez creado (solo se puede eliminar).

    Attributes:
        customer_id: Cliente (exactamente uno)
        employee_id: Vendedor (exactamente uno)
        items: Ítems vendidos, en orden
        payment_method: Valor de PaymentMethod
        installments: Cantidad de cuotas (>= 1)
        warranty_months: Garantía en meses (opcional)
        notes: Observaciones (opcional)
        total: Total canónico. Se calcula UNA vez al crear; si se informa
               un total explícito, ese tiene prioridad.
    """
    id: str
    customer_id: str
    employee_id: str
    items: Tuple[LineItem, ...] = ()
    payment_method: str = PaymentMethod.CASH.value
    installments: int = 1
    warranty_months: Optional[int] = None
    notes: Optional[str] = None
    total: float = 0.0
    created_at: datetime = field(default_factory=utc_now)
    deleted: bool = False

    ENTITY_NAME = 'Recibo'
    REQUIRED_FIELDS = ('customer_id', 'employee_id', 'items', 'payment_method')

    @classmethod
    def _coerce(cls, data: Dict[str, Any]) -> None:
        _as_text(data, 'customer_id')
        _as_text(data, 'employee_id')
        if 'items' in data:
            if not isinstance(data['items'], (list, tuple)):
                raise ValidationError("'items' debe ser una lista", field='items')
            data['items'] = tuple(LineItem.parse(item) for item in data['items'])
        if 'payment_method' in data:
            data['payment_method'] = PaymentMethod.normalize(data['payment_method']).value
        if data.get('installments') in (None, ''):
            data.pop('installments', None)
        _as_int(data, 'installments', minimum=1)
        _as_int(data, 'warranty_months')
        _as_optional_text(data, 'notes')
        if data.get('total') is None:
            data.pop('total', None)
        _as_float(data, 'total')

    @classmethod
    def build(cls, data: Dict[str, Any], entity_id: str, created_at: Optional[datetime] = None) -> 'Receipt':
        values = dict(data)
        values.setdefault('total', compute_total(values.get('items', [])))
        return super().build(values, entity_id, created_at)

    @property
    def computed_total(self) -> float:
        return compute_total(self.items)

    @property
    def installment_value(self) -> float:
        return self.total / self.installments if self.installments > 0 else self.total

    @property
    def warranty_expires_at(self) -> Optional[datetime]:
        if not self.warranty_months:
            return None
        return add_months(self.created_at, self.warranty_months)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'employee_id': self.employee_id,
            'items': [item.to_dict() for item in self.items],
            'payment_method': self.payment_method,
            'installments': self.installments,
            'installment_value': self.installment_value,
            'warranty_months': self.warranty_months,
            'warranty_expires_at': format_timestamp(self.warranty_expires_at),
            'notes': self.notes,
            'total': self.total,
            'created_at': format_timestamp(self.created_at),
            'deleted': self.deleted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Receipt':
        items = tuple(LineItem.from_dict(i) for i in data.get('items') or [])
        total = data.get('total')
        warranty = data.get('warranty_months')
        return cls(
            id=str(data['id']),
            customer_id=str(data.get('customer_id', '')),
            employee_id=str(data.get('employee_id', '')),
            items=items,
            payment_method=data.get('payment_method') or PaymentMethod.CASH.value,
            installments=max(1, int(data.get('installments') or 1)),
            warranty_months=int(warranty) if warranty not in (None, '') else None,
            notes=data.get('notes'),
            total=float(total) if total is not None else compute_total(items),
            created_at=parse_timestamp(data.get('created_at')) or utc_now(),
            deleted=bool(data.get('deleted', False)),
        )


def compute_total(items: Iterable[LineItem]) -> float:
    """Σ(precio × cantidad) de los ítems."""
    return sum(item.line_total for item in items)
