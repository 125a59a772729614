# ==============================================================================
# DATA FACADE - Única superficie para la capa de presentación
# ==============================================================================
# Compone los cinco EntityStore (clientes, productos, empleados, recibos,
# órdenes de servicio)
# con SearchIndex y ReportEngine.
#
# - Cada store recibe SU PROPIO LocalFallbackSet, creado aquí a partir de
#   la semilla. Nada de listas globales del proceso.
# - Solo se exponen copias: nunca las listas internas de los stores.
# - Todas las mutaciones son async (aunque terminen en el fallback local).
# - Los recibos no se actualizan: solo se crean y se eliminan.
# ==============================================================================

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from app_shop.errors import ValidationError
from app_shop.models import Customer, Employee, Product, Receipt, SalesReport, ServiceOrder, ServiceStatus
from app_shop.repositories.fallback import LocalFallbackSet
from app_shop.repositories.interfaces import IRemoteGateway
from app_shop.services.entity_store import EntityStore
from app_shop.services.report_service import ReportEngine
from app_shop.services.search_service import (
    CUSTOMER_FIELDS,
    EMPLOYEE_FIELDS,
    PRODUCT_FIELDS,
    SearchIndex,
    receipt_fields,
    service_fields,
)
from app_shop.utils import utc_now

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = 'Produto não encontrado'

# Tolerancia para comparar el total informado con el calculado
_TOTAL_TOLERANCE = 0.005


class DataFacade:
    """
    Fachada de datos de la tienda.

    Uso:
        facade = DataFacade(customer_gw, product_gw, employee_gw, receipt_gw, service_gw, seed=rows)
        await facade.load_all()
        customer = await facade.add_customer({'name': 'João Silva', 'phone': '11987654321'})
        report = facade.generate_report('2024-01-01', '2024-01-31')
    """

    COLLECTIONS = ('customers', 'products', 'employees', 'receipts', 'services')

    def __init__(
        self,
        customer_gateway: IRemoteGateway,
        product_gateway: IRemoteGateway,
        employee_gateway: IRemoteGateway,
        receipt_gateway: IRemoteGateway,
        service_gateway: IRemoteGateway,
        seed: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        timeout: Optional[float] = None,
        report_engine: Optional[ReportEngine] = None,
    ):
        """
        Args:
            *_gateway: Backend de cada colección
            seed: Registros iniciales de los LocalFallbackSet, por colección
            timeout: Timeout por operación remota (default: config)
            report_engine: Motor de reportes (inyectable para tests)
        """
        seed = seed or {}
        self._customers: EntityStore[Customer] = EntityStore(
            Customer, customer_gateway,
            LocalFallbackSet.from_rows(seed.get('customers', []), Customer.from_dict), timeout
        )
        self._products: EntityStore[Product] = EntityStore(
            Product, product_gateway,
            LocalFallbackSet.from_rows(seed.get('products', []), Product.from_dict), timeout
        )
        self._employees: EntityStore[Employee] = EntityStore(
            Employee, employee_gateway,
            LocalFallbackSet.from_rows(seed.get('employees', []), Employee.from_dict), timeout
        )
        self._receipts: EntityStore[Receipt] = EntityStore(
            Receipt, receipt_gateway,
            LocalFallbackSet.from_rows(seed.get('receipts', []), Receipt.from_dict), timeout
        )
        self._services: EntityStore[ServiceOrder] = EntityStore(
            ServiceOrder, service_gateway,
            LocalFallbackSet.from_rows(seed.get('services', []), ServiceOrder.from_dict), timeout
        )
        self.search_index = SearchIndex()
        self.report_engine = report_engine or ReportEngine()

    def _stores(self) -> Dict[str, EntityStore]:
        return {
            'customers': self._customers,
            'products': self._products,
            'employees': self._employees,
            'receipts': self._receipts,
            'services': self._services,
        }

    # =========================================================================
    # CARGA Y ESTADO
    # =========================================================================

    async def load_all(self) -> None:
        """Carga todas las colecciones en paralelo (nunca falla)."""
        await asyncio.gather(*(store.load() for store in self._stores().values()))
        if self.is_degraded:
            logger.warning("Operando en modo degradado: %s", ', '.join(self.degraded_collections()))

    @property
    def loaded(self) -> bool:
        return all(store.loaded for store in self._stores().values())

    @property
    def is_degraded(self) -> bool:
        return any(store.degraded for store in self._stores().values())

    def degraded_collections(self) -> List[str]:
        return [name for name, store in self._stores().items() if store.degraded]

    def errors(self) -> Dict[str, str]:
        """Fallas no recuperadas pendientes, por colección."""
        return {name: store.error for name, store in self._stores().items() if store.error}

    def clear_errors(self) -> None:
        for store in self._stores().values():
            store.clear_error()

    def status(self) -> Dict[str, Any]:
        """Resumen del estado de cada colección (para la API)."""
        return {
            'degraded': self.is_degraded,
            'collections': {
                name: {
                    'loaded': store.loaded,
                    'degraded': store.degraded,
                    'count': len(store.active()),
                    'transport_error': store.transport_error,
                    'error': store.error,
                }
                for name, store in self._stores().items()
            },
        }

    # =========================================================================
    # CLIENTES
    # =========================================================================

    @property
    def customers(self) -> List[Customer]:
        return self._customers.active()

    async def add_customer(self, data: Dict[str, Any]) -> Customer:
        return await self._customers.create(data)

    async def update_customer(self, customer_id: str, partial: Dict[str, Any]) -> Customer:
        return await self._customers.update(customer_id, partial)

    async def delete_customer(self, customer_id: str) -> None:
        await self._customers.delete(customer_id)

    def search_customers(self, query: Optional[str]) -> List[Customer]:
        return self.search_index.search(self._customers.snapshot(), query, CUSTOMER_FIELDS)

    def get_customer_by_id(self, customer_id: str) -> Optional[Customer]:
        return self._customers.get(customer_id)

    # =========================================================================
    # PRODUCTOS
    # =========================================================================

    @property
    def products(self) -> List[Product]:
        return self._products.active()

    async def add_product(self, data: Dict[str, Any]) -> Product:
        return await self._products.create(data)

    async def update_product(self, product_id: str, partial: Dict[str, Any]) -> Product:
        return await self._products.update(product_id, partial)

    async def delete_product(self, product_id: str) -> None:
        await self._products.delete(product_id)

    def search_products(self, query: Optional[str]) -> List[Product]:
        return self.search_index.search(self._products.snapshot(), query, PRODUCT_FIELDS)

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    # =========================================================================
    # EMPLEADOS
    # =========================================================================

    @property
    def employees(self) -> List[Employee]:
        return self._employees.active()

    async def add_employee(self, data: Dict[str, Any]) -> Employee:
        return await self._employees.create(data)

    async def update_employee(self, employee_id: str, partial: Dict[str, Any]) -> Employee:
        return await self._employees.update(employee_id, partial)

    async def delete_employee(self, employee_id: str) -> None:
        await self._employees.delete(employee_id)

    def search_employees(self, query: Optional[str]) -> List[Employee]:
        return self.search_index.search(self._employees.snapshot(), query, EMPLOYEE_FIELDS)

    def get_employee_by_id(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get(employee_id)

    # =========================================================================
    # RECIBOS
    # =========================================================================

    @property
    def receipts(self) -> List[Receipt]:
        return self._receipts.active()

    async def add_receipt(self, data: Dict[str, Any]) -> Receipt:
        """
        Crea un recibo validando sus referencias contra los snapshots actuales.

        Ítems sin precio toman el precio actual del producto.

        Raises:
            ValidationError: cliente, empleado o producto inexistente
        """
        try:
            data = self._resolve_receipt_input(data)
        except ValidationError as e:
            self._receipts.record_error(e)
            raise

        receipt = await self._receipts.create(data)
        if abs(receipt.total - receipt.computed_total) > _TOTAL_TOLERANCE:
            logger.warning(
                "Recibo %s: total informado %.2f distinto del calculado %.2f (se usa el informado)",
                receipt.id, receipt.total, receipt.computed_total
            )
        return receipt

    async def delete_receipt(self, receipt_id: str) -> None:
        await self._receipts.delete(receipt_id)

    def search_receipts(self, query: Optional[str]) -> List[Receipt]:
        extractors = receipt_fields(self._customer_name)
        return self.search_index.search(self._receipts.snapshot(), query, extractors)

    def get_receipt_by_id(self, receipt_id: str) -> Optional[Receipt]:
        return self._receipts.get(receipt_id)

    def receipt_lines(self, receipt: Receipt) -> List[Dict[str, Any]]:
        """
        Ítems del recibo con el nombre del producto resuelto
        (para el PDF y el mensaje de WhatsApp).
        """
        lines = []
        for item in receipt.items:
            product = self.get_product_by_id(item.product_id)
            lines.append({
                'product_id': item.product_id,
                'product_name': product.name if product else PRODUCT_NOT_FOUND,
                'quantity': item.quantity,
                'price': item.price,
                'line_total': item.line_total,
            })
        return lines

    def _customer_name(self, customer_id: str) -> Optional[str]:
        customer = self.get_customer_by_id(customer_id)
        return customer.name if customer else None

    def _resolve_receipt_input(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValidationError("Recibo: se esperaba un diccionario")
        data = dict(data)

        customer_id = data.get('customer_id')
        if customer_id and self.get_customer_by_id(str(customer_id).strip()) is None:
            raise ValidationError(f"Cliente '{customer_id}' no existe", field='customer_id')

        employee_id = data.get('employee_id')
        if employee_id and self.get_employee_by_id(str(employee_id).strip()) is None:
            raise ValidationError(f"Funcionário '{employee_id}' no existe", field='employee_id')

        items = data.get('items')
        if isinstance(items, (list, tuple)):
            resolved = []
            for item in items:
                if isinstance(item, dict) and item.get('product_id'):
                    product = self.get_product_by_id(str(item['product_id']).strip())
                    if product is None:
                        raise ValidationError(f"Producto '{item['product_id']}' no existe", field='items')
                    if item.get('price') is None:
                        item = dict(item, price=product.price)
                resolved.append(item)
            data['items'] = resolved
        return data

    # =========================================================================
    # ÓRDENES DE SERVICIO
    # =========================================================================

    @property
    def services(self) -> List[ServiceOrder]:
        return self._services.active()

    async def add_service(self, data: Dict[str, Any]) -> ServiceOrder:
        """
        Abre una orden de servicio para un cliente existente.

        Raises:
            ValidationError: cliente inexistente o datos inválidos
        """
        try:
            data = self._resolve_service_input(data)
        except ValidationError as e:
            self._services.record_error(e)
            raise
        return await self._services.create(data)

    async def update_service(self, service_id: str, partial: Dict[str, Any]) -> ServiceOrder:
        """
        Modifica una orden. Al pasar a 'completed' sin fecha de conclusión
        se registra la fecha actual; al salir de 'completed' se limpia.
        """
        try:
            partial = self._resolve_service_input(partial, self._services.get(service_id))
        except ValidationError as e:
            self._services.record_error(e)
            raise
        return await self._services.update(service_id, partial)

    async def delete_service(self, service_id: str) -> None:
        await self._services.delete(service_id)

    def search_services(self, query: Optional[str]) -> List[ServiceOrder]:
        extractors = service_fields(self._customer_name)
        return self.search_index.search(self._services.snapshot(), query, extractors)

    def get_service_by_id(self, service_id: str) -> Optional[ServiceOrder]:
        return self._services.get(service_id)

    def _resolve_service_input(
        self, data: Dict[str, Any], current: Optional[ServiceOrder] = None
    ) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValidationError("Serviço: se esperaba un diccionario")
        data = dict(data)

        customer_id = data.get('customer_id')
        if customer_id and self.get_customer_by_id(str(customer_id).strip()) is None:
            raise ValidationError(f"Cliente '{customer_id}' no existe", field='customer_id')

        if data.get('status') is not None:
            status = ServiceStatus.normalize(data['status'])
            if 'completed_at' not in data:
                if status == ServiceStatus.COMPLETED:
                    if current is None or current.completed_at is None:
                        data['completed_at'] = utc_now()
                elif current is not None and current.completed_at is not None:
                    data['completed_at'] = None
        return data

    # =========================================================================
    # REPORTES
    # =========================================================================

    def generate_report(self, start_date: Any, end_date: Any) -> SalesReport:
        """Reporte de ventas del período [start_date, end_date] (días completos)."""
        return self.report_engine.generate(
            self._receipts.snapshot(),
            self.get_customer_by_id,
            self.get_product_by_id,
            self.get_employee_by_id,
            start_date,
            end_date,
        )

    def generate_report_for_period(
        self,
        period: str = 'today',
        custom_start: Any = None,
        custom_end: Any = None,
        now: Optional[datetime] = None,
    ) -> SalesReport:
        """
        Reporte para un período predefinido.

        Args:
            period: 'today', 'week', 'month', 'last30', 'custom'
        """
        start, end = self.report_engine.resolve_period(period, custom_start, custom_end, now)
        return self.generate_report(start, end)

    def compare_with_previous_period(
        self,
        period: str = 'month',
        custom_start: Any = None,
        custom_end: Any = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Compara el período con el de igual duración inmediatamente anterior.

        Returns:
            {'current': SalesReport, 'previous': SalesReport, 'change': {...}}
        """
        start, end = self.report_engine.resolve_period(period, custom_start, custom_end, now)
        previous_start, previous_end = self.report_engine.previous_window(start, end)

        current = self.generate_report(start, end)
        previous = self.generate_report(previous_start, previous_end)
        return {
            'current': current,
            'previous': previous,
            'change': self.report_engine.compare(current, previous),
        }
