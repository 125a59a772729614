# ==============================================================================
# MOTOR DE REPORTES DE VENTAS
# ==============================================================================
# Agrega recibos de un período por producto, método de pago, cliente
# y empleado.
#
# REGLAS:
# - Ventana inclusiva: 00:00 de la fecha inicio → último instante de la fecha fin
# - Recibos borrados (deleted=True) NO cuentan
# - Producto no resuelto → se excluye del desglose por producto,
#   pero su valor SÍ cuenta en el total
# - Cliente / empleado no resuelto → placeholder, nunca se descarta
#
# Función pura: sin E/S, sin modificar las entradas, resultado estable.
# ==============================================================================

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from app_shop.errors import ValidationError
from app_shop.models import (
    CustomerSales,
    EmployeeSales,
    PaymentMethodSales,
    ProductSales,
    Receipt,
    SalesBreakdown,
    SalesReport,
)
from app_shop.utils import ensure_utc, parse_date, utc_now

UNKNOWN_CUSTOMER = 'Cliente desconhecido'
UNKNOWN_EMPLOYEE = 'Funcionário desconhecido'

Resolver = Callable[[str], Optional[Any]]


class ReportEngine:
    """
    Cálculo de reportes de ventas.

    Los resolvers reciben un ID y devuelven la entidad (o None).
    """

    PERIODS = ('today', 'week', 'month', 'last30', 'custom')

    # =========================================================================
    # REPORTE
    # =========================================================================

    def generate(
        self,
        receipts: Iterable[Receipt],
        resolve_customer: Resolver,
        resolve_product: Resolver,
        resolve_employee: Resolver,
        start_date: Any,
        end_date: Any,
    ) -> SalesReport:
        """
        Genera el reporte de ventas del período.

        Args:
            receipts: Snapshot de recibos
            resolve_customer: customer_id → Customer | None
            resolve_product: product_id → Product | None
            resolve_employee: employee_id → Employee | None
            start_date: Fecha inicio (date, datetime o 'YYYY-MM-DD')
            end_date: Fecha fin, incluida completa

        Returns:
            SalesReport

        Raises:
            ValidationError: si alguna fecha no se puede interpretar
        """
        start_day = self._require_date(start_date, 'start_date')
        end_day = self._require_date(end_date, 'end_date')
        window_start, window_end = self.window(start_day, end_day)

        period_receipts = [
            r for r in receipts
            if not r.deleted and window_start <= ensure_utc(r.created_at) <= window_end
        ]

        # Totales
        total_value = sum(r.total for r in period_receipts)

        # Por producto (dict conserva el orden de primera aparición)
        product_totals: Dict[str, ProductSales] = {}
        for receipt in period_receipts:
            for item in receipt.items:
                product = resolve_product(item.product_id)
                if product is None:
                    continue
                entry = product_totals.get(product.id)
                if entry is None:
                    entry = product_totals[product.id] = ProductSales(product.id, product.name)
                entry.quantity += item.quantity
                entry.total_value += item.line_total
        by_product = sorted(product_totals.values(), key=lambda p: p.total_value, reverse=True)

        # Por método de pago
        by_payment: Dict[str, PaymentMethodSales] = {}
        for receipt in period_receipts:
            entry = by_payment.setdefault(receipt.payment_method, PaymentMethodSales())
            entry.count += 1
            entry.value += receipt.total
        payment_method_totals = {method: data.value for method, data in by_payment.items()}

        # Top clientes
        customers: Dict[str, CustomerSales] = {}
        for receipt in period_receipts:
            entry = customers.get(receipt.customer_id)
            if entry is None:
                customer = resolve_customer(receipt.customer_id)
                name = customer.name if customer is not None else UNKNOWN_CUSTOMER
                entry = customers[receipt.customer_id] = CustomerSales(receipt.customer_id, name)
            entry.purchases += 1
            entry.total_value += receipt.total
        top_customers = sorted(customers.values(), key=lambda c: c.total_value, reverse=True)

        # Top empleados
        employees: Dict[str, EmployeeSales] = {}
        for receipt in period_receipts:
            entry = employees.get(receipt.employee_id)
            if entry is None:
                employee = resolve_employee(receipt.employee_id)
                name = employee.name if employee is not None else UNKNOWN_EMPLOYEE
                entry = employees[receipt.employee_id] = EmployeeSales(receipt.employee_id, name)
            entry.sales += 1
            entry.total_value += receipt.total
        top_employees = sorted(employees.values(), key=lambda e: e.total_value, reverse=True)

        # Garantía promedio (sin garantía = 0 meses)
        total_months = sum(r.warranty_months or 0 for r in period_receipts)
        average_warranty = total_months / len(period_receipts) if period_receipts else 0.0

        return SalesReport(
            period=f"{start_day.isoformat()} - {end_day.isoformat()}",
            total_receipts=len(period_receipts),
            total_amount=total_value,
            average_warranty_months=average_warranty,
            payment_method_totals=payment_method_totals,
            sales=SalesBreakdown(
                total_sales=len(period_receipts),
                total_value=total_value,
                by_product=by_product,
                by_payment_method=by_payment,
            ),
            top_customers=top_customers,
            top_employees=top_employees,
        )

    # =========================================================================
    # PERÍODOS
    # =========================================================================

    @staticmethod
    def window(start_day: date, end_day: date) -> Tuple[datetime, datetime]:
        """Ventana UTC: inicio del primer día → último instante del último día."""
        return (
            datetime.combine(start_day, time.min, tzinfo=timezone.utc),
            datetime.combine(end_day, time.max, tzinfo=timezone.utc),
        )

    @staticmethod
    def resolve_period(
        period: str = 'today',
        custom_start: Any = None,
        custom_end: Any = None,
        now: Optional[datetime] = None,
    ) -> Tuple[date, date]:
        """
        Calcula el rango de fechas según el período solicitado.

        Args:
            period: 'today', 'week', 'month', 'last30', 'custom'
            custom_start: Fecha inicio para período custom (YYYY-MM-DD)
            custom_end: Fecha fin para período custom (YYYY-MM-DD)
            now: Momento de referencia (default: ahora UTC)

        Returns:
            Tupla (fecha_inicio, fecha_fin)
        """
        today = ensure_utc(now or utc_now()).date()

        if period == 'week':
            # Desde el lunes
            return today - timedelta(days=today.weekday()), today

        if period == 'month':
            return today.replace(day=1), today

        if period == 'last30':
            return today - timedelta(days=30), today

        if period == 'custom':
            start = parse_date(custom_start) if custom_start else None
            end = parse_date(custom_end) if custom_end else None
            if start and end and start <= end:
                return start, end

        # Default (y custom inválido): hoy
        return today, today

    @staticmethod
    def previous_window(start_day: date, end_day: date) -> Tuple[date, date]:
        """Período de igual duración inmediatamente anterior."""
        length = end_day - start_day
        previous_end = start_day - timedelta(days=1)
        return previous_end - length, previous_end

    @staticmethod
    def compare(current: SalesReport, previous: SalesReport) -> Dict[str, float]:
        """
        Cambio porcentual entre dos reportes.

        Returns:
            {'amount': %, 'receipts': %}
        """
        def calc_change(current_value, previous_value):
            if previous_value == 0:
                return 100.0 if current_value > 0 else 0.0
            return round(((current_value - previous_value) / previous_value) * 100, 1)

        return {
            'amount': calc_change(current.total_amount, previous.total_amount),
            'receipts': calc_change(current.total_receipts, previous.total_receipts),
        }

    @staticmethod
    def _require_date(value: Any, name: str) -> date:
        parsed = parse_date(value)
        if parsed is None:
            raise ValidationError(f"Fecha inválida en '{name}': {value!r}", field=name)
        return parsed
