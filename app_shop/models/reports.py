# ==============================================================================
# ESTRUCTURAS DEL REPORTE DE VENTAS
# ==============================================================================
# Resultado de ReportEngine.generate(). Los montos se guardan sin redondear;
# to_dict() redondea a 2 decimales para presentación.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ProductSales:
    product_id: str
    product_name: str
    quantity: int = 0
    total_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'total_value': round(self.total_value, 2),
        }


@dataclass
class PaymentMethodSales:
    count: int = 0
    value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {'count': self.count, 'value': round(self.value, 2)}


@dataclass
class CustomerSales:
    customer_id: str
    customer_name: str
    purchases: int = 0
    total_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'customer_id': self.customer_id,
            'customer_name': self.customer_name,
            'purchases': self.purchases,
            'total_value': round(self.total_value, 2),
        }


@dataclass
class EmployeeSales:
    employee_id: str
    employee_name: str
    sales: int = 0
    total_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'employee_id': self.employee_id,
            'employee_name': self.employee_name,
            'sales': self.sales,
            'total_value': round(self.total_value, 2),
        }


@dataclass
class SalesBreakdown:
    """Desglose completo de ventas del período."""
    total_sales: int = 0
    total_value: float = 0.0
    by_product: List[ProductSales] = field(default_factory=list)
    by_payment_method: Dict[str, PaymentMethodSales] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_sales': self.total_sales,
            'total_value': round(self.total_value, 2),
            'by_product': [p.to_dict() for p in self.by_product],
            'by_payment_method': {
                method: data.to_dict() for method, data in self.by_payment_method.items()
            },
        }


@dataclass
class SalesReport:
    """
    Reporte de ventas de un período.

    Attributes:
        period: Etiqueta "inicio - fin"
        total_receipts: Recibos dentro del período
        total_amount: Suma de los totales
        average_warranty_months: Garantía promedio (0 sin recibos)
        payment_method_totals: {método: valor}
        sales: Desglose completo
        top_customers: Clientes ordenados por valor (desc)
        top_employees: Empleados ordenados por valor (desc)
    """
    period: str
    total_receipts: int = 0
    total_amount: float = 0.0
    average_warranty_months: float = 0.0
    payment_method_totals: Dict[str, float] = field(default_factory=dict)
    sales: SalesBreakdown = field(default_factory=SalesBreakdown)
    top_customers: List[CustomerSales] = field(default_factory=list)
    top_employees: List[EmployeeSales] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'period': self.period,
            'total_receipts': self.total_receipts,
            'total_amount': round(self.total_amount, 2),
            'average_warranty_months': round(self.average_warranty_months, 2),
            'payment_method_totals': {
                method: round(value, 2) for method, value in self.payment_method_totals.items()
            },
            'sales': self.sales.to_dict(),
            'top_customers': [c.to_dict() for c in self.top_customers],
            'top_employees': [e.to_dict() for e in self.top_employees],
        }
