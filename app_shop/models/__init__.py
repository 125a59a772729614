# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio (dataclasses) y estructuras del reporte de ventas.
# Independientes del backend: el mapeo de columnas vive en repositories/.
# ==============================================================================

from .entities import (
    # Entidades
    Customer,
    Product,
    Employee,
    Receipt,
    LineItem,
    ServiceOrder,

    # Conjuntos cerrados
    EmployeeRole,
    PaymentMethod,
    ServiceStatus,

    # Helpers
    EntityMixin,
    compute_total,
)

from .reports import (
    SalesReport,
    SalesBreakdown,
    ProductSales,
    PaymentMethodSales,
    CustomerSales,
    EmployeeSales,
)

__all__ = [
    # Entidades
    'Customer',
    'Product',
    'Employee',
    'Receipt',
    'LineItem',
    'ServiceOrder',

    # Conjuntos cerrados
    'EmployeeRole',
    'PaymentMethod',
    'ServiceStatus',

    # Helpers
    'EntityMixin',
    'compute_total',

    # Reportes
    'SalesReport',
    'SalesBreakdown',
    'ProductSales',
    'PaymentMethodSales',
    'CustomerSales',
    'EmployeeSales',
]
