# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. Los services solo hablan con los gateways vía IRemoteGateway
# 2. La presentación (API Flask) solo llama a DataFacade
# 3. Los services NO conocen el tipo de backend (REST / JSON)
#
# ESTRUCTURA:
# ├── entity_store.py   → Snapshot + CRUD remoto con fallback local
# ├── search_service.py → Búsqueda por subcadena
# ├── report_service.py → Reportes de ventas y períodos
# └── data_facade.py    → Composición de todo lo anterior
# ==============================================================================

from app_shop.services.entity_store import EntityStore
from app_shop.services.search_service import SearchIndex
from app_shop.services.report_service import ReportEngine, UNKNOWN_CUSTOMER, UNKNOWN_EMPLOYEE
from app_shop.services.data_facade import DataFacade, PRODUCT_NOT_FOUND

__all__ = [
    'EntityStore',
    'SearchIndex',
    'ReportEngine',
    'UNKNOWN_CUSTOMER',
    'UNKNOWN_EMPLOYEE',
    'DataFacade',
    'PRODUCT_NOT_FOUND',
]
