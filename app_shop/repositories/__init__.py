# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Todo acceso a persistencia pasa por esta capa.
#
# ESTRUCTURA:
# ├── interfaces.py    → IRemoteGateway (contrato list/create/update/delete)
# ├── base.py          → Archivos JSON (BaseRepository, ListRepository, SeedRepository)
# ├── fallback.py      → LocalFallbackSet (datos locales por store)
# ├── mapping.py       → Traducción de campos canónico ↔ backend
# ├── http_gateway.py  → Backend REST (httpx)
# └── json_gateway.py  → Backend en archivos JSON
#
# CAMBIAR DE BACKEND:
# 1. Crear un gateway que implemente IRemoteGateway
# 2. Instanciarlo en app_container.py
# 3. Los services NO requieren cambios
# ==============================================================================

from .interfaces import IRemoteGateway
from .base import BaseRepository, ListRepository, SeedRepository
from .fallback import LocalFallbackSet
from .mapping import FieldMapping, LEGACY_MAPPINGS, default_mapping, to_payload
from .http_gateway import HttpGateway
from .json_gateway import JsonFileGateway

__all__ = [
    # Interfaces
    'IRemoteGateway',

    # Archivos JSON
    'BaseRepository',
    'ListRepository',
    'SeedRepository',

    # Fallback local
    'LocalFallbackSet',

    # Mapeo
    'FieldMapping',
    'LEGACY_MAPPINGS',
    'default_mapping',
    'to_payload',

    # Gateways
    'HttpGateway',
    'JsonFileGateway',
]
