# ==============================================================================
# GATEWAY DE ARCHIVOS JSON - Backend local
# ==============================================================================
# Implementa IRemoteGateway sobre un archivo JSON por colección:
#   data/customers.json -> [{...}, {...}]   (más recientes primero)
# Útil sin servidor o en desarrollo. Cualquier error de E/S o JSON
# corrupto se reporta como TransportError, igual que un backend caído.
# ==============================================================================

import asyncio
import json
import logging
import os
import uuid
from typing import Any, Dict, Generic, List, Type, TypeVar

from app_shop.errors import NotFoundError, TransportError
from app_shop.repositories.base import ListRepository
from app_shop.repositories.mapping import to_payload

logger = logging.getLogger(__name__)

T = TypeVar('T')


class JsonFileGateway(Generic[T]):
    """
    Backend persistido en archivo JSON.

    Las operaciones de disco corren en un thread (asyncio.to_thread)
    para no bloquear el event loop.
    """

    def __init__(self, entity_cls: Type[T], data_dir: str, collection: str):
        """
        Args:
            entity_cls: Clase de la entidad
            data_dir: Carpeta de datos
            collection: Nombre de la colección (nombre del archivo)
        """
        self.entity_cls = entity_cls
        self.collection = collection
        self.repo = ListRepository(os.path.join(data_dir, f'{collection}.json'))

    async def list(self) -> List[T]:
        return await self._run('list', self._list)

    async def create(self, data: Dict[str, Any]) -> T:
        return await self._run('create', self._create, data)

    async def update(self, entity_id: str, data: Dict[str, Any]) -> T:
        return await self._run('update', self._update, entity_id, data)

    async def delete(self, entity_id: str) -> None:
        await self._run('delete', self._delete, entity_id)

    # =========================================================================
    # INTERNOS (síncronos)
    # =========================================================================

    async def _run(self, operation: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except (OSError, json.JSONDecodeError) as e:
            raise TransportError(
                f"Error de archivo en {operation} {self.collection}: {e}", operation, self.collection
            ) from e

    def _list(self) -> List[T]:
        return [self.entity_cls.from_dict(row) for row in self.repo.get_all()]

    def _create(self, data: Dict[str, Any]) -> T:
        entity = self.entity_cls.build(data, uuid.uuid4().hex)
        self.repo.prepend(to_payload(entity.to_dict()))
        return entity

    def _update(self, entity_id: str, data: Dict[str, Any]) -> T:
        row = self.repo.find_by_id(entity_id)
        if row is None:
            raise NotFoundError(self.entity_cls.ENTITY_NAME, entity_id)
        entity = self.entity_cls.from_dict(row).merged(data)
        self.repo.replace(entity_id, to_payload(entity.to_dict()))
        return entity

    def _delete(self, entity_id: str) -> None:
        if self.repo.remove(entity_id) is None:
            raise NotFoundError(self.entity_cls.ENTITY_NAME, entity_id)
