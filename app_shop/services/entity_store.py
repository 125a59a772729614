# ==============================================================================
# ENTITY STORE - Snapshot en memoria con CRUD remoto / local
# ==============================================================================
# Un store por tipo de entidad. Reglas:
#
# - load():   backend OK → snapshot = lo que devuelve el backend
#             backend KO → snapshot = LocalFallbackSet (modo degradado)
#             NUNCA lanza excepción.
# - create(): backend KO → se sintetiza la entidad con ID local y se agrega
#             al snapshot y al LocalFallbackSet. Desde afuera siempre funciona.
# - update(): backend KO → merge local sobre una copia, misma posición.
# - delete(): borrado lógico (deleted=True), backend OK o KO.
#
# Solo TransportError activa el camino local. NotFoundError y ValidationError
# llegan al llamador y quedan registrados en self.error.
#
# Concurrencia: las operaciones se serializan con un asyncio.Lock por store.
# No hay cancelación: una operación iniciada termina (remoto o local).
# ==============================================================================

import asyncio
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from app_shop import config
from app_shop.errors import NotFoundError, ShopError, TransportError, ValidationError
from app_shop.repositories.fallback import LocalFallbackSet
from app_shop.repositories.interfaces import IRemoteGateway
from app_shop.utils import is_local_id, new_local_id

logger = logging.getLogger(__name__)

T = TypeVar('T')


class EntityStore(Generic[T]):
    """
    Colección ordenada (más reciente primero) de un tipo de entidad.

    Attributes:
        entity_cls: Clase de la entidad (Customer, Product, ...)
        gateway: Backend remoto
        fallback: Datos locales para modo degradado
        degraded: True si el último load() usó los datos locales
        transport_error: Última falla de backend recuperada (solo informativa)
        error: Última falla NO recuperada (NotFound / Validation)
    """

    def __init__(
        self,
        entity_cls: Type[T],
        gateway: IRemoteGateway,
        fallback: Optional[LocalFallbackSet] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            entity_cls: Clase de la entidad
            gateway: Implementación de IRemoteGateway
            fallback: LocalFallbackSet propio de este store
            timeout: Timeout por operación remota (default: config.REMOTE_TIMEOUT)
        """
        self.entity_cls = entity_cls
        self.gateway = gateway
        self.fallback = fallback if fallback is not None else LocalFallbackSet()
        self.timeout = timeout if timeout is not None else config.REMOTE_TIMEOUT

        self._items: List[T] = []
        self._lock = asyncio.Lock()

        self.loaded = False
        self.degraded = False
        self.transport_error: Optional[str] = None
        self.error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.entity_cls.ENTITY_NAME

    # =========================================================================
    # LECTURAS (síncronas, sin efectos)
    # =========================================================================

    def snapshot(self) -> List[T]:
        """Copia de la secuencia actual (incluye borrados lógicos)."""
        return list(self._items)

    def active(self) -> List[T]:
        """Entidades no borradas, en orden."""
        return [entity for entity in self._items if not entity.deleted]

    def get(self, entity_id: Any) -> Optional[T]:
        """Entidad por ID, o None si no existe o está borrada."""
        index = self._index_of(entity_id)
        return self._items[index] if index is not None else None

    def clear_error(self) -> None:
        self.error = None

    # =========================================================================
    # CARGA
    # =========================================================================

    async def load(self) -> List[T]:
        """
        Carga el snapshot desde el backend o, si falla, desde los datos locales.

        Returns:
            Copia del snapshot resultante
        """
        async with self._lock:
            try:
                entities = await self._remote('list', self.gateway.list)
            except Exception as e:  # cualquier falla cae a los datos locales
                self._items = self.fallback.snapshot()
                self.degraded = True
                self.transport_error = str(e)
                logger.warning(
                    "%s: backend no disponible (%s), usando %d registros locales",
                    self.name, e, len(self._items)
                )
            else:
                self._items = list(entities)
                self.degraded = False
                self.transport_error = None
                logger.info("%s: %d registros cargados del backend", self.name, len(self._items))
            self.loaded = True
            return self.snapshot()

    # =========================================================================
    # CRUD
    # =========================================================================

    async def create(self, data: Dict[str, Any]) -> T:
        """
        Crea una entidad y la agrega al inicio del snapshot.

        Raises:
            ValidationError: datos inválidos (no se intenta fallback)
        """
        async with self._lock:
            normalized = self._validate(data)
            try:
                entity = await self._remote('create', self.gateway.create, normalized)
            except TransportError as e:
                entity = self.entity_cls.build(normalized, new_local_id())
                self.fallback.prepend(entity)
                self._note_transport(e, f"creado localmente con id {entity.id}")
            except ValidationError as e:
                self.record_error(e)
                raise
            self._items.insert(0, entity)
            return entity

    async def update(self, entity_id: Any, partial: Dict[str, Any]) -> T:
        """
        Actualiza campos de una entidad manteniendo su posición.
        Las entidades con ID local no existen en el backend: se actualizan solo aquí.

        Raises:
            NotFoundError: la entidad no existe (o está borrada)
            ValidationError: datos inválidos
        """
        async with self._lock:
            index = self._index_of(entity_id)
            if index is None:
                raise self._not_found(entity_id)
            normalized = self._validate(partial, partial=True)
            if is_local_id(entity_id):
                entity = self._merge_locally(index, normalized)
            else:
                try:
                    entity = await self._remote('update', self.gateway.update, entity_id, normalized)
                except TransportError as e:
                    entity = self._merge_locally(index, normalized)
                    self._note_transport(e, f"{entity_id} actualizado localmente")
                except (NotFoundError, ValidationError) as e:
                    self.record_error(e)
                    raise
            self._put(entity)
            return entity

    async def delete(self, entity_id: Any) -> None:
        """
        Borrado lógico: la entidad queda con deleted=True en su posición.

        Raises:
            NotFoundError: la entidad no existe (el snapshot no cambia)
        """
        async with self._lock:
            if self._index_of(entity_id) is None:
                raise self._not_found(entity_id)
            if not is_local_id(entity_id):
                try:
                    await self._remote('delete', self.gateway.delete, entity_id)
                except TransportError as e:
                    self._note_transport(e, f"{entity_id} eliminado localmente")
                except NotFoundError as e:
                    self.record_error(e)
                    raise
            self._soft_delete(entity_id)

    # =========================================================================
    # INTERNOS
    # =========================================================================

    async def _remote(self, operation: str, call, *args):
        """Llama al gateway con timeout. Un timeout es TransportError."""
        try:
            return await asyncio.wait_for(call(*args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Timeout de {self.timeout}s en {operation}", operation, self.name
            ) from e

    def _validate(self, data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
        try:
            return self.entity_cls.normalize_input(data, partial=partial)
        except ValidationError as e:
            self.record_error(e)
            raise

    def _index_of(self, entity_id: Any) -> Optional[int]:
        for index, entity in enumerate(self._items):
            if entity.id == entity_id and not entity.deleted:
                return index
        return None

    def _merge_locally(self, index: int, normalized: Dict[str, Any]) -> T:
        entity = self._items[index].merged(normalized)
        self.fallback.replace(entity)
        return entity

    def _put(self, entity: T) -> None:
        """Reemplaza en sitio; si no estaba en el snapshot, va al inicio."""
        for index, current in enumerate(self._items):
            if current.id == entity.id:
                self._items[index] = entity
                return
        self._items.insert(0, entity)

    def _soft_delete(self, entity_id: Any) -> None:
        index = self._index_of(entity_id)
        if index is None:
            return
        deleted = self._items[index].mark_deleted()
        self._items[index] = deleted
        self.fallback.replace(deleted)

    def _not_found(self, entity_id: Any) -> NotFoundError:
        error = NotFoundError(self.name, entity_id)
        self.record_error(error)
        return error

    def _note_transport(self, error: TransportError, action: str) -> None:
        self.degraded = True
        self.transport_error = str(error)
        logger.warning("%s: %s; %s", self.name, error, action)

    def record_error(self, error: ShopError) -> None:
        """Registra una falla no recuperada en el slot de error."""
        self.error = str(error)
        logger.info("%s: %s", self.name, error)
