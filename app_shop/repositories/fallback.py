# ==============================================================================
# LOCAL FALLBACK SET - Datos locales cuando el backend no responde
# ==============================================================================
# Cada EntityStore tiene SU PROPIA instancia (nunca un global del proceso).
# Se siembra al construir el DataFacade y vive lo mismo que su store.
# ==============================================================================

import logging
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class LocalFallbackSet(Generic[T]):
    """
    Colección local ordenada, con la misma forma que el snapshot del store.
    Nuevas entidades van al inicio (más reciente primero).
    """

    def __init__(self, entities: Optional[Iterable[T]] = None):
        self._items: List[T] = list(entities or [])

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> List[T]:
        """Copia de los datos actuales."""
        return list(self._items)

    def find(self, entity_id: Any) -> Optional[T]:
        for entity in self._items:
            if entity.id == entity_id:
                return entity
        return None

    def prepend(self, entity: T) -> None:
        self._items.insert(0, entity)

    def replace(self, entity: T) -> bool:
        """
        Reemplaza por identidad manteniendo la posición.

        Returns:
            True si la entidad existía
        """
        for index, current in enumerate(self._items):
            if current.id == entity.id:
                self._items[index] = entity
                return True
        return False

    @classmethod
    def from_rows(cls, rows: Iterable[Dict[str, Any]], factory: Callable[[Dict[str, Any]], T]) -> 'LocalFallbackSet[T]':
        """
        Construye el set desde registros crudos (semilla).
        Registros inválidos se descartan con un aviso.
        """
        entities = []
        for row in rows:
            try:
                entities.append(factory(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Registro de semilla descartado %r: %s", row, e)
        return cls(entities)
