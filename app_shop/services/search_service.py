# ==============================================================================
# BÚSQUEDA - Filtro por subcadena sobre un snapshot
# ==============================================================================
# Sin estado: recibe el snapshot, la consulta y los extractores de campos.
# - Consulta vacía / solo espacios → todo lo no borrado
# - Insensible a mayúsculas, coincide si ALGÚN campo contiene la consulta
# - Mantiene el orden del snapshot (sin ranking)
# ==============================================================================

from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from app_shop.utils import digits_only

T = TypeVar('T')

Extractor = Callable[[T], Optional[str]]


class SearchIndex:
    """Búsqueda por subcadena, insensible a mayúsculas."""

    @staticmethod
    def search(snapshot: Iterable[T], query: Optional[str], extractors: Sequence[Extractor]) -> List[T]:
        """
        Filtra el snapshot.

        Args:
            snapshot: Entidades en orden
            query: Texto buscado (None o vacío = sin filtro)
            extractors: Funciones entidad → texto del campo

        Returns:
            Nueva lista con las coincidencias, en el orden original
        """
        active = [entity for entity in snapshot if not getattr(entity, 'deleted', False)]
        q = (query or '').strip().lower()
        if not q:
            return active

        results = []
        for entity in active:
            for extract in extractors:
                value = extract(entity)
                if value and q in str(value).lower():
                    results.append(entity)
                    break
        return results


# ==============================================================================
# CAMPOS BUSCABLES POR ENTIDAD
# ==============================================================================

CUSTOMER_FIELDS: List[Extractor] = [
    lambda c: c.name,
    lambda c: c.email,
    lambda c: c.phone,
    lambda c: digits_only(c.phone),
]

PRODUCT_FIELDS: List[Extractor] = [
    lambda p: p.name,
    lambda p: p.description,
]

EMPLOYEE_FIELDS: List[Extractor] = [
    lambda e: e.name,
    lambda e: e.email,
    lambda e: e.phone,
    lambda e: digits_only(e.phone),
]


def receipt_fields(customer_name: Callable[[str], Optional[str]]) -> List[Extractor]:
    """
    Campos de recibo: nombre del cliente (resuelto en el momento) e ID.

    Args:
        customer_name: customer_id → nombre (None si no existe)
    """
    return [
        lambda r: customer_name(r.customer_id),
        lambda r: r.id,
    ]


def service_fields(customer_name: Callable[[str], Optional[str]]) -> List[Extractor]:
    """Campos de orden de servicio: equipo, modelo, falla y nombre del cliente."""
    return [
        lambda s: s.device,
        lambda s: s.model,
        lambda s: s.problem,
        lambda s: customer_name(s.customer_id),
    ]
