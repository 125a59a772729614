# ==============================================================================
# INTERFACES DE REPOSITORIOS - CONTRATO DEL BACKEND REMOTO
# ==============================================================================
#
# Todo backend (HTTP, archivos JSON, base de datos) implementa el mismo
# contrato de 4 operaciones por tipo de entidad. Esto permite:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - EntityStore depende de esta interfaz, NO de una implementación
#    - Cambiar de backend solo requiere una nueva clase gateway
#
# 2. TESTING
#    - Fácil crear gateways falsos que fallen a pedido
#
# REGLAS DEL CONTRATO:
# - Sin reintentos dentro del gateway: el manejo de fallas es de EntityStore
# - Nunca tragarse una escritura parcial: si algo falla, se lanza excepción
# - Errores: TransportError, NotFoundError, ValidationError (app_shop.errors)
#
# ==============================================================================

from typing import Any, Dict, List, Protocol, TypeVar, runtime_checkable

T = TypeVar('T')


@runtime_checkable
class IRemoteGateway(Protocol[T]):
    """
    Interfaz del backend remoto para UN tipo de entidad.
    """

    async def list(self) -> List[T]:
        """
        Lista todas las entidades (más recientes primero).

        Raises:
            TransportError
        """
        ...

    async def create(self, data: Dict[str, Any]) -> T:
        """
        Crea una entidad. El backend asigna identidad y fecha.

        Raises:
            TransportError, ValidationError
        """
        ...

    async def update(self, entity_id: str, data: Dict[str, Any]) -> T:
        """
        Actualiza campos de una entidad y la retorna completa.

        Raises:
            NotFoundError, TransportError
        """
        ...

    async def delete(self, entity_id: str) -> None:
        """
        Elimina una entidad.

        Raises:
            NotFoundError, TransportError
        """
        ...
