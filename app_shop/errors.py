# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Taxonomía de errores del núcleo:
#   - TransportError  → backend remoto caído o con error. SIEMPRE se recupera
#                       localmente (LocalFallbackSet), nunca llega al usuario.
#   - NotFoundError   → la entidad a actualizar/eliminar no existe.
#   - ValidationError → datos de entrada mal formados (falta un campo, etc).
# Los dos últimos SÍ se propagan al llamador.
# ==============================================================================

from typing import Any, Optional


class ShopError(Exception):
    """Error base de la aplicación."""


class TransportError(ShopError):
    """
    El backend remoto no respondió o respondió con error.

    Attributes:
        operation: Operación que falló (list, create, update, delete)
        resource: Colección remota involucrada
    """

    def __init__(self, message: str, operation: str = '', resource: str = ''):
        super().__init__(message)
        self.operation = operation
        self.resource = resource


class NotFoundError(ShopError):
    """No existe una entidad con ese identificador."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} '{entity_id}' no encontrado")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(ShopError):
    """Entrada inválida: se rechaza sin intentar fallback."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
