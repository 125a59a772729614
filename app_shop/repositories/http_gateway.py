# ==============================================================================
# GATEWAY HTTP - Backend remoto REST
# ==============================================================================
# Un recurso REST por tipo de entidad:
#   GET    {base}/{resource}          → lista
#   POST   {base}/{resource}          → crea (retorna la entidad)
#   PATCH  {base}/{resource}/{id}     → actualiza (retorna la entidad)
#   DELETE {base}/{resource}/{id}     → elimina
#
# Mapeo de fallas:
#   red / timeout / 5xx / respuesta ilegible → TransportError
#   404                                      → NotFoundError
#   400 / 422                                → ValidationError
# Sin reintentos: EntityStore decide qué hacer con cada falla.
#
# Sin cliente inyectado se abre un httpx.AsyncClient por request: las vistas
# async de Flask corren cada request en un event loop distinto.
# ==============================================================================

import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import httpx

from app_shop.errors import NotFoundError, TransportError, ValidationError
from app_shop.repositories.mapping import FieldMapping

logger = logging.getLogger(__name__)

T = TypeVar('T')


class HttpGateway(Generic[T]):
    """
    Implementación de IRemoteGateway sobre httpx.AsyncClient.

    Uso:
        gateway = HttpGateway(Customer, FieldMapping('customers'), base_url='https://api/rest/v1')
        customers = await gateway.list()
    """

    def __init__(
        self,
        entity_cls: Type[T],
        mapping: FieldMapping,
        base_url: str = '',
        api_key: str = '',
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            entity_cls: Clase de la entidad (Customer, Product, ...)
            mapping: Traducción de campos y nombre del recurso
            base_url: URL base del backend
            api_key: Token enviado como Bearer (opcional)
            timeout: Timeout de cada request en segundos
            client: Cliente httpx compartido (tests / un solo event loop)
        """
        self.entity_cls = entity_cls
        self.mapping = mapping
        self.client = client

        headers = {'Accept': 'application/json'}
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'
        self._client_options = {'base_url': base_url, 'headers': headers, 'timeout': timeout}

    @property
    def resource(self) -> str:
        return self.mapping.resource

    # =========================================================================
    # OPERACIONES
    # =========================================================================

    async def list(self) -> List[T]:
        rows = await self._request('list', 'GET', f'/{self.resource}')
        if not isinstance(rows, list):
            raise TransportError(f"Respuesta inesperada al listar {self.resource}", 'list', self.resource)
        return [self._to_entity(row, 'list') for row in rows]

    async def create(self, data: Dict[str, Any]) -> T:
        row = await self._request('create', 'POST', f'/{self.resource}', json=self.mapping.to_backend(data))
        return self._to_entity(row, 'create')

    async def update(self, entity_id: str, data: Dict[str, Any]) -> T:
        row = await self._request(
            'update', 'PATCH', f'/{self.resource}/{entity_id}',
            json=self.mapping.to_backend(data), entity_id=entity_id
        )
        return self._to_entity(row, 'update')

    async def delete(self, entity_id: str) -> None:
        await self._request('delete', 'DELETE', f'/{self.resource}/{entity_id}', entity_id=entity_id)

    # =========================================================================
    # INTERNOS
    # =========================================================================

    async def _send(self, method: str, url: str, json: Any = None) -> httpx.Response:
        if self.client is not None:
            return await self.client.request(method, url, json=json)
        async with httpx.AsyncClient(**self._client_options) as client:
            return await client.request(method, url, json=json)

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        json: Any = None,
        entity_id: Optional[str] = None,
    ) -> Any:
        """
        Ejecuta el request y traduce la respuesta a datos o a excepción.

        Returns:
            JSON decodificado (None para respuestas sin cuerpo)
        """
        try:
            response = await self._send(method, url, json=json)
        except httpx.TimeoutException as e:
            raise TransportError(f"Timeout en {operation} {self.resource}: {e}", operation, self.resource) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Falla de red en {operation} {self.resource}: {e}", operation, self.resource) from e

        status = response.status_code
        logger.debug("%s %s → %d", method, url, status)
        if status == 404:
            raise NotFoundError(self.entity_cls.ENTITY_NAME, entity_id)
        if status in (400, 422):
            raise ValidationError(self._error_detail(response) or f"Datos rechazados por el backend ({status})")
        if status >= 400:
            raise TransportError(
                f"Backend respondió {status} en {operation} {self.resource}", operation, self.resource
            )

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Respuesta ilegible en {operation} {self.resource}", operation, self.resource) from e

    def _to_entity(self, row: Any, operation: str) -> T:
        if not isinstance(row, dict):
            raise TransportError(f"Respuesta inesperada en {operation} {self.resource}", operation, self.resource)
        try:
            return self.entity_cls.from_dict(self.mapping.from_backend(row))
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(
                f"Registro inválido en {operation} {self.resource}: {e}", operation, self.resource
            ) from e

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get('error') or body.get('detail') or body.get('message') or '')
        return ''
