# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Gateways y fachada
# ==============================================================================
# Punto único donde se decide QUÉ backend se usa:
#   - SHOP_REMOTE_URL definido → HttpGateway (REST)
#   - sin SHOP_REMOTE_URL      → JsonFileGateway (archivos en SHOP_DATA_DIR)
#
# Los services NO cambian al cambiar de backend: dependen de IRemoteGateway.
# ==============================================================================

import logging
from typing import Dict, Optional

from app_shop import config
from app_shop.models import Customer, Employee, Product, Receipt, ServiceOrder
from app_shop.repositories import (
    HttpGateway,
    IRemoteGateway,
    JsonFileGateway,
    SeedRepository,
    default_mapping,
)
from app_shop.services import DataFacade

logger = logging.getLogger(__name__)

ENTITY_CLASSES = {
    'customers': Customer,
    'products': Product,
    'employees': Employee,
    'receipts': Receipt,
    'services': ServiceOrder,
}


class AppContainer:
    """
    Contenedor de dependencias de la aplicación (singleton).

    Uso:
        container = AppContainer.get_instance()
        facade = container.facade
        await facade.load_all()
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, remote_url: str = None, data_dir: str = None, seed_file: str = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, remote_url: str = None, data_dir: str = None, seed_file: str = None):
        """
        Args:
            remote_url: URL del backend REST (default: SHOP_REMOTE_URL)
            data_dir: Carpeta del backend JSON (default: SHOP_DATA_DIR)
            seed_file: Semilla de los datos locales (default: SHOP_SEED_FILE)
        """
        if self._initialized:
            return

        self._remote_url = config.REMOTE_URL if remote_url is None else remote_url
        self._data_dir = data_dir or config.DATA_DIR
        self._seed_file = seed_file or config.SEED_FILE

        # Lazy loading
        self._gateways: Optional[Dict[str, IRemoteGateway]] = None
        self._facade: Optional[DataFacade] = None

        self._initialized = True

    # =========================================================================
    # GATEWAYS
    # =========================================================================

    @property
    def gateways(self) -> Dict[str, IRemoteGateway]:
        """Un gateway por colección (singleton)."""
        if self._gateways is None:
            if self._remote_url:
                logger.info("Backend REST: %s (esquema %s)", self._remote_url, config.REMOTE_SCHEMA)
                self._gateways = {
                    name: HttpGateway(
                        entity_cls,
                        default_mapping(name, config.REMOTE_SCHEMA),
                        base_url=self._remote_url,
                        api_key=config.API_KEY,
                        timeout=config.REMOTE_TIMEOUT,
                    )
                    for name, entity_cls in ENTITY_CLASSES.items()
                }
            else:
                logger.info("Backend de archivos JSON en %s", self._data_dir)
                self._gateways = {
                    name: JsonFileGateway(entity_cls, self._data_dir, name)
                    for name, entity_cls in ENTITY_CLASSES.items()
                }
        return self._gateways

    # =========================================================================
    # FACHADA
    # =========================================================================

    def load_seed(self) -> Dict[str, list]:
        """Registros de la semilla, por colección (vacío si no hay archivo)."""
        seed_repo = SeedRepository(self._seed_file)
        return {name: seed_repo.get_collection(name) for name in ENTITY_CLASSES}

    @property
    def facade(self) -> DataFacade:
        """Fachada de datos (singleton)."""
        if self._facade is None:
            gateways = self.gateways
            self._facade = DataFacade(
                gateways['customers'],
                gateways['products'],
                gateways['employees'],
                gateways['receipts'],
                gateways['services'],
                seed=self.load_seed(),
                timeout=config.REMOTE_TIMEOUT,
            )
        return self._facade

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """Reinicia todas las instancias (testing / recarga)."""
        self._gateways = None
        self._facade = None

    @classmethod
    def get_instance(cls, remote_url: str = None, data_dir: str = None, seed_file: str = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.
        Los argumentos solo se usan en la primera llamada.
        """
        if cls._instance is None:
            return cls(remote_url, data_dir, seed_file)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(remote_url: str = None, data_dir: str = None, seed_file: str = None) -> AppContainer:
    """Obtiene el contenedor de dependencias global."""
    return AppContainer.get_instance(remote_url, data_dir, seed_file)
