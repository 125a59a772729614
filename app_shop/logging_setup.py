# ==============================================================================
# LOGGING
# ==============================================================================
# Cada módulo usa su propio logger: logging.getLogger(__name__)
# Este módulo solo configura el handler de consola una vez.
# Formato: [NIVEL] modulo: mensaje  (igual que los avisos [ADVERTENCIA] de consola)
# ==============================================================================

import logging
from typing import Optional

from app_shop import config

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configura el logger raíz del paquete.

    Args:
        level: Nivel de log (por defecto SHOP_LOG_LEVEL)
    """
    global _configured
    logger = logging.getLogger('app_shop')
    logger.setLevel(level or config.LOG_LEVEL)
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)
    _configured = True
