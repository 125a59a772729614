# ==============================================================================
# CONFIGURACIÓN - Variables de entorno
# ==============================================================================
# Toda la configuración se lee de variables de entorno con valores por defecto.
# Ejemplo:
#   export SHOP_REMOTE_URL="https://api.mitienda.com/rest/v1"
#   export SHOP_API_KEY="clave_del_backend"
#
# Sin SHOP_REMOTE_URL se usa el backend de archivos JSON en SHOP_DATA_DIR.
# ==============================================================================

import os
from datetime import date

BASE = os.path.dirname(os.path.abspath(__file__))

# ═══════════════════════════════════════════════════════════════════════════════
# BACKEND REMOTO
# ═══════════════════════════════════════════════════════════════════════════════
REMOTE_URL = os.environ.get('SHOP_REMOTE_URL', '').rstrip('/')
API_KEY = os.environ.get('SHOP_API_KEY', '')

# Timeout por operación remota (segundos). Un timeout cuenta como TransportError.
REMOTE_TIMEOUT = float(os.environ.get('SHOP_REMOTE_TIMEOUT', '10'))

# Esquema del backend: 'canonical' o 'legacy' (columnas en portugués)
REMOTE_SCHEMA = os.environ.get('SHOP_REMOTE_SCHEMA', 'canonical')

# ═══════════════════════════════════════════════════════════════════════════════
# DATOS LOCALES
# ═══════════════════════════════════════════════════════════════════════════════
DATA_DIR = os.environ.get('SHOP_DATA_DIR', os.path.join(os.getcwd(), 'data'))

# Semilla del LocalFallbackSet (datos usados cuando el backend no responde)
SEED_FILE = os.environ.get('SHOP_SEED_FILE', os.path.join(BASE, 'data', 'fallback_seed.json'))

# ═══════════════════════════════════════════════════════════════════════════════
# REGLAS DE NEGOCIO
# ═══════════════════════════════════════════════════════════════════════════════
# Fecha mínima aceptada para recibos. La valida la capa de presentación (API),
# el núcleo acepta cualquier fecha válida.
MIN_RECEIPT_DATE = date(2024, 1, 1)

# ═══════════════════════════════════════════════════════════════════════════════
# LOGGING / SERVIDOR
# ═══════════════════════════════════════════════════════════════════════════════
LOG_LEVEL = os.environ.get('SHOP_LOG_LEVEL', 'INFO').upper()

_DEFAULT_SECRET = "app_shop_dev_secret_key_change_in_production"
SECRET_KEY = os.environ.get('SHOP_SECRET_KEY') or _DEFAULT_SECRET

HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
PORT = int(os.environ.get('FLASK_PORT', 5000))
DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
