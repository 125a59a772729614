# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT --workers 1 --threads 1
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── app_shop/        <- Paquete Python
#       ├── main.py
#       ├── services/
#       └── repositories/
#
# Un solo worker y un solo hilo: cada worker tiene su propia copia en memoria
# de las colecciones (DataFacade).
# ==============================================================================

from app_shop import config
from app_shop.main import create_app

app = create_app()

if __name__ == '__main__':
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG, threaded=False)
