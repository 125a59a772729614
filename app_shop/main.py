# ==============================================================================
# API JSON - Capa de presentación sobre DataFacade
# ==============================================================================
# Las rutas NO tienen lógica de negocio: validan la entrada HTTP y llaman
# a la fachada. Respuestas con el formato {"success": bool, ...}.
#
# ENDPOINTS (collection = customers | products | employees | receipts | services):
#   GET    /api/<collection>?q=texto   → listado / búsqueda
#   GET    /api/<collection>/<id>      → detalle
#   POST   /api/<collection>           → alta
#   PATCH  /api/<collection>/<id>      → modificación (no para receipts)
#   DELETE /api/<collection>/<id>      → baja lógica
#   GET    /api/reports?start=YYYY-MM-DD&end=YYYY-MM-DD
#   GET    /api/reports?period=today|week|month|last30[&compare=1]
#   GET    /api/status                 → modo degradado y errores
#   DELETE /api/status/errors          → limpia los errores
#
# Errores: NotFoundError → 404, ValidationError → 400.
# La fecha mínima de recibos (MIN_RECEIPT_DATE) se valida AQUÍ, no en el núcleo.
# ==============================================================================

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, current_app, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from app_shop import config
from app_shop.app_container import get_container
from app_shop.errors import NotFoundError, ValidationError
from app_shop.logging_setup import configure_logging
from app_shop.services import DataFacade
from app_shop.utils import parse_timestamp

logger = logging.getLogger(__name__)

FACADE_KEY = 'app_shop.facade'

# Métodos de la fachada por colección: (buscar, obtener, crear, actualizar, eliminar)
OPERATIONS = {
    'customers': ('search_customers', 'get_customer_by_id', 'add_customer', 'update_customer', 'delete_customer'),
    'products': ('search_products', 'get_product_by_id', 'add_product', 'update_product', 'delete_product'),
    'employees': ('search_employees', 'get_employee_by_id', 'add_employee', 'update_employee', 'delete_employee'),
    'receipts': ('search_receipts', 'get_receipt_by_id', 'add_receipt', None, 'delete_receipt'),
    'services': ('search_services', 'get_service_by_id', 'add_service', 'update_service', 'delete_service'),
}

api = Blueprint('api', __name__, url_prefix='/api')


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

async def get_facade() -> DataFacade:
    """Fachada de la app; la primera vez carga las colecciones."""
    facade = current_app.extensions[FACADE_KEY]
    if not facade.loaded:
        await facade.load_all()
    return facade


def _operation(collection: str, index: int):
    operations = OPERATIONS.get(collection)
    if operations is None:
        raise NotFound(f"Colección desconocida: {collection}")
    name = operations[index]
    if name is None:
        raise MethodNotAllowed(description=f"Operación no disponible para {collection}")
    return name


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Se esperaba un objeto JSON en el cuerpo")
    return data


def _check_receipt_date(data: Dict[str, Any]) -> None:
    """Rechaza recibos con fecha anterior a MIN_RECEIPT_DATE."""
    if data.get('created_at') in (None, ''):
        return
    created_at = parse_timestamp(data['created_at'])
    if created_at is None:
        raise ValidationError(f"Fecha inválida: {data['created_at']!r}", field='created_at')
    if created_at.date() < config.MIN_RECEIPT_DATE:
        raise ValidationError(
            f"La fecha del recibo no puede ser anterior a {config.MIN_RECEIPT_DATE.isoformat()}",
            field='created_at'
        )


def _receipt_detail(facade: DataFacade, receipt) -> Dict[str, Any]:
    customer = facade.get_customer_by_id(receipt.customer_id)
    employee = facade.get_employee_by_id(receipt.employee_id)
    detail = receipt.to_dict()
    detail['customer_name'] = customer.name if customer else None
    detail['employee_name'] = employee.name if employee else None
    detail['lines'] = facade.receipt_lines(receipt)
    return detail


# ═══════════════════════════════════════════════════════════════════════════
# ENTIDADES
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/<collection>', methods=['GET'])
async def list_entities(collection):
    search = _operation(collection, 0)
    facade = await get_facade()
    items = getattr(facade, search)(request.args.get('q', ''))
    return {"success": True, "count": len(items), "items": [item.to_dict() for item in items]}


@api.route('/<collection>/<entity_id>', methods=['GET'])
async def get_entity(collection, entity_id):
    getter = _operation(collection, 1)
    facade = await get_facade()
    entity = getattr(facade, getter)(entity_id)
    if entity is None:
        return {"success": False, "error": f"'{entity_id}' no encontrado"}, 404
    if collection == 'receipts':
        return {"success": True, "item": _receipt_detail(facade, entity)}
    return {"success": True, "item": entity.to_dict()}


@api.route('/<collection>', methods=['POST'])
async def create_entity(collection):
    create = _operation(collection, 2)
    data = _json_body()
    if collection == 'receipts':
        _check_receipt_date(data)
    facade = await get_facade()
    entity = await getattr(facade, create)(data)
    return {"success": True, "item": entity.to_dict()}, 201


@api.route('/<collection>/<entity_id>', methods=['PATCH'])
async def update_entity(collection, entity_id):
    update = _operation(collection, 3)
    data = _json_body()
    facade = await get_facade()
    entity = await getattr(facade, update)(entity_id, data)
    return {"success": True, "item": entity.to_dict()}


@api.route('/<collection>/<entity_id>', methods=['DELETE'])
async def delete_entity(collection, entity_id):
    delete = _operation(collection, 4)
    facade = await get_facade()
    await getattr(facade, delete)(entity_id)
    return {"success": True}


# ═══════════════════════════════════════════════════════════════════════════
# REPORTES Y ESTADO
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/reports', methods=['GET'])
async def sales_report():
    facade = await get_facade()
    start = request.args.get('start')
    end = request.args.get('end')
    period = request.args.get('period') or ('custom' if start and end else 'today')

    if request.args.get('compare') in ('1', 'true'):
        comparison = facade.compare_with_previous_period(period, start, end)
        return {
            "success": True,
            "current": comparison['current'].to_dict(),
            "previous": comparison['previous'].to_dict(),
            "change": comparison['change'],
        }

    if start and end:
        report = facade.generate_report(start, end)
    else:
        report = facade.generate_report_for_period(period, start, end)
    return {"success": True, "report": report.to_dict()}


@api.route('/status', methods=['GET'])
async def status():
    facade = await get_facade()
    return {"success": True, **facade.status()}


@api.route('/status/errors', methods=['DELETE'])
async def clear_errors():
    facade = await get_facade()
    facade.clear_errors()
    return {"success": True}


# ═══════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════

def _not_found(error: NotFoundError):
    return {"success": False, "error": str(error)}, 404


def _invalid(error: ValidationError):
    return {"success": False, "error": str(error), "field": error.field}, 400


def _http_error(error: HTTPException):
    return {"success": False, "error": error.description}, error.code


# ═══════════════════════════════════════════════════════════════════════════
# FÁBRICA DE LA APP
# ═══════════════════════════════════════════════════════════════════════════

def create_app(facade: Optional[DataFacade] = None) -> Flask:
    """
    Crea la aplicación Flask.

    Args:
        facade: Fachada a exponer (default: la del AppContainer)
    """
    configure_logging()
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.extensions[FACADE_KEY] = facade or get_container().facade

    app.register_blueprint(api)
    app.register_error_handler(NotFoundError, _not_found)
    app.register_error_handler(ValidationError, _invalid)
    app.register_error_handler(HTTPException, _http_error)

    logger.info("API lista (backend: %s)", config.REMOTE_URL or config.DATA_DIR)
    return app


if __name__ == '__main__':
    # Un solo hilo: los stores serializan sus operaciones dentro de un event loop
    create_app().run(host=config.HOST, port=config.PORT, debug=config.DEBUG, threaded=False)
