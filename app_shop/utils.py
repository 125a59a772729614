# ==============================================================================
# UTILIDADES - Fechas, identificadores y JSON
# ==============================================================================

import calendar
import json
import os
import re
import uuid
from datetime import date, datetime, time, timezone
from typing import Any, Optional

# Prefijo reservado para identidades generadas localmente (modo degradado).
# Un backend nunca asigna IDs con este prefijo, así no hay colisiones si
# algún día se reconcilian los datos.
LOCAL_ID_PREFIX = 'local-'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_local_id() -> str:
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


def is_local_id(entity_id: str) -> bool:
    return str(entity_id).startswith(LOCAL_ID_PREFIX)


def ensure_utc(dt: datetime) -> datetime:
    """Fechas sin zona horaria se asumen UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Convierte un valor a datetime UTC.

    Acepta datetime, date, ISO 8601 (con 'Z' o con offset) y 'YYYY-MM-DD'.
    Retorna None si no puede parsear.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    try:
        return ensure_utc(datetime.fromisoformat(str(value).strip().replace('Z', '+00:00')))
    except (ValueError, TypeError):
        return None


def parse_date(value: Any) -> Optional[date]:
    """Fecha de calendario desde date/datetime/'YYYY-MM-DD'."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], '%Y-%m-%d').date()
    except (ValueError, TypeError):
        return None


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()


def add_months(dt: datetime, months: int) -> datetime:
    """Suma meses de calendario (el día se ajusta al último del mes destino)."""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def digits_only(text: str) -> str:
    return re.sub(r'\D', '', text or '')


def atomic_write_json(path: str, data: Any) -> None:
    """Escribe a un temporal y lo renombra (operación atómica)."""
    tmp = path + '.tmp'
    os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
    try:
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except Exception:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
