# ==============================================================================
# REPOSITORIO BASE - Acceso a archivos JSON
# ==============================================================================

import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app_shop.utils import atomic_write_json


class BaseRepository(ABC):
    """
    Clase base abstracta para repositorios en archivos JSON.
    Lectura/escritura con lock y escritura atómica (temporal + rename).
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Args:
            file_path: Ruta absoluta al archivo JSON de datos
        """
        self.file_path = file_path

    @abstractmethod
    def _empty_data(self) -> Any:
        """Estructura vacía (dict, list, etc.) para un archivo inexistente."""

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados, o la estructura vacía si el archivo no existe

        Raises:
            json.JSONDecodeError: Si el archivo tiene JSON inválido
            OSError: Si hay error de lectura
        """
        with self._file_lock:
            if not os.path.exists(self.file_path):
                return self._empty_data()
            with open(self.file_path, 'r', encoding='utf-8') as f:
                return json.load(f)

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON.

        Raises:
            OSError: Si hay error de escritura
        """
        with self._file_lock:
            atomic_write_json(self.file_path, data)


class ListRepository(BaseRepository):
    """
    Repositorio para datos almacenados como lista de registros con 'id'.

    Ejemplo: customers.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def prepend(self, record: Dict[str, Any]) -> None:
        """Agrega un registro al inicio (más reciente primero)."""
        with self._file_lock:
            data = self.get_all()
            data.insert(0, record)
            self._write_raw(data)

    def find_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        for record in self.get_all():
            if str(record.get('id')) == str(record_id):
                return record
        return None

    def replace(self, record_id: str, record: Dict[str, Any]) -> bool:
        """
        Reemplaza un registro manteniendo su posición.

        Returns:
            True si el registro existía
        """
        with self._file_lock:
            data = self.get_all()
            for index, current in enumerate(data):
                if str(current.get('id')) == str(record_id):
                    data[index] = record
                    self._write_raw(data)
                    return True
        return False

    def remove(self, record_id: str) -> Optional[Dict[str, Any]]:
        """
        Elimina un registro.

        Returns:
            Registro eliminado o None si no existía
        """
        with self._file_lock:
            data = self.get_all()
            for index, current in enumerate(data):
                if str(current.get('id')) == str(record_id):
                    removed = data.pop(index)
                    self._write_raw(data)
                    return removed
        return None


class SeedRepository(BaseRepository):
    """
    Archivo semilla del LocalFallbackSet.

    Formato:
    {
        "customers": [{...}],
        "products": [{...}],
        "employees": [{...}],
        "receipts": [{...}]
    }
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_collection(self, name: str) -> List[Dict[str, Any]]:
        data = self._read_raw()
        rows = data.get(name, []) if isinstance(data, dict) else []
        return rows if isinstance(rows, list) else []
