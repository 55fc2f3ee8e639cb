"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Caché con tiempo de vida (TTL) sobre un almacén clave-valor
                       inyectado. Cada entrada se guarda junto con la marca de
                       tiempo de escritura y su TTL; al leer una entrada vencida
                       se elimina y se retorna None. En producción el almacén es
                       el framework de caché de Django (Redis o memoria local).
--------------------------------------------------------------------------------
"""

import logging
import time

from django.conf import settings
from django.core.cache import cache as cache_django

logger = logging.getLogger(__name__)

# TTL por defecto: 5 minutos.
TTL_POR_DEFECTO = 300


def ttl_configurado() -> int:
    """Lee ORPHEO['CACHE_TTL_SEGUNDOS'] desde settings, con 5 minutos por defecto."""
    return getattr(settings, "ORPHEO", {}).get("CACHE_TTL_SEGUNDOS", TTL_POR_DEFECTO)


class AlmacenDjangoCache:
    """Adapta el caché de Django a la interfaz get/set/delete del almacén."""

    def __init__(self, backend=None):
        self.backend = backend or cache_django

    def get(self, clave):
        return self.backend.get(clave)

    def set(self, clave, valor):
        # El backend expira la entrada con el mismo TTL que lleva dentro.
        ttl = valor.get("ttl") if isinstance(valor, dict) else None
        self.backend.set(clave, valor, timeout=ttl)

    def delete(self, clave):
        self.backend.delete(clave)


class CacheConTTL:
    """
    Envoltorio TTL sobre cualquier objeto con get(clave), set(clave, valor)
    y delete(clave). Las claves se guardan con un prefijo común.
    """

    def __init__(self, almacen=None, prefijo: str = "orpheo", ttl: int = None, reloj=time.time):
        self.almacen = almacen if almacen is not None else AlmacenDjangoCache()
        self.prefijo = prefijo
        self.ttl = ttl if ttl is not None else ttl_configurado()
        # Reloj inyectable para poder simular el paso del tiempo en pruebas.
        self.reloj = reloj
        # Registro local de claves escritas, usado por limpiar_expirados().
        self._claves = set()

    def _clave(self, clave: str) -> str:
        return f"{self.prefijo}:{clave}"

    def guardar(self, clave: str, datos, ttl: int = None) -> bool:
        """Guarda 'datos' con su marca de tiempo. Retorna False si el almacén falla."""
        entrada = {
            "data": datos,
            "timestamp": self.reloj(),
            "ttl": self.ttl if ttl is None else ttl,
        }
        try:
            self.almacen.set(self._clave(clave), entrada)
        except Exception:
            logger.exception("No se pudo guardar la clave de caché %s", clave)
            return False
        self._claves.add(clave)
        return True

    def _vencida(self, entrada) -> bool:
        return self.reloj() - entrada["timestamp"] > entrada["ttl"]

    def obtener(self, clave: str):
        """Retorna los datos guardados o None si no existen o ya vencieron."""
        try:
            entrada = self.almacen.get(self._clave(clave))
        except Exception:
            logger.exception("No se pudo leer la clave de caché %s", clave)
            return None

        if not isinstance(entrada, dict) or "timestamp" not in entrada:
            return None

        if self._vencida(entrada):
            # Entrada vencida: se elimina al momento de leerla.
            self.eliminar(clave)
            return None
        return entrada["data"]

    def es_valido(self, clave: str) -> bool:
        return self.obtener(clave) is not None

    def eliminar(self, clave: str) -> None:
        try:
            self.almacen.delete(self._clave(clave))
        except Exception:
            logger.exception("No se pudo eliminar la clave de caché %s", clave)
        self._claves.discard(clave)

    def obtener_o_calcular(self, clave: str, funcion, ttl: int = None):
        """Devuelve el valor cacheado o lo calcula con 'funcion' y lo guarda."""
        datos = self.obtener(clave)
        if datos is None:
            datos = funcion()
            self.guardar(clave, datos, ttl=ttl)
        return datos

    def limpiar_expirados(self) -> int:
        """Elimina las entradas vencidas conocidas. Retorna cuántas se borraron."""
        eliminadas = 0
        for clave in list(self._claves):
            entrada = self.almacen.get(self._clave(clave))
            if entrada is None:
                self._claves.discard(clave)
            elif isinstance(entrada, dict) and "timestamp" in entrada and self._vencida(entrada):
                self.eliminar(clave)
                eliminadas += 1
        if eliminadas:
            logger.info("Caché %s: %s entradas expiradas eliminadas", self.prefijo, eliminadas)
        return eliminadas
