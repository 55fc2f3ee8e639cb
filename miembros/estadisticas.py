"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Estadísticas de miembros (totales por grado y estado).
                       El resultado se guarda en la caché TTL por cada alcance de
                       visibilidad y se invalida cuando cambia algún miembro.
--------------------------------------------------------------------------------
"""

import logging

from django.db.models import Count

from core.cache import CacheConTTL
from core.roles import JERARQUIA_GRADOS

from .models import Miembro

logger = logging.getLogger(__name__)

PREFIJO = "miembros"

# Un alcance por cada conjunto de grados visible (aprendiz, aprendiz+compañero, todos).
ALCANCES = [tuple(JERARQUIA_GRADOS[: i + 1]) for i in range(len(JERARQUIA_GRADOS))]


def _clave(grados) -> str:
    return "estadisticas:" + "-".join(grados)


def calcular_estadisticas(grados) -> dict:
    qs = Miembro.objects.filter(grado__in=grados).order_by()
    por_grado = dict(qs.values_list("grado").annotate(total=Count("id")))
    por_estado = dict(qs.values_list("estado").annotate(total=Count("id")))

    total = sum(por_grado.values())
    activos = por_estado.get(Miembro.Estados.ACTIVO, 0)
    return {
        "total_miembros": total,
        "activos": activos,
        "inactivos": por_estado.get(Miembro.Estados.INACTIVO, 0),
        "suspendidos": por_estado.get(Miembro.Estados.SUSPENDIDO, 0),
        "porcentaje_activos": round(activos * 100 / total, 1) if total else 0,
        "distribucion_por_grado": {grado: por_grado.get(grado, 0) for grado in JERARQUIA_GRADOS},
    }


def obtener_estadisticas(grados, cache: CacheConTTL = None) -> dict:
    cache = cache or CacheConTTL(prefijo=PREFIJO)
    grados = tuple(g for g in JERARQUIA_GRADOS if g in grados)
    return cache.obtener_o_calcular(_clave(grados), lambda: calcular_estadisticas(grados))


def invalidar_estadisticas(cache: CacheConTTL = None) -> None:
    cache = cache or CacheConTTL(prefijo=PREFIJO)
    for grados in ALCANCES:
        cache.eliminar(_clave(grados))
    logger.debug("Estadísticas de miembros invalidadas")
