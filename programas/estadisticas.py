"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Estadísticas del calendario: programas por estado, tipo y
                       grado, porcentaje general de asistencia y los próximos
                       programas agendados.
--------------------------------------------------------------------------------
"""

from django.db.models import Count, Q
from django.utils import timezone

from .models import Asistencia, Programa

# Cantidad de próximos programas que se listan.
CANTIDAD_PROXIMOS = 5


def _conteo(programas, campo) -> dict:
    return dict(programas.values_list(campo).annotate(total=Count("id")))


def calcular_estadisticas(programas) -> dict:
    programas = programas.order_by()
    asistencia = Asistencia.objects.filter(programa__in=programas).aggregate(
        total=Count("id"), presentes=Count("id", filter=Q(asistio=True))
    )
    total_registros = asistencia["total"]
    return {
        "total_programas": programas.count(),
        "porcentaje_asistencia_general": (
            round(asistencia["presentes"] * 100 / total_registros, 1) if total_registros else 0
        ),
        "por_estado": _conteo(programas, "estado"),
        "por_tipo": _conteo(programas, "tipo"),
        "por_grado": _conteo(programas, "grado"),
    }


def proximos_programas(programas, cantidad=CANTIDAD_PROXIMOS):
    return programas.filter(fecha__gte=timezone.now(), estado=Programa.Estados.PROGRAMADO).order_by("fecha")[:cantidad]
