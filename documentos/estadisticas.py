"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Estadísticas de la biblioteca de documentos: totales por
                       categoría y tipo de archivo, estado de las planchas y uso
                       (descargas y visualizaciones).
--------------------------------------------------------------------------------
"""

from django.db.models import Count, Q, Sum

from .models import Documento


def calcular_estadisticas(documentos) -> dict:
    """'documentos' es el queryset ya filtrado por lo que el usuario puede ver."""
    documentos = documentos.order_by()
    por_categoria = dict(documentos.values_list("categoria").annotate(total=Count("id")))
    planchas = documentos.aggregate(
        total=Count("id", filter=Q(es_plancha=True)),
        pendientes=Count("id", filter=Q(es_plancha=True, plancha_estado=Documento.EstadosPlancha.PENDIENTE)),
        aprobadas=Count("id", filter=Q(es_plancha=True, plancha_estado=Documento.EstadosPlancha.APROBADA)),
        rechazadas=Count("id", filter=Q(es_plancha=True, plancha_estado=Documento.EstadosPlancha.RECHAZADA)),
    )
    uso = documentos.aggregate(total_descargas=Sum("descargas"), total_visualizaciones=Sum("visualizaciones"))

    return {
        "total": sum(por_categoria.values()),
        "por_categoria": {categoria: por_categoria.get(categoria, 0) for categoria in Documento.Categorias.values},
        "por_tipo": dict(documentos.values_list("tipo").annotate(total=Count("id"))),
        "planchas": planchas,
        # Sum() retorna None cuando no hay filas.
        "uso": {clave: valor or 0 for clave, valor in uso.items()},
    }
