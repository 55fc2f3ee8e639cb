"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Paginación por defecto compartida por los ViewSets.
--------------------------------------------------------------------------------
"""

from rest_framework.pagination import PageNumberPagination


class DefaultPagination(PageNumberPagination):
    page_size = 20  # Elementos por página
    page_size_query_param = "page_size"  # Parámetro para cambiar tamaño
    max_page_size = 100  # Máximo permitido
