"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Registro de Documento en el panel de administración.
--------------------------------------------------------------------------------
"""

# Importa el sitio de administración de Django.
from django.contrib import admin

from .models import Documento


@admin.register(Documento)
class DocumentoAdmin(admin.ModelAdmin):
    list_display = ("nombre", "categoria", "tipo", "es_plancha", "plancha_estado", "subido_por", "creado")
    list_filter = ("categoria", "tipo", "es_plancha", "plancha_estado", "activo")
    search_fields = ("nombre", "descripcion", "palabras_clave")
