"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Panel de administración para el modelo Perfil.
--------------------------------------------------------------------------------
"""

from django.contrib import admin

from .models import Perfil


@admin.register(Perfil)
class PerfilAdmin(admin.ModelAdmin):
    list_display = ("usuario", "rut", "rol", "grado", "cargo")
    list_filter = ("rol", "grado", "cargo")
    # Usa __ para acceder a campos del usuario relacionado.
    search_fields = ("usuario__username", "usuario__email", "rut")
