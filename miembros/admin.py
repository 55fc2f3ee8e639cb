"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Panel de administración para Miembro.
--------------------------------------------------------------------------------
"""

from django.contrib import admin

from .models import Miembro


@admin.register(Miembro)
class MiembroAdmin(admin.ModelAdmin):
    list_display = ("apellidos", "nombres", "rut", "grado", "estado", "vigente")
    list_filter = ("grado", "estado", "vigente")
    search_fields = ("nombres", "apellidos", "rut", "email")
