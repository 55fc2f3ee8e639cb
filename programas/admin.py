"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Registro de Programa y Asistencia en el panel de
                       administración, con la asistencia en línea.
--------------------------------------------------------------------------------
"""

# Importa el sitio de administración de Django.
from django.contrib import admin

from .models import Asistencia, Programa


class AsistenciaInline(admin.TabularInline):
    model = Asistencia
    extra = 0
    autocomplete_fields = ("miembro",)


@admin.register(Programa)
class ProgramaAdmin(admin.ModelAdmin):
    list_display = ("tema", "fecha", "grado", "tipo", "estado", "activo")
    list_filter = ("grado", "tipo", "estado", "activo")
    search_fields = ("tema", "encargado", "quien_imparte")
    inlines = [AsistenciaInline]


@admin.register(Asistencia)
class AsistenciaAdmin(admin.ModelAdmin):
    list_display = ("programa", "miembro", "asistio", "confirmado")
    list_filter = ("asistio", "confirmado")
