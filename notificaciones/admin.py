"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Registro de Notificacion en el panel de administración.
--------------------------------------------------------------------------------
"""

# Importa el sitio de administración de Django.
from django.contrib import admin

from .models import Notificacion


@admin.register(Notificacion)
class NotificacionAdmin(admin.ModelAdmin):
    list_display = ("titulo", "usuario", "tipo", "prioridad", "leido", "creado")
    list_filter = ("tipo", "prioridad", "leido")
    search_fields = ("titulo", "mensaje", "usuario__username")
