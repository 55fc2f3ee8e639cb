"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Modelo 'Notificacion': avisos internos dirigidos a un
                       usuario (nuevo programa, documento, plancha moderada...).
                       Pueden tener fecha de expiración; las vencidas no se
                       muestran y se purgan periódicamente.
--------------------------------------------------------------------------------
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class NotificacionQuerySet(models.QuerySet):
    def vigentes(self):
        """Sin expiración o con expiración futura."""
        return self.filter(Q(expira_en__isnull=True) | Q(expira_en__gt=timezone.now()))

    def no_leidas(self):
        return self.filter(leido=False)

    def expiradas(self):
        return self.filter(expira_en__lt=timezone.now())


class Notificacion(models.Model):

    class Tipos(models.TextChoices):
        PROGRAMA       = "programa",       "Programa"
        DOCUMENTO      = "documento",      "Documento"
        MIEMBRO        = "miembro",        "Miembro"
        ADMINISTRATIVO = "administrativo", "Administrativo"
        SISTEMA        = "sistema",        "Sistema"
        PLANCHA        = "plancha",        "Plancha"
        ASISTENCIA     = "asistencia",     "Asistencia"

    class Prioridades(models.TextChoices):
        BAJA    = "baja",    "Baja"
        NORMAL  = "normal",  "Normal"
        ALTA    = "alta",    "Alta"
        URGENTE = "urgente", "Urgente"

    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notificaciones")
    titulo  = models.CharField(max_length=255)
    mensaje = models.TextField(max_length=1000)
    tipo    = models.CharField(max_length=20, choices=Tipos.choices, db_index=True)
    prioridad = models.CharField(max_length=10, choices=Prioridades.choices, default=Prioridades.NORMAL)

    leido    = models.BooleanField(default=False, db_index=True)
    leido_en = models.DateTimeField(null=True, blank=True)

    # Objeto relacionado (programa, documento, miembro...).
    relacionado_tipo = models.CharField(max_length=20, blank=True, default="")
    relacionado_id   = models.PositiveBigIntegerField(null=True, blank=True)
    accion_url       = models.CharField(max_length=500, blank=True, default="")

    remitente = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notificaciones_enviadas",
    )

    expira_en = models.DateTimeField(null=True, blank=True, db_index=True)
    creado = models.DateTimeField(auto_now_add=True)

    objects = NotificacionQuerySet.as_manager()

    class Meta:
        ordering = ["-creado"]
        verbose_name = "Notificación"
        verbose_name_plural = "Notificaciones"
        indexes = [models.Index(fields=["relacionado_tipo", "relacionado_id"], name="notif_relacionado_idx")]

    @property
    def expirada(self) -> bool:
        return self.expira_en is not None and timezone.now() > self.expira_en

    def __str__(self):
        return f"{self.usuario} - {self.titulo}"
