"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Modelos del calendario de la logia:
                       - Programa: tenidas, instrucciones, cámaras y demás
                         actividades, clasificadas por grado.
                       - Asistencia: registro único por (programa, miembro) con
                         confirmación previa y asistencia efectiva.
--------------------------------------------------------------------------------
"""

from django.conf import settings
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class Programa(models.Model):

    class Grados(models.TextChoices):
        APRENDIZ  = "aprendiz",  "Aprendiz"
        COMPANERO = "companero", "Compañero"
        MAESTRO   = "maestro",   "Maestro"
        GENERAL   = "general",   "General"

    class Tipos(models.TextChoices):
        TENIDA      = "tenida",      "Tenida"
        INSTRUCCION = "instruccion", "Instrucción"
        CAMARA      = "camara",      "Cámara"
        TRABAJO     = "trabajo",     "Trabajo"
        CEREMONIA   = "ceremonia",   "Ceremonia"
        REUNION     = "reunion",     "Reunión"

    class Estados(models.TextChoices):
        PENDIENTE  = "pendiente",  "Pendiente"
        PROGRAMADO = "programado", "Programado"
        COMPLETADO = "completado", "Completado"
        CANCELADO  = "cancelado",  "Cancelado"

    tema = models.CharField(max_length=255, validators=[MinLengthValidator(3)])
    fecha = models.DateTimeField(db_index=True)
    encargado = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    quien_imparte = models.CharField(max_length=100, blank=True, default="")
    resumen = models.TextField(blank=True, default="")

    grado = models.CharField(max_length=20, choices=Grados.choices, db_index=True)
    tipo = models.CharField(max_length=20, choices=Tipos.choices)
    estado = models.CharField(max_length=20, choices=Estados.choices, default=Estados.PENDIENTE, db_index=True)

    ubicacion = models.CharField(max_length=200, blank=True, default="")
    detalles_adicionales = models.TextField(blank=True, default="")
    documentos = models.ManyToManyField("documentos.Documento", blank=True, related_name="programas")

    requiere_confirmacion = models.BooleanField(default=True)
    limite_asistentes = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])

    responsable = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="programas_a_cargo"
    )
    observaciones = models.TextField(blank=True, default="")
    activo = models.BooleanField(default=True, db_index=True)

    creado = models.DateTimeField(auto_now_add=True)
    actualizado = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["fecha"]
        verbose_name = "Programa"
        verbose_name_plural = "Programas"

    @property
    def es_futuro(self) -> bool:
        return self.fecha > timezone.now()

    @property
    def dias_restantes(self) -> int:
        if not self.es_futuro:
            return 0
        diferencia = self.fecha - timezone.now()
        # Redondeo hacia arriba: faltan 25 horas => 2 días.
        return diferencia.days + (1 if diferencia.seconds or diferencia.microseconds else 0)

    @property
    def cupos_disponibles(self):
        if self.limite_asistentes is None:
            return None
        return max(self.limite_asistentes - self.asistencias.count(), 0)

    def __str__(self):
        return f"{self.tema} ({self.fecha:%d/%m/%Y})"


class Asistencia(models.Model):

    class TiposAsistencia(models.TextChoices):
        PRESENTE    = "presente",    "Presente"
        JUSTIFICADO = "justificado", "Justificado"
        AUSENTE     = "ausente",     "Ausente"

    programa = models.ForeignKey(Programa, on_delete=models.CASCADE, related_name="asistencias")
    miembro = models.ForeignKey("miembros.Miembro", on_delete=models.CASCADE, related_name="asistencias")

    asistio = models.BooleanField(default=False, db_index=True)
    confirmado = models.BooleanField(default=False, db_index=True)
    justificacion = models.TextField(blank=True, default="")

    registrado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="asistencias_registradas"
    )
    hora_registro = models.DateTimeField(default=timezone.now)
    hora_llegada = models.TimeField(null=True, blank=True)
    observaciones = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["miembro__apellidos", "miembro__nombres"]
        verbose_name = "Asistencia"
        verbose_name_plural = "Asistencias"
        constraints = [
            models.UniqueConstraint(fields=["programa", "miembro"], name="asistencia_programa_miembro_unica"),
        ]

    @property
    def tipo_asistencia(self) -> str:
        if self.asistio:
            return self.TiposAsistencia.PRESENTE
        if self.justificacion and self.justificacion.strip():
            return self.TiposAsistencia.JUSTIFICADO
        return self.TiposAsistencia.AUSENTE

    def __str__(self):
        return f"{self.miembro} - {self.programa} ({self.tipo_asistencia})"
