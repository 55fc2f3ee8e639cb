"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Modelo 'Miembro': ficha de cada hermano de la logia con sus
                       datos personales, grado masónico, estado y cargo. El RUT
                       es único y se guarda en formato 12.345.678-5.
--------------------------------------------------------------------------------
"""

from django.conf import settings
from django.db import models

from core.rut import formatear_rut
from core.validators import calcular_edad, rut_validator, telefono_validator


class Miembro(models.Model):
    """Ficha de un miembro de la logia."""

    class Grados(models.TextChoices):
        APRENDIZ  = "aprendiz",  "Aprendiz"
        COMPANERO = "companero", "Compañero"
        MAESTRO   = "maestro",   "Maestro"

    class Estados(models.TextChoices):
        ACTIVO     = "activo",     "Activo"
        INACTIVO   = "inactivo",   "Inactivo"
        SUSPENDIDO = "suspendido", "Suspendido"

    # --- Identificación ---
    nombres   = models.CharField(max_length=100)
    apellidos = models.CharField(max_length=100)
    rut       = models.CharField(max_length=12, unique=True, validators=[rut_validator], help_text="12.345.678-5")

    # --- Contacto ---
    email     = models.EmailField(max_length=100)
    telefono  = models.CharField(max_length=20, blank=True, default="", validators=[telefono_validator])
    direccion = models.CharField(max_length=255, blank=True, default="")

    # --- Datos personales ---
    fecha_nacimiento  = models.DateField()
    ciudad_nacimiento = models.CharField(max_length=100, blank=True, default="")
    profesion         = models.CharField(max_length=100, blank=True, default="")

    # --- Datos masónicos ---
    fecha_ingreso = models.DateField()
    grado  = models.CharField(max_length=20, choices=Grados.choices, db_index=True)
    estado = models.CharField(max_length=20, choices=Estados.choices, default=Estados.ACTIVO, db_index=True)
    cargo  = models.CharField(max_length=50, blank=True, default="")
    vigente = models.BooleanField(default=True, db_index=True)

    observaciones = models.TextField(blank=True, default="")

    # Cuenta de usuario asociada (opcional: no todos los miembros usan la app).
    usuario = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="miembro",
    )
    creado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="miembros_creados",
    )

    creado = models.DateTimeField(auto_now_add=True)
    actualizado = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["apellidos", "nombres"]
        verbose_name = "Miembro"
        verbose_name_plural = "Miembros"
        indexes = [models.Index(fields=["apellidos", "nombres"], name="miembro_nombre_idx")]

    def save(self, *args, **kwargs):
        # El RUT siempre se guarda en formato de despliegue.
        if self.rut:
            self.rut = formatear_rut(self.rut)
        super().save(*args, **kwargs)

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombres} {self.apellidos}".strip()

    @property
    def edad(self):
        return calcular_edad(self.fecha_nacimiento)

    def __str__(self):
        return f"{self.nombre_completo} ({self.rut})"
