"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Modelo 'Perfil', que extiende al usuario nativo de Django
                       con los datos de la logia: rol en el sistema, grado
                       masónico, cargo de oficialidad, RUT y teléfono. El RUT se
                       valida con Módulo 11 y se guarda en formato de despliegue.
--------------------------------------------------------------------------------
"""

# Importa el módulo base de modelos de Django.
from django.db import models
# Importa Q para las restricciones de base de datos.
from django.db.models import Q
# Importa el modelo de usuario activo del proyecto.
from django.contrib.auth import get_user_model
# Importa la excepción estándar de validación.
from django.core.exceptions import ValidationError

from .rut import formatear_rut, validar_rut
from .validators import rut_validator, telefono_validator

User = get_user_model()


class Perfil(models.Model):
    """Datos del hermano asociados a su cuenta de usuario."""

    class Roles(models.TextChoices):
        SUPERADMIN = "superadmin", "SUPERADMIN"
        ADMIN      = "admin",      "ADMIN"
        GENERAL    = "general",    "GENERAL"

    class Grados(models.TextChoices):
        APRENDIZ  = "aprendiz",  "Aprendiz"
        COMPANERO = "companero", "Compañero"
        MAESTRO   = "maestro",   "Maestro"

    class Cargos(models.TextChoices):
        VENERABLE_MAESTRO  = "venerable_maestro",  "Venerable Maestro"
        PRIMER_VIGILANTE   = "primer_vigilante",   "Primer Vigilante"
        SEGUNDO_VIGILANTE  = "segundo_vigilante",  "Segundo Vigilante"
        SECRETARIO         = "secretario",         "Secretario"
        TESORERO           = "tesorero",           "Tesorero"
        ORADOR             = "orador",             "Orador"
        MAESTRO_CEREMONIAS = "maestro_ceremonias", "Maestro de Ceremonias"
        HOSPITALARIO       = "hospitalario",       "Hospitalario"

    # Relación 1 a 1 con el usuario de Django.
    usuario = models.OneToOneField(User, on_delete=models.CASCADE, related_name="perfil")

    rol   = models.CharField(max_length=20, choices=Roles.choices, default=Roles.GENERAL)
    grado = models.CharField(max_length=20, choices=Grados.choices, default=Grados.APRENDIZ)
    # El cargo es opcional: la mayoría de los hermanos no ocupa oficialidad.
    cargo = models.CharField(max_length=30, choices=Cargos.choices, blank=True, default="")

    # RUT único, guardado como 12.345.678-5.
    rut = models.CharField(max_length=12, unique=True, validators=[rut_validator], help_text="12.345.678-5")

    telefono = models.CharField(
        max_length=20, blank=True, default="", validators=[telefono_validator], verbose_name="Teléfono"
    )

    creado = models.DateTimeField(auto_now_add=True)
    actualizado = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Perfil"
        verbose_name_plural = "Perfiles"
        constraints = [models.CheckConstraint(name="perfil_rut_no_vacio", condition=~Q(rut=""))]

    def save(self, *args, **kwargs):
        """Valida y normaliza el RUT antes de guardar."""
        if not self.rut or not self.rut.strip():
            raise ValidationError({"rut": "El RUT no puede estar vacío."})
        if not validar_rut(self.rut):
            raise ValidationError({"rut": "El RUT no es válido."})
        self.rut = formatear_rut(self.rut)
        super().save(*args, **kwargs)

    @property
    def es_administrador(self) -> bool:
        return self.rol in (self.Roles.ADMIN, self.Roles.SUPERADMIN)

    def __str__(self):
        return f"{self.usuario.username} - {self.get_rol_display()} - {self.get_grado_display()}"
