"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Modelo 'Documento': archivos de la logia clasificados por
                       categoría (grado, general o administrativo). Un documento
                       puede ser una plancha (trabajo escrito de un hermano) que
                       pasa por moderación: pendiente, aprobada o rechazada.
--------------------------------------------------------------------------------
"""

import hashlib
import os

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

# Valores por defecto si settings.ORPHEO no los define.
TAMANO_MAXIMO = 50 * 1024 * 1024  # 50 MB
EXTENSIONES = ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "jpg", "jpeg", "png", "txt")


def tamano_maximo() -> int:
    return getattr(settings, "ORPHEO", {}).get("DOCUMENTO_TAMANO_MAXIMO", TAMANO_MAXIMO)


def extensiones_permitidas():
    return tuple(getattr(settings, "ORPHEO", {}).get("DOCUMENTO_EXTENSIONES", EXTENSIONES))


def extension_de(nombre_archivo) -> str:
    return os.path.splitext(nombre_archivo or "")[1].lower().lstrip(".")


def validar_archivo_documento(archivo):
    """Valida extensión y tamaño del archivo subido."""
    extension = extension_de(archivo.name)
    if extension not in extensiones_permitidas():
        raise ValidationError(f"Tipo de archivo no permitido: .{extension or '?'}")
    if archivo.size is not None and archivo.size > tamano_maximo():
        raise ValidationError(f"Archivo demasiado grande (máximo {formatear_tamano(tamano_maximo())}).")


def formatear_tamano(tamano) -> str:
    if not tamano:
        return "Desconocido"
    unidades = ["Bytes", "KB", "MB", "GB"]
    i, valor = 0, float(tamano)
    while valor >= 1024 and i < len(unidades) - 1:
        valor /= 1024
        i += 1
    return f"{valor:.1f} {unidades[i]}"


class Documento(models.Model):

    class Categorias(models.TextChoices):
        APRENDIZ       = "aprendiz",       "Aprendiz"
        COMPANERO      = "companero",      "Compañero"
        MAESTRO        = "maestro",        "Maestro"
        GENERAL        = "general",        "General"
        ADMINISTRATIVO = "administrativo", "Administrativo"

    class EstadosPlancha(models.TextChoices):
        PENDIENTE = "pendiente", "Pendiente"
        APROBADA  = "aprobada",  "Aprobada"
        RECHAZADA = "rechazada", "Rechazada"

    archivo = models.FileField(upload_to="documentos/%Y/%m/", validators=[validar_archivo_documento])
    nombre = models.CharField(max_length=255)
    descripcion = models.TextField(blank=True, default="")
    # Extensión del archivo (pdf, docx...), derivada al guardar.
    tipo = models.CharField(max_length=10, editable=False)
    tamano = models.PositiveBigIntegerField(null=True, blank=True, editable=False)
    hash_archivo = models.CharField(max_length=64, blank=True, default="", editable=False)

    categoria = models.CharField(max_length=20, choices=Categorias.choices, db_index=True)
    subcategoria = models.CharField(max_length=100, blank=True, default="")
    palabras_clave = models.TextField(blank=True, default="")

    # --- Planchas ---
    es_plancha = models.BooleanField(default=False, db_index=True)
    plancha_estado = models.CharField(max_length=10, choices=EstadosPlancha.choices, blank=True, default="")
    plancha_comentarios = models.TextField(blank=True, default="")
    moderado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="planchas_moderadas"
    )

    autor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="documentos_autor"
    )
    subido_por = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="documentos_subidos"
    )

    descargas = models.PositiveIntegerField(default=0)
    visualizaciones = models.PositiveIntegerField(default=0)
    activo = models.BooleanField(default=True, db_index=True)

    creado = models.DateTimeField(auto_now_add=True)
    actualizado = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-creado"]
        verbose_name = "Documento"
        verbose_name_plural = "Documentos"

    def clean(self):
        if self.plancha_estado and not self.es_plancha:
            raise ValidationError({"plancha_estado": "Solo las planchas tienen estado de moderación."})

    def save(self, *args, **kwargs):
        if self.archivo:
            self.tipo = extension_de(self.archivo.name)
            if self._state.adding:
                self.tamano = self.archivo.size
                self.hash_archivo = self._calcular_hash()
        # Toda plancha nueva entra pendiente de moderación.
        if self.es_plancha and not self.plancha_estado:
            self.plancha_estado = self.EstadosPlancha.PENDIENTE
        if not self.es_plancha:
            self.plancha_estado = ""
        super().save(*args, **kwargs)

    def _calcular_hash(self) -> str:
        sha = hashlib.sha256()
        for trozo in self.archivo.chunks():
            sha.update(trozo)
        self.archivo.seek(0)
        return sha.hexdigest()

    @property
    def tamano_formateado(self) -> str:
        return formatear_tamano(self.tamano)

    def __str__(self):
        return self.nombre
