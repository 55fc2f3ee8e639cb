"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Serializador de Miembro. Antes de la validación de campos
                       de DRF pasa la ficha completa por el validador de
                       formulario; si hay errores responde con el mapa
                       campo -> mensaje, y si no, persiste los datos saneados.
--------------------------------------------------------------------------------
"""

from collections.abc import Mapping
from dataclasses import fields

from django.conf import settings
from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from .models import Miembro
from .validacion import EDAD_MINIMA, FichaMiembro, validar_formulario_completo

# Campos que cubre el validador de formulario.
CAMPOS_FICHA = [f.name for f in fields(FichaMiembro)]

# Opcionales que el modelo guarda como cadena vacía en vez de NULL.
CAMPOS_OPCIONALES = ("telefono", "direccion", "ciudad_nacimiento", "profesion", "observaciones")


def edad_minima_configurada() -> int:
    return getattr(settings, "ORPHEO", {}).get("EDAD_MINIMA", EDAD_MINIMA)


class MiembroSerializer(serializers.ModelSerializer):
    rut = serializers.CharField(
        max_length=12,
        validators=[UniqueValidator(queryset=Miembro.objects.all(), message="Ya existe un miembro con este RUT")],
    )
    email = serializers.EmailField(
        max_length=100,
        validators=[UniqueValidator(queryset=Miembro.objects.all(), message="Ya existe un miembro con este email")],
    )
    nombre_completo = serializers.CharField(read_only=True)
    edad = serializers.IntegerField(read_only=True)
    grado_display = serializers.CharField(source="get_grado_display", read_only=True)

    class Meta:
        model = Miembro
        fields = [
            "id",
            "nombres",
            "apellidos",
            "nombre_completo",
            "rut",
            "email",
            "telefono",
            "direccion",
            "fecha_nacimiento",
            "edad",
            "ciudad_nacimiento",
            "profesion",
            "fecha_ingreso",
            "grado",
            "grado_display",
            "estado",
            "cargo",
            "vigente",
            "observaciones",
            "usuario",
            "creado",
            "actualizado",
        ]
        read_only_fields = ["id", "creado", "actualizado"]

    def _ficha(self, data) -> dict:
        """Ficha completa: en actualizaciones parciales se mezcla con la instancia."""
        ficha = {}
        if self.instance is not None:
            ficha = {campo: getattr(self.instance, campo) for campo in CAMPOS_FICHA}
        for campo in CAMPOS_FICHA:
            if campo in data:
                ficha[campo] = data.get(campo)
        return ficha

    def to_internal_value(self, data):
        if not isinstance(data, Mapping):
            # Un cuerpo que no es objeto JSON se valida como ficha vacía.
            data = {}
        resultado = validar_formulario_completo(self._ficha(data), edad_minima=edad_minima_configurada())
        if not resultado.valido:
            raise serializers.ValidationError({campo: [mensaje] for campo, mensaje in resultado.errores.items()})

        limpios = resultado.datos_limpios.como_dict()
        for campo in CAMPOS_OPCIONALES:
            if limpios[campo] is None:
                limpios[campo] = ""

        entrada = {k: data.get(k) for k in ("cargo", "vigente", "usuario") if k in data}
        entrada.update(limpios)
        return super().to_internal_value(entrada)


class ValidacionFichaSerializer(serializers.Serializer):
    """Respuesta del endpoint de validación en seco."""

    valido = serializers.BooleanField()
    errores = serializers.DictField(child=serializers.CharField())
    cantidad_errores = serializers.IntegerField()
    campos_con_error = serializers.ListField(child=serializers.CharField())
    datos_limpios = serializers.SerializerMethodField()

    def get_datos_limpios(self, obj):
        return obj.datos_limpios.como_dict() if obj.datos_limpios is not None else None
