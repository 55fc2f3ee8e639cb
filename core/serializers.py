"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Serializadores del núcleo: credenciales de login, cambio
                       de contraseña y perfil del usuario autenticado con sus
                       permisos efectivos.
--------------------------------------------------------------------------------
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .models import Perfil
from .roles import permisos_de_usuario, recursos_accesibles

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    # Acepta nombre de usuario o correo en el mismo campo.
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        identificador = (attrs.get("username") or attrs.get("email") or "").strip()
        if not identificador:
            raise serializers.ValidationError({"username": "Debe indicar usuario o correo."})
        attrs["identificador"] = identificador
        return attrs


class CambioPasswordSerializer(serializers.Serializer):
    password_actual = serializers.CharField(write_only=True, trim_whitespace=False)
    password_nueva = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_password_actual(self, valor):
        if not self.context["user"].check_password(valor):
            raise serializers.ValidationError("Contraseña actual incorrecta.")
        return valor

    def validate(self, attrs):
        if attrs["password_nueva"] == attrs["password_actual"]:
            raise serializers.ValidationError({"password_nueva": "La nueva contraseña debe ser diferente a la actual."})
        # Aplica AUTH_PASSWORD_VALIDATORS de settings.
        try:
            validate_password(attrs["password_nueva"], self.context["user"])
        except DjangoValidationError as error:
            raise serializers.ValidationError({"password_nueva": list(error.messages)})
        return attrs


class PerfilSerializer(serializers.ModelSerializer):
    rol_display = serializers.CharField(source="get_rol_display", read_only=True)
    grado_display = serializers.CharField(source="get_grado_display", read_only=True)

    class Meta:
        model = Perfil
        fields = ["rol", "rol_display", "grado", "grado_display", "cargo", "rut", "telefono"]


class UsuarioSerializer(serializers.ModelSerializer):
    perfil = serializers.SerializerMethodField()
    permisos = serializers.SerializerMethodField()
    recursos = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "is_superuser", "perfil", "permisos", "recursos"]

    def _perfil(self, obj):
        return getattr(obj, "perfil", None)

    def get_perfil(self, obj):
        perfil = self._perfil(obj)
        return PerfilSerializer(perfil).data if perfil is not None else None

    def get_permisos(self, obj):
        # Orden estable para el cliente.
        return sorted(permisos_de_usuario(self._perfil(obj)))

    def get_recursos(self, obj):
        return recursos_accesibles(self._perfil(obj))
