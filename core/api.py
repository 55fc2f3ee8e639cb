"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Endpoints de autenticación de la API: login por usuario o
                       correo (entrega Token DRF), logout (revoca el token),
                       cambio de contraseña y consulta del perfil propio con
                       permisos y recursos.
--------------------------------------------------------------------------------
"""

import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import CambioPasswordSerializer, LoginSerializer, UsuarioSerializer

logger = logging.getLogger(__name__)


class LoginAPIView(APIView):
    """POST {username|email, password} -> token + datos del usuario."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        identificador = serializer.validated_data["identificador"]

        user = authenticate(request, username=identificador, password=serializer.validated_data["password"])
        if user is None:
            logger.warning("Intento de login fallido para '%s'", identificador)
            return Response(
                {"success": False, "message": "Credenciales inválidas", "errors": {}},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        token, _ = Token.objects.get_or_create(user=user)
        logger.info("Usuario %s autenticado", user.username)
        return Response(
            {
                "success": True,
                "message": "Autenticación exitosa",
                "token": token.key,
                "user": UsuarioSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )


class LogoutAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        # Revoca el token: el cliente deberá autenticarse de nuevo.
        Token.objects.filter(user=request.user).delete()
        logger.info("Usuario %s cerró sesión", request.user.username)
        return Response({"success": True, "message": "Sesión cerrada"}, status=status.HTTP_200_OK)


class PerfilAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"success": True, "data": UsuarioSerializer(request.user).data})


class CambioPasswordAPIView(APIView):
    """POST {password_actual, password_nueva}. Entrega un token nuevo."""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CambioPasswordSerializer(data=request.data, context={"user": request.user})
        if not serializer.is_valid():
            logger.warning("Cambio de contraseña rechazado para %s", request.user.username)
            raise ValidationError(serializer.errors)

        user = request.user
        user.set_password(serializer.validated_data["password_nueva"])
        user.save(update_fields=["password"])

        # El token anterior deja de servir.
        Token.objects.filter(user=user).delete()
        token = Token.objects.create(user=user)
        logger.info("Usuario %s cambió su contraseña", user.username)
        return Response(
            {"success": True, "message": "Contraseña actualizada correctamente", "token": token.key},
            status=status.HTTP_200_OK,
        )
