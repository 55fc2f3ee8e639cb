"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Backend de autenticación 'LoginConCorreo'. Permite a los
                       hermanos iniciar sesión con su nombre de usuario o con su
                       correo electrónico, indistintamente.
--------------------------------------------------------------------------------
"""

import logging

# Importa la clase base para backends de autenticación de Django.
from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model
# Importa Q para realizar consultas OR.
from django.db.models import Q

logger = logging.getLogger(__name__)

User = get_user_model()


class LoginConCorreo(ModelBackend):
    """Autenticación por username o email."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        # Si no llega username pero llega 'email', se usa el email.
        if username is None:
            username = kwargs.get("email")
        if not username or password is None:
            return None

        try:
            # 'iexact' hace la búsqueda insensible a mayúsculas/minúsculas.
            user = User.objects.get(Q(username__iexact=username) | Q(email__iexact=username))
        except User.DoesNotExist:
            return None
        except User.MultipleObjectsReturned:
            logger.warning("Más de una cuenta coincide con '%s'", username)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
