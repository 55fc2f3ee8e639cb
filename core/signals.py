"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Señales del núcleo. Normaliza el correo del usuario y
                       evita que dos cuentas compartan el mismo email.
--------------------------------------------------------------------------------
"""

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db.models.signals import pre_save
from django.dispatch import receiver

User = get_user_model()


@receiver(pre_save, sender=User)
def asegurar_email_unico(sender, instance, **kwargs):
    if instance.email:
        # Minúsculas para evitar duplicados por mayúsculas (Correo vs correo).
        instance.email = instance.email.strip().lower()
        if User.objects.filter(email=instance.email).exclude(pk=instance.pk).exists():
            raise ValidationError(f"El correo {instance.email} ya está asociado a otra cuenta.")
