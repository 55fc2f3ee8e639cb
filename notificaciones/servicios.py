"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Servicio de notificaciones. Crea avisos para un usuario,
                       para varios a la vez o para todos los que por su grado
                       pueden ver un contenido, y gestiona lectura y expiración.
--------------------------------------------------------------------------------
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.utils import timezone

from core.roles import ADMIN, SUPERADMIN, grados_que_pueden_ver

from .models import Notificacion

logger = logging.getLogger(__name__)

User = get_user_model()


def crear_notificacion(usuario, titulo, mensaje, tipo, **extra) -> Notificacion:
    """
    Crea una notificación para un usuario. 'extra' acepta prioridad,
    relacionado_tipo, relacionado_id, accion_url, remitente y expira_en.
    """
    notificacion = Notificacion.objects.create(usuario=usuario, titulo=titulo, mensaje=mensaje, tipo=tipo, **extra)
    logger.info("Notificación creada para usuario %s: %s", usuario.pk, titulo)
    return notificacion


def crear_para_usuarios(usuarios_ids, titulo, mensaje, tipo, **extra):
    notificaciones = Notificacion.objects.bulk_create(
        [Notificacion(usuario_id=uid, titulo=titulo, mensaje=mensaje, tipo=tipo, **extra) for uid in usuarios_ids]
    )
    logger.info("%s notificaciones creadas: %s", len(notificaciones), titulo)
    return notificaciones


def destinatarios_por_grado(grado, excluir_usuario_id=None):
    """
    IDs de usuarios activos que pueden ver contenido de 'grado'. Los
    administradores siempre están incluidos; 'administrativo' es solo para ellos.
    """
    usuarios = User.objects.filter(is_active=True)
    if excluir_usuario_id is not None:
        usuarios = usuarios.exclude(pk=excluir_usuario_id)

    es_admin = Q(is_superuser=True) | Q(perfil__rol__in=[ADMIN, SUPERADMIN])
    usuarios = usuarios.filter(es_admin | Q(perfil__grado__in=grados_que_pueden_ver(grado)))
    return list(usuarios.values_list("pk", flat=True).distinct())


def notificar_por_grado(grado, titulo, mensaje, tipo, excluir_usuario_id=None, **extra):
    ids = destinatarios_por_grado(grado, excluir_usuario_id=excluir_usuario_id)
    if not ids:
        logger.info("Sin destinatarios para grado %s: %s", grado, titulo)
        return []
    return crear_para_usuarios(ids, titulo, mensaje, tipo, **extra)


def marcar_leida(notificacion: Notificacion) -> Notificacion:
    if not notificacion.leido:
        notificacion.leido = True
        notificacion.leido_en = timezone.now()
        notificacion.save(update_fields=["leido", "leido_en"])
    return notificacion


def marcar_todas_leidas(usuario) -> int:
    return Notificacion.objects.filter(usuario=usuario, leido=False).update(leido=True, leido_en=timezone.now())


def contar_no_leidas(usuario) -> int:
    return Notificacion.objects.filter(usuario=usuario).vigentes().no_leidas().count()


def limpiar_expiradas() -> int:
    eliminadas, _ = Notificacion.objects.expiradas().delete()
    if eliminadas:
        logger.info("%s notificaciones expiradas eliminadas", eliminadas)
    return eliminadas


# Destinatarios posibles de un aviso enviado a mano.
DESTINO_TODOS = "todos"
DESTINO_GRADO = "grado"
DESTINO_ADMINS = "admins"


def destinatarios_de_envio(destinatario, grado_destino=None):
    """IDs de usuarios activos para un envío manual: todos, un grado exacto o los administradores."""
    usuarios = User.objects.filter(is_active=True)
    if destinatario == DESTINO_GRADO:
        usuarios = usuarios.filter(perfil__grado=grado_destino)
    elif destinatario == DESTINO_ADMINS:
        usuarios = usuarios.filter(Q(is_superuser=True) | Q(perfil__rol__in=[ADMIN, SUPERADMIN]))
    elif destinatario != DESTINO_TODOS:
        return []
    return list(usuarios.values_list("pk", flat=True).distinct())


def enviar_notificacion(remitente, destinatario, titulo, mensaje, tipo, grado_destino=None, **extra):
    ids = destinatarios_de_envio(destinatario, grado_destino)
    if not ids:
        return []
    notificaciones = crear_para_usuarios(ids, titulo.strip(), mensaje.strip(), tipo, remitente=remitente, **extra)
    logger.info(
        "Usuario %s envió '%s' a %s (%s destinatarios)", remitente.username, titulo, destinatario, len(notificaciones)
    )
    return notificaciones


def estadisticas_usuario(usuario) -> dict:
    propias = Notificacion.objects.filter(usuario=usuario)
    total = propias.count()
    no_leidas = propias.vigentes().no_leidas().count()
    leidas = propias.filter(leido=True).count()
    return {
        "total": total,
        "no_leidas": no_leidas,
        "leidas": leidas,
        "porcentaje_leidas": round(leidas * 100 / total, 1) if total else 0,
        "por_tipo": dict(propias.order_by().values_list("tipo").annotate(cantidad=Count("id"))),
        "por_prioridad": dict(propias.order_by().values_list("prioridad").annotate(cantidad=Count("id"))),
    }
