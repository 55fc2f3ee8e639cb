"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Lógica de autorización del sistema (RBAC). Expone 'can'
                       para verificar si un usuario puede realizar una operación
                       sobre un recurso, basándose en la matriz de roles.py, y la
                       clase de permiso DRF 'PermisoRecurso' para los ViewSets.
--------------------------------------------------------------------------------
"""

from rest_framework.permissions import BasePermission

from core.roles import puede_operar


def perfil_de(user):
    """Retorna el Perfil del usuario o None (superusuarios pueden no tenerlo)."""
    if user is None:
        return None
    return getattr(user, "perfil", None)


def can(user, recurso: str, operacion: str, objetivo=None) -> bool:
    """
    Regla única de autorización:
    - Usuario no autenticado => False
    - Superusuario => True (bypass total)
    - Sin Perfil => False
    - En otro caso se consulta puede_operar() con rol, grado y cargo.
    """
    # 1. Verifica si el usuario existe y está logueado.
    if not (user and user.is_authenticated):
        return False

    # 2. Bypass del superusuario de Django.
    if getattr(user, "is_superuser", False):
        return True

    # 3. Sin perfil no hay permisos.
    perfil = perfil_de(user)
    if perfil is None:
        return False

    return puede_operar(perfil, recurso, operacion, objetivo)


# Acciones de ViewSet -> operación CRUD.
OPERACIONES_POR_ACCION = {
    "list": "read",
    "retrieve": "read",
    "create": "create",
    "update": "update",
    "partial_update": "update",
    "destroy": "delete",
}


class PermisoRecurso(BasePermission):
    """
    Permiso DRF basado en la matriz de la logia. El ViewSet declara
    'recurso' (miembros, documentos, programas) y, opcionalmente,
    'operaciones_extra' para mapear sus @action a una operación.
    """

    message = "No tiene permisos para realizar esta acción."

    def _operacion(self, view):
        accion = getattr(view, "action", None)
        extra = getattr(view, "operaciones_extra", {})
        return extra.get(accion) or OPERACIONES_POR_ACCION.get(accion, "read")

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        operacion = self._operacion(view)
        # Lectura: el filtrado por grado lo hace get_queryset(). Edición y
        # borrado dependen del objeto y se deciden en has_object_permission().
        if operacion in ("read", "update", "delete"):
            return True
        return can(request.user, view.recurso, operacion)

    def has_object_permission(self, request, view, obj):
        return can(request.user, view.recurso, self._operacion(view), obj)
