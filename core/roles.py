"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Define la Matriz de Permisos (RBAC) de la logia.
                       Los permisos se acumulan desde tres fuentes: el rol del
                       sistema (general/admin/superadmin), el grado masónico
                       (aprendiz/compañero/maestro) y el cargo de oficialidad.
                       Todas las funciones son puras y operan sobre cualquier
                       objeto con atributos 'rol', 'grado' y 'cargo'.
--------------------------------------------------------------------------------
"""

# Importa tipos para anotaciones.
from typing import Dict, FrozenSet, List

# Comodín: el rol que lo tenga recibe todas las capacidades conocidas.
COMODIN = "*"

# Roles del sistema.
SUPERADMIN = "superadmin"
ADMIN = "admin"
GENERAL = "general"

# Jerarquía de grados: cada grado ve su contenido y el de los inferiores.
JERARQUIA_GRADOS: List[str] = ["aprendiz", "companero", "maestro"]

# Categorías visibles para cualquier grado.
CATEGORIAS_PUBLICAS = ("general", "todos")

# -----------------------------------------------------------------------------
# MATRICES DE PERMISOS
# -----------------------------------------------------------------------------
# Permisos por rol del sistema.
PERMISOS_ROL: Dict[str, List[str]] = {
    GENERAL: [
        "read_programs",
        "read_documents",
        "update_own_profile",
    ],
    ADMIN: [
        "read_programs", "read_documents", "update_own_profile",
        "create_programs", "update_programs", "delete_programs",
        "create_documents", "update_documents", "approve_documents",
        "read_members", "create_members", "update_members",
        "manage_members",
        "manage_users",
        "manage_all_documents",
        "manage_all_programs",
        "view_all_reports",
        "system_configuration",
        "backup_restore",
        "audit_logs",
    ],
    SUPERADMIN: [COMODIN],
}

# Permisos por grado masónico.
PERMISOS_GRADO: Dict[str, List[str]] = {
    "aprendiz": [
        "read_own_profile",
        "read_aprendiz_documents",
        "read_aprendiz_programs",
        "confirm_attendance",
    ],
    "companero": [
        "read_own_profile",
        "read_aprendiz_documents",
        "read_companero_documents",
        "read_aprendiz_programs",
        "read_companero_programs",
        "confirm_attendance",
    ],
    "maestro": [
        "read_all_profiles",
        "read_all_documents",
        "read_all_programs",
        "upload_documents",
        "create_programs",
        "manage_attendance",
        "confirm_attendance",
    ],
}

# Permisos por cargo de oficialidad.
PERMISOS_CARGO: Dict[str, List[str]] = {
    "venerable_maestro": ["approve_planchas", "manage_all_programs", "view_all_reports", "send_notifications"],
    "primer_vigilante":  ["manage_aprendiz_programs", "manage_aprendiz_attendance"],
    "segundo_vigilante": ["manage_companero_programs", "manage_companero_attendance"],
    "secretario":        ["manage_members", "manage_attendance", "export_reports", "send_notifications"],
    "tesorero":          ["view_financial_reports", "manage_member_status"],
    "orador":            ["upload_documents", "approve_planchas"],
    "maestro_ceremonias":["manage_programs", "coordinate_events"],
    "hospitalario":      ["view_member_health", "send_health_notifications"],
}


def _capacidades_conocidas() -> FrozenSet[str]:
    """Unión de todas las capacidades explícitas de las tres matrices."""
    todas = set()
    for matriz in (PERMISOS_ROL, PERMISOS_GRADO, PERMISOS_CARGO):
        for permisos in matriz.values():
            todas.update(p for p in permisos if p != COMODIN)
    return frozenset(todas)


CAPACIDADES_CONOCIDAS: FrozenSet[str] = _capacidades_conocidas()


def _expandir(permisos) -> FrozenSet[str]:
    if COMODIN in permisos:
        return CAPACIDADES_CONOCIDAS
    return frozenset(permisos)


# -----------------------------------------------------------------------------
# CONSULTAS POR ROL
# -----------------------------------------------------------------------------
def permisos_de_rol(rol) -> FrozenSet[str]:
    """Capacidades de un rol; el comodín se expande a todas las conocidas."""
    return _expandir(PERMISOS_ROL.get(rol, []))


def tiene_capacidad(rol, capacidad) -> bool:
    return capacidad in permisos_de_rol(rol)


# -----------------------------------------------------------------------------
# CONSULTAS POR USUARIO (rol + grado + cargo)
# -----------------------------------------------------------------------------
def permisos_de_usuario(perfil) -> FrozenSet[str]:
    if perfil is None:
        return frozenset()
    rol = getattr(perfil, "rol", None)
    if rol == SUPERADMIN:
        return CAPACIDADES_CONOCIDAS

    permisos = set(permisos_de_rol(rol))
    permisos.update(PERMISOS_GRADO.get(getattr(perfil, "grado", None), []))
    cargo = getattr(perfil, "cargo", None)
    if cargo:
        permisos.update(PERMISOS_CARGO.get(cargo, []))
    return frozenset(permisos)


def tiene_permiso(perfil, permiso) -> bool:
    if perfil is None or not permiso:
        return False
    return permiso in permisos_de_usuario(perfil)


def es_administrador(perfil) -> bool:
    return getattr(perfil, "rol", None) in (ADMIN, SUPERADMIN)


def puede_ver_grado(grado_usuario, grado_objetivo) -> bool:
    """
    Un usuario ve su grado y los inferiores. Las categorías públicas
    ('general', 'todos') son visibles para cualquier grado válido.
    """
    if grado_usuario not in JERARQUIA_GRADOS or not grado_objetivo:
        return False
    if grado_objetivo in CATEGORIAS_PUBLICAS:
        return True
    if grado_objetivo not in JERARQUIA_GRADOS:
        return False
    return JERARQUIA_GRADOS.index(grado_usuario) >= JERARQUIA_GRADOS.index(grado_objetivo)


def grados_que_pueden_ver(grado_objetivo) -> List[str]:
    """Inverso de puede_ver_grado: grados cuyo titular ve 'grado_objetivo'."""
    return [g for g in JERARQUIA_GRADOS if puede_ver_grado(g, grado_objetivo)]


def grados_visibles(perfil) -> List[str]:
    """Lista de grados/categorías que el perfil puede consultar."""
    if es_administrador(perfil):
        return JERARQUIA_GRADOS + list(CATEGORIAS_PUBLICAS) + ["administrativo"]
    grado = getattr(perfil, "grado", None)
    if grado not in JERARQUIA_GRADOS:
        return []
    nivel = JERARQUIA_GRADOS.index(grado)
    return JERARQUIA_GRADOS[: nivel + 1] + list(CATEGORIAS_PUBLICAS)


def puede_aprobar_plancha(perfil) -> bool:
    """Aprobar trabajos escritos (planchas): admins, Venerable Maestro y Orador."""
    if perfil is None:
        return False
    if es_administrador(perfil):
        return True
    return tiene_permiso(perfil, "approve_planchas")


def puede_enviar_notificaciones(perfil) -> bool:
    """Avisos manuales: admins, Venerable Maestro y Secretario."""
    if perfil is None:
        return False
    return es_administrador(perfil) or tiene_permiso(perfil, "send_notifications")


def puede_gestionar_asistencia(perfil, grado_programa) -> bool:
    """Tomar asistencia: permiso general o el del grado (vigilantes)."""
    if perfil is None:
        return False
    if es_administrador(perfil) or tiene_permiso(perfil, "manage_attendance"):
        return True
    return tiene_permiso(perfil, f"manage_{grado_programa}_attendance")


def puede_operar(perfil, recurso: str, operacion: str, objetivo=None) -> bool:
    """
    Regla única de autorización CRUD sobre miembros, documentos y programas.
    'objetivo' es la instancia sobre la que se opera (opcional).
    """
    if perfil is None or not recurso or not operacion:
        return False

    # 1. Superadmin puede todo.
    if getattr(perfil, "rol", None) == SUPERADMIN:
        return True

    # 2. Permiso explícito del tipo 'update_miembros'.
    if tiene_permiso(perfil, f"{operacion}_{recurso}"):
        return True

    grado = getattr(perfil, "grado", None)
    usuario_id = getattr(perfil, "usuario_id", None)

    # 3. Reglas específicas por recurso.
    if recurso == "miembros":
        if operacion == "read":
            return objetivo is None or es_administrador(perfil) or puede_ver_grado(grado, objetivo.grado)
        if operacion in ("create", "update", "delete"):
            return tiene_permiso(perfil, "manage_members")

    elif recurso == "documentos":
        if operacion == "read":
            return objetivo is None or es_administrador(perfil) or puede_ver_grado(grado, objetivo.categoria)
        if operacion == "create":
            return tiene_permiso(perfil, "upload_documents") or tiene_permiso(perfil, "create_documents")
        if operacion in ("update", "delete"):
            return tiene_permiso(perfil, "manage_all_documents") or (
                objetivo is not None and usuario_id is not None and objetivo.subido_por_id == usuario_id
            )

    elif recurso == "programas":
        if operacion == "read":
            return objetivo is None or es_administrador(perfil) or puede_ver_grado(grado, objetivo.grado)
        if operacion == "create":
            return tiene_permiso(perfil, "create_programs")
        if operacion in ("update", "delete"):
            return tiene_permiso(perfil, "manage_all_programs") or (
                objetivo is not None and usuario_id is not None and objetivo.responsable_id == usuario_id
            )

    return False


def recursos_accesibles(perfil) -> Dict[str, Dict[str, bool]]:
    """Resumen de lo que el usuario puede hacer, para armar menús en el cliente."""
    if perfil is None:
        return {}
    return {
        "miembros": {
            "create": puede_operar(perfil, "miembros", "create"),
            "read": True,
            "update": puede_operar(perfil, "miembros", "update"),
            "delete": puede_operar(perfil, "miembros", "delete"),
            "export": tiene_permiso(perfil, "export_reports"),
        },
        "documentos": {
            "create": puede_operar(perfil, "documentos", "create"),
            "read": True,
            "update": tiene_permiso(perfil, "manage_all_documents"),
            "delete": tiene_permiso(perfil, "manage_all_documents"),
            "approve_planchas": puede_aprobar_plancha(perfil),
        },
        "programas": {
            "create": puede_operar(perfil, "programas", "create"),
            "read": True,
            "update": tiene_permiso(perfil, "manage_all_programs"),
            "delete": tiene_permiso(perfil, "manage_all_programs"),
            "manage_attendance": tiene_permiso(perfil, "manage_attendance"),
        },
        "reportes": {
            "view": tiene_permiso(perfil, "view_all_reports") or tiene_permiso(perfil, "export_reports"),
            "export": tiene_permiso(perfil, "export_reports"),
        },
        "sistema": {
            "configuration": tiene_permiso(perfil, "system_configuration"),
            "audit_logs": tiene_permiso(perfil, "audit_logs"),
            "manage_users": tiene_permiso(perfil, "manage_users"),
        },
    }
