"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Validación compuesta del formulario de miembro. Recorre los
                       validadores de campo en un orden fijo, junta un mensaje por
                       campo con error y, si todo está correcto, entrega una copia
                       saneada de la ficha lista para persistir.
--------------------------------------------------------------------------------
"""

from dataclasses import asdict, dataclass, fields, replace
from datetime import date
from typing import Dict, List, Mapping, Optional, Union

from core.rut import formatear_rut, validar_rut
from core.validators import (
    convertir_fecha,
    formatear_telefono,
    sanitizar_texto,
    validar_direccion,
    validar_edad_minima,
    validar_email,
    validar_estado,
    validar_fecha_no_futura,
    validar_fecha_posterior,
    validar_grado,
    validar_longitud,
    validar_nombre,
    validar_telefono,
)

# Edad mínima para ingresar a la logia.
EDAD_MINIMA = 16

# Campos de texto libre que se sanean con sanitizar_texto().
CAMPOS_TEXTO = ("nombres", "apellidos", "direccion", "ciudad_nacimiento", "profesion", "observaciones")


@dataclass(frozen=True)
class FichaMiembro:
    """Ficha de miembro tal como llega desde un formulario. Todo es opcional."""

    nombres: Optional[str] = None
    apellidos: Optional[str] = None
    rut: Optional[str] = None
    email: Optional[str] = None
    telefono: Optional[str] = None
    fecha_nacimiento: Optional[Union[str, date]] = None
    fecha_ingreso: Optional[Union[str, date]] = None
    grado: Optional[str] = None
    estado: Optional[str] = None
    direccion: Optional[str] = None
    ciudad_nacimiento: Optional[str] = None
    profesion: Optional[str] = None
    observaciones: Optional[str] = None

    @classmethod
    def desde_dict(cls, datos: Mapping) -> "FichaMiembro":
        """Construye la ficha desde un dict; las claves desconocidas se ignoran."""
        nombres_campos = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in datos.items() if k in nombres_campos})

    def como_dict(self) -> Dict:
        return asdict(self)


@dataclass
class ResultadoValidacion:
    valido: bool
    errores: Dict[str, str]
    cantidad_errores: int
    campos_con_error: List[str]
    datos_limpios: Optional[FichaMiembro] = None


def _como_ficha(ficha) -> FichaMiembro:
    """Cualquier entrada que no sea un dict se trata como una ficha vacía."""
    if isinstance(ficha, FichaMiembro):
        return ficha
    if not isinstance(ficha, Mapping):
        return FichaMiembro()
    return FichaMiembro.desde_dict(ficha)


def _vacio(valor) -> bool:
    """Ausente o texto en blanco. Otros tipos no cuentan como vacíos."""
    if valor is None:
        return True
    return isinstance(valor, str) and not valor.strip()


def _error_nombre(valor, etiqueta: str) -> Optional[str]:
    if validar_nombre(valor):
        return None
    if _vacio(valor):
        return f"Los {etiqueta} son requeridos"
    if isinstance(valor, str) and len(valor.strip()) < 2:
        return f"Los {etiqueta} deben tener al menos 2 caracteres"
    return f"Los {etiqueta} contienen caracteres no válidos"


def validar_formulario_miembro(ficha, hoy: date = None, edad_minima: int = EDAD_MINIMA) -> Dict[str, str]:
    """
    Retorna {campo: mensaje} con un único mensaje por campo. Se evalúan
    todos los campos; un campo requerido ausente gana sobre el formato.
    """
    f = _como_ficha(ficha)
    errores: Dict[str, str] = {}

    # Nombres y apellidos
    for campo, etiqueta in (("nombres", "nombres"), ("apellidos", "apellidos")):
        mensaje = _error_nombre(getattr(f, campo), etiqueta)
        if mensaje:
            errores[campo] = mensaje

    # RUT
    if _vacio(f.rut):
        errores["rut"] = "El RUT es requerido"
    elif not validar_rut(f.rut):
        errores["rut"] = "El RUT no es válido"

    # Email
    if _vacio(f.email):
        errores["email"] = "El email es requerido"
    elif not validar_email(f.email):
        errores["email"] = "El email no es válido"

    # Teléfono (opcional)
    if not _vacio(f.telefono) and not validar_telefono(f.telefono):
        errores["telefono"] = "El teléfono no es válido"

    # Fecha de nacimiento
    nacimiento = convertir_fecha(f.fecha_nacimiento)
    if _vacio(f.fecha_nacimiento):
        errores["fecha_nacimiento"] = "La fecha de nacimiento es requerida"
    elif nacimiento is None:
        errores["fecha_nacimiento"] = "La fecha de nacimiento no es válida"
    elif not validar_fecha_no_futura(nacimiento, hoy=hoy):
        errores["fecha_nacimiento"] = "La fecha de nacimiento no puede ser futura"
    elif not validar_edad_minima(nacimiento, edad_minima, hoy=hoy):
        errores["fecha_nacimiento"] = f"El miembro debe tener al menos {edad_minima} años"

    # Fecha de ingreso
    ingreso = convertir_fecha(f.fecha_ingreso)
    if _vacio(f.fecha_ingreso):
        errores["fecha_ingreso"] = "La fecha de ingreso es requerida"
    elif ingreso is None:
        errores["fecha_ingreso"] = "La fecha de ingreso no es válida"
    elif not validar_fecha_no_futura(ingreso, hoy=hoy):
        errores["fecha_ingreso"] = "La fecha de ingreso no puede ser futura"
    elif nacimiento is not None and not validar_fecha_posterior(ingreso, nacimiento):
        errores["fecha_ingreso"] = "La fecha de ingreso debe ser posterior al nacimiento"

    # Grado y estado
    if not validar_grado(f.grado):
        errores["grado"] = "El grado masónico no es válido"
    if not validar_estado(f.estado):
        errores["estado"] = "El estado del miembro no es válido"

    # Opcionales
    if not _vacio(f.direccion) and not validar_direccion(f.direccion):
        errores["direccion"] = "La dirección contiene caracteres no válidos"
    if not _vacio(f.ciudad_nacimiento) and not validar_nombre(f.ciudad_nacimiento):
        errores["ciudad_nacimiento"] = "La ciudad de nacimiento contiene caracteres no válidos"
    if not _vacio(f.profesion) and not validar_longitud(f.profesion, 2, 100):
        errores["profesion"] = "La profesión debe tener entre 2 y 100 caracteres"
    if not _vacio(f.observaciones) and not validar_longitud(f.observaciones, 0, 1000):
        errores["observaciones"] = "Las observaciones no pueden exceder 1000 caracteres"

    return errores


def _normalizar_enum(valor):
    if not isinstance(valor, str):
        return valor
    valor = valor.strip().lower()
    # La grafía con eñe se guarda sin ella.
    return "companero" if valor == "compañero" else valor


def _normalizar_fecha(valor):
    fecha = convertir_fecha(valor)
    return fecha.isoformat() if fecha is not None else valor


def limpiar_datos_miembro(ficha) -> FichaMiembro:
    """Devuelve una copia saneada de la ficha. No valida y nunca lanza."""
    f = _como_ficha(ficha)
    cambios = {}

    for campo in CAMPOS_TEXTO:
        valor = getattr(f, campo)
        if valor and isinstance(valor, str):
            cambios[campo] = sanitizar_texto(valor)

    if f.rut and isinstance(f.rut, str):
        cambios["rut"] = formatear_rut(f.rut)
    if f.email and isinstance(f.email, str):
        cambios["email"] = f.email.strip().lower()
    if f.telefono and isinstance(f.telefono, str):
        cambios["telefono"] = formatear_telefono(f.telefono)

    cambios["grado"] = _normalizar_enum(f.grado)
    cambios["estado"] = _normalizar_enum(f.estado)
    cambios["fecha_nacimiento"] = _normalizar_fecha(f.fecha_nacimiento)
    cambios["fecha_ingreso"] = _normalizar_fecha(f.fecha_ingreso)

    return replace(f, **cambios)


def validar_formulario_completo(ficha, hoy: date = None, edad_minima: int = EDAD_MINIMA) -> ResultadoValidacion:
    f = _como_ficha(ficha)
    errores = validar_formulario_miembro(f, hoy=hoy, edad_minima=edad_minima)
    valido = not errores
    return ResultadoValidacion(
        valido=valido,
        errores=errores,
        cantidad_errores=len(errores),
        campos_con_error=list(errores),
        datos_limpios=limpiar_datos_miembro(f) if valido else None,
    )
