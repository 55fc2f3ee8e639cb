"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Validadores de campo para los formularios de miembros.
                       Cada validador es un predicado puro sobre un único valor
                       (retorna True/False, nunca lanza). Al final del archivo
                       se exponen adaptadores que lanzan ValidationError para
                       usarlos directamente en campos de modelos Django.
--------------------------------------------------------------------------------
"""

# Importa módulo de expresiones regulares.
import re
# Importa tipos de fecha nativos.
from datetime import date, datetime
# Importa la excepción estándar de validación de Django.
from django.core.exceptions import ValidationError
# Importa los parsers de fecha de Django (no requieren settings).
from django.utils.dateparse import parse_date, parse_datetime

from .rut import validar_rut

# -----------------------------------------------------------------------------
# Dominios fijos
# -----------------------------------------------------------------------------
# Grados masónicos en orden jerárquico.
GRADOS = ("aprendiz", "companero", "maestro")
# Se acepta también la grafía con eñe que escriben los usuarios.
GRADOS_VALIDOS = GRADOS + ("compañero",)
# Estados del ciclo de vida de un miembro.
ESTADOS = ("activo", "inactivo", "suspendido")

# -----------------------------------------------------------------------------
# Patrones
# -----------------------------------------------------------------------------
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Letras (incluye acentos, eñe y diéresis), espacios, guion, apóstrofo y punto.
NOMBRE_REGEX = re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑüÜ\s\-'.]+$")

# Letras, números, espacios y signos comunes en direcciones.
DIRECCION_REGEX = re.compile(r"^[a-zA-Z0-9áéíóúÁÉÍÓÚñÑüÜ\s\-#.,°]+$")

# Caracteres que se quitan de un teléfono antes de compararlo con los patrones.
TELEFONO_LIMPIEZA = re.compile(r"[\s\-()+]")

# Patrones válidos para Chile (los de móvil y fijo se solapan; se aceptan ambos).
PATRONES_TELEFONO = (
    re.compile(r"^569\d{8}$"),    # +569 12345678 (móvil con código país)
    re.compile(r"^56\d{8,9}$"),   # +56 2 12345678 (fijo) o +56 9 12345678
    re.compile(r"^9\d{8}$"),      # 987654321 (móvil sin código país)
    re.compile(r"^\d{8,9}$"),     # 12345678 o 212345678 (fijo)
)

# Caracteres HTML peligrosos que se eliminan al sanitizar texto libre.
CARACTERES_PELIGROSOS = re.compile(r"[<>\"'&]")
ESPACIOS_MULTIPLES = re.compile(r"\s+")


# -----------------------------------------------------------------------------
# Utilidades
# -----------------------------------------------------------------------------
def convertir_fecha(valor):
    """
    Convierte date, datetime o texto ('YYYY-MM-DD', ISO 8601 o 'DD/MM/YYYY')
    a un objeto date. Retorna None si no se puede interpretar.
    """
    # datetime hereda de date, por eso se revisa primero.
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if not isinstance(valor, str) or not valor.strip():
        return None

    texto = valor.strip()
    try:
        fecha = parse_date(texto)
        if fecha is not None:
            return fecha
        fecha_hora = parse_datetime(texto)
        if fecha_hora is not None:
            return fecha_hora.date()
        return datetime.strptime(texto, "%d/%m/%Y").date()
    except ValueError:
        # Formato reconocible pero fecha imposible (ej. 2023-02-30).
        return None


def sanitizar_texto(texto) -> str:
    """Recorta, elimina caracteres HTML peligrosos y normaliza espacios."""
    if not texto or not isinstance(texto, str):
        return ""
    texto = CARACTERES_PELIGROSOS.sub("", texto.strip())
    return ESPACIOS_MULTIPLES.sub(" ", texto)


def formatear_telefono(telefono) -> str:
    """Formatea un teléfono chileno como '+56 9 1234 5678'."""
    if not telefono or not isinstance(telefono, str):
        return ""

    t = TELEFONO_LIMPIEZA.sub("", telefono)

    # Móvil con código país.
    if re.fullmatch(r"569\d{8}", t):
        return f"+{t[:2]} {t[2:3]} {t[3:7]} {t[7:]}"

    # Fijo con código país.
    if re.fullmatch(r"56\d{8,9}", t):
        if len(t) == 10:  # Santiago
            return f"+{t[:2]} {t[2:3]} {t[3:7]} {t[7:]}"
        return f"+{t[:2]} {t[2:4]} {t[4:7]} {t[7:]}"

    # Móvil sin código país.
    if re.fullmatch(r"9\d{8}", t):
        return f"+56 {t[:1]} {t[1:5]} {t[5:]}"

    # Fijo sin código país.
    if re.fullmatch(r"\d{8,9}", t):
        if len(t) == 8:  # Santiago
            return f"+56 2 {t[:4]} {t[4:]}"
        return f"+56 {t[:2]} {t[2:5]} {t[5:]}"

    # No calza con ningún patrón: se devuelve el original.
    return telefono


# -----------------------------------------------------------------------------
# Predicados
# -----------------------------------------------------------------------------
def validar_email(email) -> bool:
    if not email or not isinstance(email, str):
        return False
    return bool(EMAIL_REGEX.match(email.strip()))


def validar_telefono(telefono) -> bool:
    """Teléfono chileno. Es opcional: vacío o ausente se considera válido."""
    if not telefono:
        return True
    if not isinstance(telefono, str):
        return False
    limpio = TELEFONO_LIMPIEZA.sub("", telefono)
    return any(patron.match(limpio) for patron in PATRONES_TELEFONO)


def validar_nombre(nombre) -> bool:
    """Solo letras, espacios, acentos y algunos signos; mínimo 2 caracteres."""
    if not nombre or not isinstance(nombre, str):
        return False
    nombre = nombre.strip()
    if len(nombre) < 2:
        return False
    return bool(NOMBRE_REGEX.match(nombre))


def calcular_edad(fecha_nacimiento, hoy=None):
    """Edad en años cumplidos a la fecha 'hoy'. None si la fecha no es válida."""
    nacimiento = convertir_fecha(fecha_nacimiento)
    if nacimiento is None:
        return None
    hoy = hoy or date.today()
    # Resta un año si todavía no llega el cumpleaños de este año.
    cumplio = (hoy.month, hoy.day) >= (nacimiento.month, nacimiento.day)
    return hoy.year - nacimiento.year - (0 if cumplio else 1)


def validar_edad_minima(fecha_nacimiento, edad_minima=18, hoy=None) -> bool:
    edad = calcular_edad(fecha_nacimiento, hoy=hoy)
    if edad is None:
        return False
    return edad >= edad_minima


def validar_fecha_no_futura(fecha, hoy=None) -> bool:
    """La fecha no puede ser posterior al día de hoy (hoy mismo es válido)."""
    valor = convertir_fecha(fecha)
    if valor is None:
        return False
    return valor <= (hoy or date.today())


def validar_fecha_posterior(fecha, referencia) -> bool:
    """True si 'fecha' es estrictamente posterior a 'referencia'."""
    posterior = convertir_fecha(fecha)
    anterior = convertir_fecha(referencia)
    if posterior is None or anterior is None:
        return False
    return posterior > anterior


def validar_longitud(texto, minimo=0, maximo=None) -> bool:
    """Largo (recortado) dentro de [minimo, maximo]. minimo=0 => opcional."""
    if not texto:
        return minimo == 0
    if not isinstance(texto, str):
        return False
    largo = len(texto.strip())
    if largo < minimo:
        return False
    return maximo is None or largo <= maximo


def validar_direccion(direccion) -> bool:
    """Dirección opcional; si viene, mínimo 5 caracteres y signos permitidos."""
    if not direccion:
        return True
    if not isinstance(direccion, str):
        return False
    direccion = direccion.strip()
    if len(direccion) < 5:
        return False
    return bool(DIRECCION_REGEX.match(direccion))


def validar_grado(grado) -> bool:
    return isinstance(grado, str) and grado.strip().lower() in GRADOS_VALIDOS


def validar_estado(estado) -> bool:
    return isinstance(estado, str) and estado.strip().lower() in ESTADOS


# -----------------------------------------------------------------------------
# Adaptadores para campos de modelos Django
# -----------------------------------------------------------------------------
def rut_validator(value):
    """Lanza ValidationError si el RUT no es válido."""
    if not validar_rut(value):
        raise ValidationError("El RUT no es válido. Use 12.345.678-9 o 12345678-9.")


def telefono_validator(value):
    if not validar_telefono(value):
        raise ValidationError("El teléfono no es válido. Ej: +56 9 1234 5678.")
