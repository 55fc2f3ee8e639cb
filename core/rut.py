"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Funciones utilitarias para el Rol Único Tributario (RUT)
                       chileno. Incluye cálculo del dígito verificador
                       (Módulo 11), limpieza, formateo con puntos y guion, y
                       validación completa. Ninguna función lanza excepciones
                       ante entradas mal formadas.
--------------------------------------------------------------------------------
"""

# Importa expresiones regulares.
import re

# Separadores que se eliminan al limpiar un RUT (puntos, guiones y espacios).
SEPARADORES_RUT = re.compile(r"[.\-\s]")

# Inserta un punto antes de cada grupo de tres dígitos contado desde la derecha.
GRUPOS_MILES = re.compile(r"(\d)(?=(\d{3})+(?!\d))")

# Largo permitido del RUT limpio (cuerpo + dígito verificador).
LARGO_MINIMO = 8
LARGO_MAXIMO = 9


def limpiar_rut(rut) -> str:
    """Quita puntos, guiones y espacios, y pasa el DV a mayúscula. No valida."""
    if not rut or not isinstance(rut, str):
        return ""
    return SEPARADORES_RUT.sub("", rut).upper()


def calcular_dv(cuerpo) -> str:
    """
    Calcula el dígito verificador usando el algoritmo Módulo 11.
    Recibe el cuerpo numérico (int o str de dígitos) y retorna '0'-'9' o 'K'.
    Un cuerpo vacío, negativo o con caracteres que no son dígitos retorna ''.
    """
    if isinstance(cuerpo, bool) or not isinstance(cuerpo, (int, str)):
        return ""
    digitos = str(cuerpo)
    if not (digitos.isascii() and digitos.isdigit()):
        return ""

    suma, factor = 0, 2
    # Recorre los dígitos de derecha a izquierda multiplicando por la serie 2-7.
    for d in reversed(digitos):
        suma += int(d) * factor
        factor = 2 if factor == 7 else factor + 1

    resto = suma % 11
    # Casos especiales del módulo 11.
    if resto == 0:
        return "0"
    if resto == 1:
        return "K"
    return str(11 - resto)


def validar_rut(rut) -> bool:
    """Valida formato y consistencia matemática del RUT. Retorna True/False."""
    limpio = limpiar_rut(rut)

    # Largo fuera de rango => inválido.
    if not LARGO_MINIMO <= len(limpio) <= LARGO_MAXIMO:
        return False

    cuerpo, dv = limpio[:-1], limpio[-1]
    # El cuerpo debe ser solo dígitos ASCII.
    if not (cuerpo.isascii() and cuerpo.isdigit()):
        return False

    return calcular_dv(cuerpo) == dv


def formatear_rut(rut) -> str:
    """Entrega el RUT en formato de despliegue: 12.345.678-K."""
    if rut is None:
        return ""
    limpio = limpiar_rut(rut)

    # Entradas demasiado cortas se devuelven tal cual.
    if len(limpio) < 2:
        return rut

    cuerpo, dv = limpio[:-1], limpio[-1]
    cuerpo_formateado = GRUPOS_MILES.sub(r"\1.", cuerpo)
    return f"{cuerpo_formateado}-{dv}"
