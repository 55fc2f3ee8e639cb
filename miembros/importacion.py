"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Importación masiva de miembros desde una planilla Excel
                       (.xlsx) o una lista de fichas. Cada fila pasa por el mismo
                       serializador que el alta individual; las filas inválidas
                       se informan con su número y no detienen a las demás.
--------------------------------------------------------------------------------
"""

import logging
import zipfile
from collections.abc import Mapping
from datetime import date, datetime

from django.db import IntegrityError, transaction
# Importa el lector de planillas Excel.
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .serializers import MiembroSerializer

logger = logging.getLogger(__name__)

# Encabezados que la planilla histórica escribe en camelCase.
ALIAS_COLUMNAS = {
    "fechaingreso": "fecha_ingreso",
    "fechanacimiento": "fecha_nacimiento",
    "ciudadnacimiento": "ciudad_nacimiento",
}

# Valores que se asumen cuando la fila no los trae.
VALORES_POR_DEFECTO = {"grado": "aprendiz", "estado": "activo"}


class PlanillaInvalida(Exception):
    pass


def _nombre_columna(encabezado) -> str:
    texto = str(encabezado or "").strip().lower().replace(" ", "_")
    return ALIAS_COLUMNAS.get(texto.replace("_", ""), texto)


def _valor_celda(valor):
    if isinstance(valor, datetime):
        return valor.date().isoformat()
    if isinstance(valor, date):
        return valor.isoformat()
    # Excel guarda RUT sin DV y teléfonos como números.
    if isinstance(valor, float) and valor.is_integer():
        return str(int(valor))
    if isinstance(valor, int):
        return str(valor)
    return valor


def leer_planilla(archivo):
    """
    Lee la primera hoja: la fila 1 son los encabezados. Retorna una lista de
    (número de fila, datos) omitiendo las filas completamente vacías.
    """
    try:
        libro = load_workbook(archivo, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as error:
        raise PlanillaInvalida("El archivo no es una planilla Excel válida") from error

    try:
        filas = libro.worksheets[0].iter_rows(values_only=True)
        encabezados = next(filas, None)
        if encabezados is None:
            return []
        columnas = [_nombre_columna(e) for e in encabezados]

        registros = []
        for numero, valores in enumerate(filas, start=2):
            if all(v is None for v in valores):
                continue
            datos = {col: _valor_celda(v) for col, v in zip(columnas, valores) if col and v is not None}
            registros.append((numero, datos))
        return registros
    finally:
        libro.close()


def _con_valores_por_defecto(datos):
    if not isinstance(datos, Mapping):
        return datos
    datos = dict(datos)
    for campo, valor in VALORES_POR_DEFECTO.items():
        if not datos.get(campo):
            datos[campo] = valor
    if not datos.get("fecha_ingreso"):
        datos["fecha_ingreso"] = date.today().isoformat()
    return datos


def _resumen_errores(errores) -> str:
    partes = []
    for campo, mensajes in errores.items():
        mensaje = mensajes[0] if isinstance(mensajes, list) and mensajes else mensajes
        partes.append(f"{campo}: {mensaje}")
    return "; ".join(partes)


def importar_miembros(filas, creado_por=None) -> dict:
    """'filas' es una secuencia de (número de fila, datos de la ficha)."""
    filas = list(filas)
    exitosos, errores = [], []

    for numero, datos in filas:
        serializer = MiembroSerializer(data=_con_valores_por_defecto(datos))
        if not serializer.is_valid():
            errores.append({"fila": numero, "error": _resumen_errores(serializer.errors)})
            continue
        try:
            with transaction.atomic():
                miembro = serializer.save(creado_por=creado_por)
        except IntegrityError:
            # Otra petición guardó el mismo RUT entre la validación y el insert.
            errores.append({"fila": numero, "error": "Ya existe un miembro con este RUT o email"})
            continue
        exitosos.append({"fila": numero, "miembro": miembro.nombre_completo, "rut": miembro.rut})

    logger.info(
        "Importación de miembros por %s: %s filas, %s exitosas, %s con error",
        getattr(creado_por, "username", None), len(filas), len(exitosos), len(errores),
    )
    return {"total_filas": len(filas), "exitosos": exitosos, "errores": errores}
