"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Middleware que mide cuánto tarda cada petición a la API y lo
               registra en el log 'orpheo.peticiones' junto al método, la ruta,
               el usuario y el código HTTP de la respuesta.
--------------------------------------------------------------------------------
"""
import logging
import time

logger = logging.getLogger("orpheo.peticiones")

# Rutas que no se registran
RUTAS_EXCLUIDAS = ("/static/", "/media/", "/admin/")


class RegistroPeticionesMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        inicio = time.monotonic()
        response = self.get_response(request)
        duracion_ms = int((time.monotonic() - inicio) * 1000)

        path = request.path
        if not path.startswith(RUTAS_EXCLUIDAS):
            usuario = (
                request.user.username
                if hasattr(request, "user") and request.user.is_authenticated
                else "Anónimo"
            )
            status_code = getattr(response, "status_code", 200)
            nivel = logging.WARNING if status_code >= 500 else logging.INFO
            logger.log(nivel, "%s %s %s %s %sms", request.method, path, status_code, usuario, duracion_ms)

        return response
