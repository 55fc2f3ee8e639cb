"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Archivo de configuración global de Django. Contiene base de datos,
               seguridad, aplicaciones instaladas, middleware, DRF, caché, Celery,
               logging y los parámetros propios de la logia (bloque ORPHEO).
--------------------------------------------------------------------------------
"""

from pathlib import Path
import os

import dj_database_url
from dotenv import load_dotenv

# -----------------------------------------------------------------------------
# Paths & .env
# -----------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# Variables de entorno desde un archivo .env en la raíz del proyecto
load_dotenv(os.path.join(BASE_DIR, ".env"))


def _entero(nombre, defecto):
    return int(os.getenv(nombre, str(defecto)))


# -------------------------------------------------------------------
# Seguridad / Debug
# -------------------------------------------------------------------
SECRET_KEY = os.environ.get("SECRET_KEY", default="orpheo-clave-de-desarrollo")
DEBUG = os.getenv("DEBUG", "True").lower() == "true"

ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
CSRF_TRUSTED_ORIGINS = [o for o in os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if o]

# -----------------------------------------------------------------------------
# Apps (Aplicaciones Instaladas)
# -----------------------------------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Terceros
    "rest_framework",
    "rest_framework.authtoken",
    "django_filters",

    # Módulos de la logia
    "core.apps.CoreConfig",
    "miembros.apps.MiembrosConfig",
    "documentos.apps.DocumentosConfig",
    "programas.apps.ProgramasConfig",
    "notificaciones.apps.NotificacionesConfig",
]

# -----------------------------------------------------------------------------
# Middleware
# -----------------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",      # Sirve estáticos en producción
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "orpheo.middleware.RegistroPeticionesMiddleware",  # Tiempo de respuesta por petición
]

ROOT_URLCONF = "orpheo.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

ASGI_APPLICATION = "orpheo.asgi.application"
WSGI_APPLICATION = "orpheo.wsgi.application"

# -----------------------------------------------------------------------------
# Base de datos (PostgreSQL vía DATABASE_URL; SQLite local si no existe)
# -----------------------------------------------------------------------------
DATABASES = {
    "default": dj_database_url.config(
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600,
        conn_health_checks=True,
    )
}

# -----------------------------------------------------------------------------
# Validadores de contraseñas
# -----------------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator", "OPTIONS": {"min_length": 10}},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

AUTHENTICATION_BACKENDS = [
    "core.authentication.LoginConCorreo",        # Login con username o email
    "django.contrib.auth.backends.ModelBackend",
]

# -----------------------------------------------------------------------------
# Internacionalización y Zona Horaria
# -----------------------------------------------------------------------------
LANGUAGE_CODE = "es-cl"
TIME_ZONE = "America/Santiago"
USE_I18N = True
USE_TZ = True

# -----------------------------------------------------------------------------
# Archivos estáticos y media
# -----------------------------------------------------------------------------
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = Path(os.getenv("MEDIA_ROOT", BASE_DIR / "media"))

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": (
            "django.contrib.staticfiles.storage.StaticFilesStorage"
            if DEBUG
            else "whitenoise.storage.CompressedManifestStaticFilesStorage"
        ),
    },
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------------------------------------------
# Configuración DRF
# -----------------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework.authentication.TokenAuthentication",   # Auth por Token (Móvil)
        "rest_framework.authentication.SessionAuthentication", # Auth por Sesión (Web)
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_FILTER_BACKENDS": (
        "django_filters.rest_framework.DjangoFilterBackend",
    ),
    "DEFAULT_PAGINATION_CLASS": "core.paginacion.DefaultPagination",
    "PAGE_SIZE": 20,
    "EXCEPTION_HANDLER": "core.excepciones.manejador_excepciones",
}

# -----------------------------------------------------------------------------
# Caché (Redis si existe REDIS_URL; memoria local en otro caso)
# -----------------------------------------------------------------------------
REDIS_URL = os.environ.get("REDIS_URL")

if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "TIMEOUT": 300,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
            "KEY_PREFIX": "orpheo",
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "orpheo",
        }
    }

# =================================================
# --- CONFIGURACIÓN DE CELERY (CON REDIS) ---
# =================================================
CELERY_BROKER_URL = REDIS_URL or "memory://"
CELERY_RESULT_BACKEND = REDIS_URL
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE

# Sin broker las tareas se ejecutan en el mismo proceso.
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "false" if REDIS_URL else "true").lower() == "true"
CELERY_TASK_EAGER_PROPAGATES = True

CELERY_BEAT_SCHEDULE = {
    "limpiar-notificaciones-expiradas": {
        "task": "notificaciones.tasks.limpiar_notificaciones_expiradas",
        "schedule": 60 * 60 * 24,
    },
    "recordar-programas-proximos": {
        "task": "programas.tasks.recordar_programas_proximos",
        "schedule": 60 * 60 * 24,
    },
}

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{asctime}] {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        "orpheo": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "core": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "miembros": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "documentos": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "programas": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "notificaciones": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# -----------------------------------------------------------------------------
# Límites de tamaño de subida
# -----------------------------------------------------------------------------
DATA_UPLOAD_MAX_MEMORY_SIZE = 50 * 1024 * 1024
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

# -----------------------------------------------------------------------------
# Parámetros de la logia
# -----------------------------------------------------------------------------
ORPHEO = {
    "EDAD_MINIMA": _entero("ORPHEO_EDAD_MINIMA", 16),
    "CACHE_TTL_SEGUNDOS": _entero("ORPHEO_CACHE_TTL", 300),
    "DOCUMENTO_TAMANO_MAXIMO": _entero("ORPHEO_DOCUMENTO_TAMANO_MAXIMO", 50 * 1024 * 1024),
    "DOCUMENTO_EXTENSIONES": ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "jpg", "jpeg", "png", "txt"),
}
