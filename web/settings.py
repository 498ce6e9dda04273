import os
import environ
from datetime import timedelta
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, ["*"]),
    CORS_ALLOWED_ORIGINS=(list, []),
    JWT_ACCESS_MINUTES=(int, 60),
    JWT_REFRESH_DAYS=(int, 7),
    LOG_LEVEL=(str, "INFO"),
)
environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

SECRET_KEY = env('SECRET_KEY', default='django-insecure-change-me')

DEBUG = env('DEBUG')

ALLOWED_HOSTS = env('ALLOWED_HOSTS')

PROJECT_NAME = "Cinema back office"

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    'corsheaders',
    'import_export',
    'rest_framework_simplejwt',

    # apps
    'app_core',
    'app_user.apps.UserConfig',
    'app_cinema.apps.CinemaConfig',
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "web.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "web.wsgi.application"


# sqlite por defecto; en producción DATABASE_URL=postgres://...
DATABASES = {
    'default': env.db('DATABASE_URL', default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
}
if DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3':
    # Los endpoints corren en hilos del threadpool: la BD de test debe ser un archivo compartido
    DATABASES['default']['TEST'] = {'NAME': str(BASE_DIR / 'test_db.sqlite3')}
    # BEGIN IMMEDIATE: los escaneos simultáneos esperan el lock de escritura en vez de fallar
    DATABASES['default'].setdefault('OPTIONS', {}).update({'transaction_mode': 'IMMEDIATE', 'timeout': 20})


AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",},
]

LANGUAGE_CODE = "es"

TIME_ZONE = "America/Guayaquil"

USE_I18N = True

USE_TZ = True


STATIC_URL = '/static/'
STATIC_ROOT = os.path.join(BASE_DIR, 'static')

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
AUTH_USER_MODEL = 'app_user.CustomUser'

CORS_ALLOWED_ORIGINS = env('CORS_ALLOWED_ORIGINS')
CORS_ALLOW_ALL_ORIGINS = not CORS_ALLOWED_ORIGINS

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=env('JWT_ACCESS_MINUTES')),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=env('JWT_REFRESH_DAYS')),
    "ALGORITHM": "HS256",
    "SIGNING_KEY": SECRET_KEY,
}
JWT_SECRET_KEY = SECRET_KEY
JWT_ALGORITHM = "HS256"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "app_cinema": {"handlers": ["console"], "level": env('LOG_LEVEL'), "propagate": False},
        "app_user": {"handlers": ["console"], "level": env('LOG_LEVEL'), "propagate": False},
        "web": {"handlers": ["console"], "level": env('LOG_LEVEL'), "propagate": False},
    },
}


GENERIC_API = {
    # Solo montar endpoints de las tablas del cine y perfiles
    "APPS_ALLOWLIST": ["app_cinema", "app_user"],

    # Modelos globalmente excluidos
    "MODELS_EXCLUDE": [
        "app_user.CustomUser",
    ],

    # Campos a excluir en todos los modelos
    "GLOBAL_EXCLUDE_FIELDS": ["password"],

    # Dependencia que resuelve el usuario autenticado (JWT)
    "AUTH_DEPENDENCY": "web.auth_jwt:get_current_actor",

    # Opciones por modelo
    "MODEL_OPTIONS": {
        # ============ Movie ============
        "app_cinema.Movie": {
            "search_fields": ["title", "synopsis", "rating"],
            "default_order": "-created_at",
        },

        # ============ Screening ============
        "app_cinema.Screening": {
            "search_fields": ["auditorium", "movie__title", "notes"],
            "default_order": "starts_at",
            "expand_allowed": ["movie"],
        },

        # ============ Reservation ============
        "app_cinema.Reservation": {
            "readonly": ["qr_token"],
            "search_fields": ["qr_token", "seat_label", "screening__movie__title"],
            "default_order": "-reserved_at",
            "expand_allowed": [
                "screening",
                "screening.movie",
                "user",
                "user.profile",
            ],
            "expand_max_depth": 2,
        },

        # ============ AttendanceLog ============
        "app_cinema.AttendanceLog": {
            "methods": ["GET"],
            "search_fields": ["reservation__qr_token"],
            "default_order": "-scanned_at",
            "expand_allowed": [
                "reservation",
                "reservation.screening",
                "reservation.screening.movie",
                "reservation.user",
                "reservation.user.profile",
            ],
            "expand_max_depth": 3,
        },

        # ============ Profile ============
        "app_user.Profile": {
            "search_fields": ["first_name", "last_name", "role"],
            "default_order": "created_at",
            "expand_allowed": ["user"],
        },

        # Solo se embebe vía expand (no se monta)
        "app_user.CustomUser": {
            "include": ["id", "email", "is_active", "date_joined"],
        },
    },
}
