import os
import mimetypes

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "web.settings")

import django

django.setup()

import socketio
from django.conf import settings
from django.core.wsgi import get_wsgi_application

# ⚙️ FastAPI y middlewares
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.wsgi import WSGIMiddleware
from fastapi.staticfiles import StaticFiles

# 📦 Rutas y utilidades
from app_cinema.router import router as router_cinema
from app_user.router import router as router_user
from web.exception_handlers import register_exception_handlers
from web.fastapi_registry import mount_from_settings
from web.realtime import sio


def get_application() -> FastAPI:
    app = FastAPI(
        title=getattr(settings, "PROJECT_NAME", "FastAPI + Django"),
        debug=getattr(settings, "DEBUG", False),
        openapi_url="/api/v1/openapi.json"
    )

    # 🚨 Manejadores de errores (ValidationError -> 400/409, IntegrityError -> 409)
    register_exception_handlers(app)

    # 🌍 CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 📦 Rutas propias antes que las genéricas
    app.include_router(router_user, prefix="/api/auth")
    app.include_router(router_cinema, prefix="/api")
    mount_from_settings(app)

    # 🗂️ Archivos estáticos
    mimetypes.add_type("application/javascript", ".js")
    mimetypes.add_type("text/css", ".css")

    app.mount(
        settings.STATIC_URL,
        StaticFiles(directory=str(settings.STATIC_ROOT), check_dir=False),
        name="static_files_collected"
    )

    # 🧬 Django embebido (admin)
    app.mount("/", WSGIMiddleware(get_wsgi_application()))

    return app


fastapi_app = get_application()

# 🚀 App ASGI combinada
app = socketio.ASGIApp(sio, fastapi_app)
