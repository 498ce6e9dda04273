# web/exception_handlers.py
import logging

from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.db import IntegrityError
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

UNIQUE_CODES = {"unique", "unique_together"}


def _error_codes(exc: ValidationError):
    if hasattr(exc, "error_dict"):
        for errors in exc.error_dict.values():
            for err in errors:
                yield err.code
    else:
        for err in exc.error_list:
            yield err.code


def _messages(exc: ValidationError):
    if hasattr(exc, "error_dict"):
        return {
            ("non_field_errors" if k == NON_FIELD_ERRORS else k): v
            for k, v in exc.message_dict.items()
        }
    return {"non_field_errors": exc.messages}


async def django_validation_exception_handler(request: Request, exc: ValidationError):
    code = status.HTTP_409_CONFLICT if UNIQUE_CODES & set(_error_codes(exc)) else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content={"detail": _messages(exc)})


async def integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Conflicts with an existing row"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, django_validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
