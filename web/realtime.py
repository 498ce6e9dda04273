# web/realtime.py
"""
Canal Socket.IO para el personal.

Solo se aceptan conexiones con un access token de un admin; quedan en la
sala ``staff`` y reciben ``attendance_registered`` tras cada check-in
exitoso para refrescar sus tablas.
"""
import logging

import socketio
from asgiref.sync import sync_to_async
from fastapi import HTTPException

from app_core.policies import current_user_is_admin
from web.auth_jwt import decode_access_token, user_from_payload

logger = logging.getLogger(__name__)

STAFF_ROOM = "staff"
ATTENDANCE_EVENT = "attendance_registered"

sio = socketio.AsyncServer(
    cors_allowed_origins="*",
    async_mode="asgi",
    ping_interval=25,
    ping_timeout=60
)


def _staff_from_auth(auth):
    token = (auth or {}).get("token") if isinstance(auth, dict) else None
    if not token:
        return None
    try:
        user = user_from_payload(decode_access_token(token))
    except HTTPException:
        return None
    return user if current_user_is_admin(user) else None


@sio.event
async def connect(sid, environ, auth=None):
    user = await sync_to_async(_staff_from_auth)(auth)
    if user is None:
        logger.info("socket %s refused: missing or non-staff token", sid)
        return False
    await sio.enter_room(sid, STAFF_ROOM)
    return True


async def broadcast_attendance(result) -> None:
    await sio.emit(ATTENDANCE_EVENT, result.model_dump(mode="json"), room=STAFF_ROOM)
