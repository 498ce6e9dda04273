# app_cinema/router.py
"""Endpoints del cine que no son CRUD de tabla: validación QR, estadísticas e imagen QR."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from app_core.policies import policy_for
from app_core.qr import qr_data_uri
from web.auth_jwt import get_current_actor
from web.realtime import broadcast_attendance

from .models import Reservation, Screening
from .schemas import QRScanIn, QRValidationResult, ReservationQR, ScreeningStat, ScreeningStatsSummary
from .stats import screening_stats, stats_summary
from .validation import validate_reservation_qr

router = APIRouter(tags=["Cinema"])


@router.post("/rpc/validate_reservation_qr", response_model=QRValidationResult)
async def validate_qr(body: QRScanIn, actor=Depends(get_current_actor)):
    scanner_id = body.scanner_id if body.scanner_id is not None else actor.pk
    result = await run_in_threadpool(validate_reservation_qr, actor, body.token, scanner_id)
    if result.is_valid:
        await broadcast_attendance(result)
    return result


def _scoped_stats(actor, upcoming: bool) -> List[ScreeningStat]:
    screenings = policy_for(Screening).scope(actor, Screening.objects.all())
    return screening_stats(screenings, upcoming_only=upcoming)


@router.get("/screening_stats", response_model=List[ScreeningStat])
def list_screening_stats(upcoming: bool = False, actor=Depends(get_current_actor)):
    return _scoped_stats(actor, upcoming)


@router.get("/screening_stats/summary", response_model=ScreeningStatsSummary)
def screening_stats_summary(upcoming: bool = False, actor=Depends(get_current_actor)):
    return stats_summary(_scoped_stats(actor, upcoming))


@router.get("/reservations/{pk}/qr", response_model=ReservationQR)
def reservation_qr(pk: UUID, actor=Depends(get_current_actor)):
    try:
        reservation = policy_for(Reservation).scope(actor, Reservation.objects.all()).get(pk=pk)
    except Reservation.DoesNotExist:
        raise HTTPException(status_code=404, detail="Not found")
    return ReservationQR(
        reservation_id=reservation.pk,
        qr_token=reservation.qr_token,
        qr_data_uri=qr_data_uri(reservation.qr_token),
    )
