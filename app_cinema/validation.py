"""
QR attendance validation.

``validate_reservation_qr`` is the only stateful operation with transactional
logic in the system: it checks that the caller is staff, resolves the
reservation behind a scanned token, records the attendance exactly once and
moves the reservation to ``checked_in``.

Every expected condition (unauthorized caller, malformed or unknown token,
cancelled reservation, repeated scan) is reported through the returned
``QRValidationResult``; nothing is raised for them. Only infrastructure
failures reach the caller as exceptions.

The guards run in a fixed order (authorization, token shape, lookup,
cancellation, duplicate) which decides the message the caller sees when more
than one condition applies.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from app_core.policies import current_user_is_admin

from .models import AttendanceLog, Reservation
from .schemas import QRValidationResult, ValidationOutcome

logger = logging.getLogger(__name__)

MSG_UNAUTHORIZED = "only authorized staff may validate codes"
MSG_INVALID_TOKEN = "invalid QR code"
MSG_NOT_FOUND = "no reservation found for this code"
MSG_CANCELLED = "reservation is cancelled and cannot be checked in"
MSG_ALREADY_SCANNED = "this reservation was already validated"
MSG_SUCCESS = "attendance registered successfully"


def _empty(outcome: ValidationOutcome, message: str) -> QRValidationResult:
    # Sin reserva de por medio el estado va con el marcador 'cancelled'
    return QRValidationResult(
        status=Reservation.Status.CANCELLED.value,
        message=message,
        already_scanned=False,
        is_valid=False,
        outcome=outcome,
    )


def _for(reservation: Reservation, outcome: ValidationOutcome, message: str, *,
         already_scanned: bool = False, is_valid: bool = False) -> QRValidationResult:
    return QRValidationResult(
        reservation_id=reservation.pk,
        screening_id=reservation.screening_id,
        status=str(reservation.status),
        message=message,
        already_scanned=already_scanned,
        is_valid=is_valid,
        outcome=outcome,
    )


def validate_reservation_qr(actor, token, scanner_id=None) -> QRValidationResult:
    """
    Valida ``token`` en nombre de ``actor`` y, si corresponde, registra la
    asistencia atribuida a ``scanner_id``.
    """
    if not current_user_is_admin(actor):
        logger.warning("QR validation refused for non-staff actor %s", getattr(actor, "pk", None))
        return _empty(ValidationOutcome.UNAUTHORIZED, MSG_UNAUTHORIZED)

    if not (token or "").strip():
        return _empty(ValidationOutcome.INVALID_TOKEN, MSG_INVALID_TOKEN)

    with transaction.atomic():
        # El bloqueo de fila serializa escaneos simultáneos del mismo código
        reservation = (
            Reservation.objects.select_for_update()
            .filter(qr_token=token)
            .first()
        )
        if reservation is None:
            return _empty(ValidationOutcome.NOT_FOUND, MSG_NOT_FOUND)

        if reservation.status == Reservation.Status.CANCELLED:
            return _for(reservation, ValidationOutcome.CANCELLED, MSG_CANCELLED)

        if AttendanceLog.objects.filter(reservation=reservation).exists():
            logger.warning("QR token for reservation %s scanned again", reservation.pk)
            return _for(
                reservation, ValidationOutcome.ALREADY_SCANNED, MSG_ALREADY_SCANNED,
                already_scanned=True,
            )

        try:
            with transaction.atomic():
                AttendanceLog.objects.create(reservation=reservation, scanned_by_id=scanner_id)
        except IntegrityError:
            # Otro escaneo ganó la carrera (backends sin SELECT ... FOR UPDATE)
            if not AttendanceLog.objects.filter(reservation=reservation).exists():
                raise
            logger.warning("concurrent scan lost the race for reservation %s", reservation.pk)
            return _for(
                reservation, ValidationOutcome.ALREADY_SCANNED, MSG_ALREADY_SCANNED,
                already_scanned=True,
            )

        Reservation.objects.filter(pk=reservation.pk).update(
            status=Reservation.Status.CHECKED_IN,
            updated_at=timezone.now(),
        )
        reservation.refresh_from_db(fields=["status", "updated_at"])

    logger.info("attendance registered for reservation %s (scanner %s)", reservation.pk, scanner_id)
    return _for(reservation, ValidationOutcome.SUCCESS, MSG_SUCCESS, is_valid=True)
