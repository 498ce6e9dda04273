"""
Request/response models for the cinema endpoints that are not plain table CRUD:
the QR validation routine, the screening statistics view and the reservation
QR image.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# En JSON los porcentajes viajan como número, no como string
Rate = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ValidationOutcome(str, Enum):
    UNAUTHORIZED = "unauthorized"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"
    ALREADY_SCANNED = "already_scanned"
    SUCCESS = "success"


class QRScanIn(BaseModel):
    token: str
    scanner_id: Optional[int] = Field(
        None, description="User that scanned the code; defaults to the caller."
    )


class QRValidationResult(BaseModel):
    """Resultado de validar un QR. Los casos de negocio nunca son excepciones."""

    reservation_id: Optional[UUID] = None
    screening_id: Optional[UUID] = None
    status: Optional[str] = None
    message: str
    already_scanned: bool = False
    is_valid: bool = False
    outcome: ValidationOutcome


class ScreeningStat(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    screening_id: UUID
    movie_id: Optional[UUID] = None
    movie_title: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    auditorium: str
    capacity: int
    total_reservations: int
    active_reservations: int
    checked_in_count: int
    occupancy_rate: Rate
    attendance_rate: Rate
    created_at: datetime
    updated_at: datetime


class ScreeningStatsSummary(BaseModel):
    screenings: int
    total_reservations: int
    total_checked_in: int
    total_capacity: int
    average_occupancy: Rate


class ReservationQR(BaseModel):
    reservation_id: UUID
    qr_token: str
    qr_data_uri: str
