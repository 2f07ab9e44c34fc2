# app/routers/bookings.py
import uuid

from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.booking_repo import BookingRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingRead,
    BookingStatusLiteral,
)
from app.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])

booking_repo = BookingRepository()
product_repo = ProductRepository()
service = BookingService(booking_repo, product_repo)


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    payload: BookingCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Book a product.

    - Product must exist and be "Available".
    - Status starts as `confirmed`; a unique coupon code is generated.
    """
    return service.create_booking(session, current_user, payload)


@router.get("", response_model=list[BookingRead])
def list_bookings(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    status: BookingStatusLiteral | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=50),
):
    """
    List bookings, most recent first.

    Admins see all bookings; customers see their own.
    """
    return service.list_bookings(session, current_user, skip, limit, status=status)


# Declared before /{booking_id} so "coupon" is not parsed as an id.
@router.get("/coupon/{coupon_code}", response_model=BookingRead)
def get_booking_by_coupon(
    coupon_code: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Look up a booking by coupon code (case-insensitive).
    """
    return service.get_by_coupon(session, current_user, coupon_code)


@router.get("/{booking_id}", response_model=BookingRead)
def get_booking(
    booking_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single booking. Owner or admin only.
    """
    return service.get_booking(session, current_user, booking_id)


@router.patch("/{booking_id}/cancel", response_model=BookingRead)
def cancel_booking(
    booking_id: uuid.UUID,
    payload: BookingCancel | None = Body(default=None),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Cancel a confirmed booking. Owner or admin only.

    Completed and already-cancelled bookings return 409.
    """
    reason = payload.reason if payload else None
    return service.cancel_booking(session, current_user, booking_id, reason)


@router.patch("/{booking_id}/complete", response_model=BookingRead)
def complete_booking(
    booking_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Mark a confirmed booking as completed (admin only).

    Cancelled and already-completed bookings return 409.
    """
    return service.complete_booking(session, current_user, booking_id)
