# app/repositories/booking_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.booking import Booking, BookingState, BookingStatus, state_values


class BookingRepository:
    """
    Data access layer for bookings.

    NOTE:
      - `create` commits so that a coupon_code collision surfaces here as
        IntegrityError; the service decides whether to retry.
      - Status changes go through `transition`, never through attribute
        assignment on a loaded Booking.
    """

    def get_by_id(self, session: Session, booking_id: uuid.UUID) -> Booking | None:
        return session.get(Booking, booking_id)

    def get_by_coupon(self, session: Session, coupon_code: str) -> Booking | None:
        stmt = select(Booking).where(Booking.coupon_code == coupon_code)
        return session.exec(stmt).first()

    def coupon_exists(self, session: Session, coupon_code: str) -> bool:
        return self.get_by_coupon(session, coupon_code) is not None

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(Booking.user_id == user_id)
        if status:
            stmt = stmt.where(Booking.status == status)
        stmt = stmt.order_by(Booking.order_date.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Booking]:
        stmt = select(Booking)
        if status:
            stmt = stmt.where(Booking.status == status)
        stmt = stmt.order_by(Booking.order_date.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, booking: Booking) -> Booking:
        session.add(booking)
        session.commit()
        session.refresh(booking)
        return booking

    def transition(
        self,
        session: Session,
        booking: Booking,
        new_state: BookingState,
        expected_status: BookingStatus = BookingStatus.CONFIRMED,
    ) -> bool:
        """
        Apply `new_state` only if the row is still in `expected_status`.

        One conditional UPDATE; returns False when another request changed the
        status first. The booking is refreshed either way.
        """
        stmt = (
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.status == expected_status.value,
            )
            .values(
                **state_values(new_state),
                updated_at=datetime.now(timezone.utc),
            )
        )
        result = session.exec(stmt)
        session.commit()
        session.refresh(booking)
        return result.rowcount == 1
