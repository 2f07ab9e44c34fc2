# app/services/booking_service.py
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.coupon import generate_coupon_code, normalize_coupon_code
from app.core.errors import ConflictError, NotFoundError
from app.core.permissions import ADMIN_ROLE, authorize, is_admin
from app.models.booking import Booking, BookingStatus
from app.models.user import User
from app.repositories.booking_repo import BookingRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.booking import BookingCreate

settings = get_settings()

logger = logging.getLogger(__name__)


class BookingService:
    """
    Business logic for bookings.

    Responsibilities:
      - Create bookings against available products (snapshot + coupon code)
      - Owner-or-admin authorization for reads and cancellation
      - Enforce the confirmed -> cancelled | completed state machine
    """

    def __init__(
        self,
        booking_repo: BookingRepository,
        product_repo: ProductRepository,
    ):
        self.booking_repo = booking_repo
        self.product_repo = product_repo

    # -------- Create --------

    def create_booking(
        self,
        session: Session,
        current_user: User,
        payload: BookingCreate,
    ) -> Booking:
        """
        Place a booking for a single product.

        Steps:
          1. Product must exist and be active (404 otherwise).
          2. Product availability must be "Available" (409 otherwise).
          3. Snapshot product name / first image / category.
          4. Insert with a fresh coupon code, retrying on collision.

        Product stock is not touched.
        """
        product = self.product_repo.get_by_id(session, payload.product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product not found")

        if not product.is_bookable:
            raise ConflictError("Product is not available for booking")

        booking = Booking(
            product_id=product.id,
            product_name=product.name,
            product_image=product.primary_image,
            product_category=product.category,
            user_id=current_user.id,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            customer_address=payload.customer_address,
            quantity=payload.quantity,
            booking_date=payload.booking_date,
            actual_price=payload.actual_price,
            strike_price=payload.strike_price,
            selling_price=payload.selling_price,
            total_amount=payload.total_amount,
            discount_percentage=payload.discount_percentage,
            notes=payload.notes,
            status=BookingStatus.CONFIRMED.value,
            coupon_code="",
        )

        booking = self._insert_with_unique_coupon(session, booking)
        logger.info(
            "Booking %s created by user %s for product %s",
            booking.coupon_code,
            current_user.id,
            product.id,
        )
        return booking

    def _insert_with_unique_coupon(self, session: Session, booking: Booking) -> Booking:
        """
        Insert the booking, regenerating coupon_code on unique violations.

        Gives up after COUPON_MAX_ATTEMPTS with ConflictError. Integrity
        errors unrelated to the coupon code are re-raised untouched.
        """
        max_attempts = max(1, settings.COUPON_MAX_ATTEMPTS)

        for attempt in range(1, max_attempts + 1):
            booking.coupon_code = generate_coupon_code(settings.COUPON_PREFIX)
            try:
                return self.booking_repo.create(session, booking)
            except IntegrityError:
                session.rollback()
                if not self.booking_repo.coupon_exists(session, booking.coupon_code):
                    raise
                logger.warning(
                    "Coupon code collision on %s (attempt %d/%d)",
                    booking.coupon_code,
                    attempt,
                    max_attempts,
                )

        raise ConflictError("Could not allocate a unique coupon code, please retry")

    # -------- Read --------

    def list_bookings(
        self,
        session: Session,
        current_user: User,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Booking]:
        """
        Admins see every booking, customers only their own.
        Most recent order first.
        """
        if is_admin(current_user):
            return self.booking_repo.list_all(session, skip, limit, status=status)
        return self.booking_repo.list_for_user(
            session, current_user.id, skip, limit, status=status
        )

    def get_booking(
        self,
        session: Session,
        current_user: User,
        booking_id: uuid.UUID,
    ) -> Booking:
        booking = self._get_or_404(session, booking_id)
        authorize(
            current_user,
            owner_id=booking.user_id,
            message="Not authorized to view this booking",
        )
        return booking

    def get_by_coupon(
        self,
        session: Session,
        current_user: User,
        coupon_code: str,
    ) -> Booking:
        """
        Exact, case-insensitive lookup on the coupon code.
        """
        booking = self.booking_repo.get_by_coupon(
            session, normalize_coupon_code(coupon_code)
        )
        if booking is None:
            raise NotFoundError("Booking not found with this coupon code")
        authorize(
            current_user,
            owner_id=booking.user_id,
            message="Not authorized to view this booking",
        )
        return booking

    # -------- Transitions --------

    def cancel_booking(
        self,
        session: Session,
        current_user: User,
        booking_id: uuid.UUID,
        reason: str | None = None,
    ) -> Booking:
        """
        confirmed -> cancelled, by the owner or an admin.

        Without an explicit reason, records "Cancelled by Admin" or
        "Cancelled by customer".
        """
        booking = self._get_or_404(session, booking_id)
        authorize(
            current_user,
            owner_id=booking.user_id,
            message="Not authorized to cancel this booking",
        )

        if reason is None:
            reason = "Cancelled by Admin" if is_admin(current_user) else "Cancelled by customer"

        new_state = booking.cancellation(reason)
        if not self.booking_repo.transition(session, booking, new_state):
            # Lost a race: re-check against the refreshed status.
            booking.cancellation(reason)
            raise ConflictError("Booking status changed, please retry")

        logger.info("Booking %s cancelled by %s", booking.coupon_code, current_user.id)
        return booking

    def complete_booking(
        self,
        session: Session,
        current_user: User,
        booking_id: uuid.UUID,
    ) -> Booking:
        """
        confirmed -> completed, admin only. The role check runs before the
        booking is even loaded.
        """
        authorize(
            current_user,
            required_role=ADMIN_ROLE,
            message="Not authorized. Admin access required.",
        )
        booking = self._get_or_404(session, booking_id)

        new_state = booking.completion()
        if not self.booking_repo.transition(session, booking, new_state):
            booking.completion()
            raise ConflictError("Booking status changed, please retry")

        logger.info("Booking %s completed by %s", booking.coupon_code, current_user.id)
        return booking

    # -------- Helpers --------

    def _get_or_404(self, session: Session, booking_id: uuid.UUID) -> Booking:
        booking = self.booking_repo.get_by_id(session, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking
