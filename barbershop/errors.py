# barbershop/errors.py


class BookingError(Exception):
    """Base for every caller-correctable booking failure.

    Carries a stable ``kind`` for clients to branch on and the HTTP status the
    transport layer should answer with.
    """

    kind = "booking-error"
    status_code = 400
    default_message = "Booking request rejected"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "kind": self.kind}


class Unauthenticated(BookingError):
    kind = "unauthenticated"
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(BookingError):
    kind = "forbidden"
    status_code = 403
    default_message = "Not authorized"


class InvalidBarber(BookingError):
    kind = "invalid-barber"
    status_code = 422
    default_message = "Unknown barber"


class PastDate(BookingError):
    kind = "past-date"
    status_code = 422
    default_message = "Cannot book an appointment in the past"


class NoServiceSpecified(BookingError):
    kind = "no-service-specified"
    status_code = 422
    default_message = "At least one service is required"


class TooManyServices(BookingError):
    kind = "too-many-services"
    status_code = 422
    default_message = "Too many services in one booking"


class InvalidService(BookingError):
    kind = "invalid-service"
    status_code = 422
    default_message = "Service not available"


class DegenerateTimeRange(BookingError):
    kind = "degenerate-time-range"
    status_code = 422
    default_message = "Reservation must end after it starts, on the same day"


class SlotConflict(BookingError):
    kind = "slot-conflict"
    status_code = 409
    default_message = "Appointment overlaps an existing appointment"


class InvalidTransition(BookingError):
    kind = "invalid-transition"
    status_code = 409
    default_message = "Status change not allowed"


class ReservationNotFound(BookingError):
    kind = "not-found"
    status_code = 404
    default_message = "Reservation not found"


class MisalignedStart(BookingError):
    kind = "misaligned-start"
    status_code = 422
    default_message = "Start time is not on the booking grid"
