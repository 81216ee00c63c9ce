"""Domain errors rendered by the API as {"detail": ..., "code": ...}"""

from typing import Any, Optional


class PetShopError(Exception):
    """Base class for errors surfaced to API callers"""

    code = "ERROR"
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, **self.extra}


class InvalidInputError(PetShopError):
    code = "INVALID_INPUT"


class ConfigMissingError(PetShopError):
    code = "CONFIG_MISSING"
    status_code = 500


class ForbiddenError(PetShopError):
    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(PetShopError):
    code = "NOT_FOUND"
    status_code = 404


class ServiceNotFoundError(NotFoundError):
    code = "SERVICE_NOT_FOUND"

    def __init__(self, missing_ids: list[str]):
        super().__init__(
            f"Service(s) not found: {', '.join(missing_ids)}", missingServiceIds=missing_ids
        )


class ClientNotFoundError(NotFoundError):
    code = "CLIENT_NOT_FOUND"

    def __init__(self, client_id: str):
        super().__init__(f"Client {client_id} not found")


class PetNotFoundError(NotFoundError):
    code = "PET_NOT_FOUND"

    def __init__(self, pet_id: str):
        super().__init__(f"Pet {pet_id} not found")


class AppointmentNotFoundError(NotFoundError):
    code = "APPOINTMENT_NOT_FOUND"

    def __init__(self, appointment_id: str):
        super().__init__(f"Appointment {appointment_id} not found")


class PlanNotFoundError(NotFoundError):
    code = "PLAN_NOT_FOUND"

    def __init__(self, plan_id: str):
        super().__init__(f"Subscription plan {plan_id} not found")


class SubscriptionNotFoundError(NotFoundError):
    code = "SUBSCRIPTION_NOT_FOUND"


class ClosedError(PetShopError):
    code = "CLOSED"

    def __init__(self, weekday: str):
        super().__init__(f"The shop is closed on {weekday}", weekday=weekday)


class OutOfHoursError(PetShopError):
    code = "OUT_OF_HOURS"

    def __init__(self, weekday: str, opens: str, closes: str):
        super().__init__(
            f"Invalid time. On {weekday} the shop is open from {opens} to {closes}",
            weekday=weekday,
            openTime=opens,
            closeTime=closes,
        )


class EmptyServiceSetError(PetShopError):
    code = "EMPTY_SERVICE_SET"

    def __init__(self):
        super().__init__("An appointment needs at least one service")


class ConflictError(PetShopError):
    code = "CONFLICT"
    status_code = 409


class ScheduleConflictError(ConflictError):
    code = "SCHEDULE_CONFLICT"

    def __init__(self, appointment_id: str, start, end):
        super().__init__(
            f"Schedule conflict. There is already an appointment between "
            f"{start.strftime('%H:%M')} and {end.strftime('%H:%M')}",
            conflictingAppointmentId=appointment_id,
            conflictStart=start.isoformat(),
            conflictEnd=end.isoformat(),
        )


class InsufficientCreditsError(ConflictError):
    code = "INSUFFICIENT_CREDITS"

    def __init__(self, service_name: str, service_id: Optional[str] = None):
        super().__init__(
            f"No subscription credits left for service '{service_name}'",
            serviceName=service_name,
            serviceId=service_id,
        )


class InvalidStatusTransitionError(ConflictError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change appointment status from {current} to {requested}",
            currentStatus=current,
            requestedStatus=requested,
        )


class SubscriptionExistsError(ConflictError):
    code = "SUBSCRIPTION_EXISTS"


class DuplicateError(ConflictError):
    code = "DUPLICATE"


class StorageConflictError(PetShopError):
    """The database aborted the transaction; the whole call may be retried"""

    code = "STORAGE_CONFLICT"
    status_code = 503

    def __init__(self, message: str = "The booking could not be completed due to a concurrent update. Please retry."):
        super().__init__(message, retryable=True)
