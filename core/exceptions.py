from typing import Any, Dict, Optional

from fastapi import status


class TimeClockError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "error"

    def __init__(self, detail: str, **extra: Any):
        super().__init__(detail)
        self.detail = detail
        self.extra: Dict[str, Any] = extra

    def to_payload(self) -> Dict[str, Any]:
        payload = {"status": "error", "error": self.kind, "detail": self.detail}
        payload.update(self.extra)
        return payload


class Unauthenticated(TimeClockError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail)


class Forbidden(TimeClockError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"

    def __init__(self, detail: str = "User doesn't have sufficient privileges for this action"):
        super().__init__(detail)


class InvalidInput(TimeClockError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "invalid_input"


class LocationUnavailable(TimeClockError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "location_unavailable"

    def __init__(self, detail: str = "Location (latitude and longitude) is required."):
        super().__init__(detail)


class OutsidePerimeter(TimeClockError):
    """Raised when a clock-in location fails the geofence check."""

    status_code = 422
    kind = "outside_perimeter"

    def __init__(self, distance_km: float, radius_km: float, detail: Optional[str] = None):
        self.distance_km = distance_km
        self.radius_km = radius_km
        super().__init__(
            detail
            or f"You're outside the allowed area (distance {distance_km:.2f} km, radius {radius_km} km).",
            distance_km=round(distance_km, 3),
            radius_km=radius_km,
        )


class NotFound(TimeClockError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"
