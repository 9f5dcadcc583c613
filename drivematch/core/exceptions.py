"""Domain exceptions raised by the matching engine and advisor.

The API layer maps these to HTTP responses in ``drivematch.main``.
"""


class DriveMatchError(Exception):
    """Base class for all DriveMatch errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class QueryValidationError(DriveMatchError):
    """Advisor query text is empty or whitespace-only."""

    status_code = 400


class VehicleNotFoundError(DriveMatchError):
    """Reference vehicle id does not resolve in the catalog."""

    status_code = 404

    def __init__(self, vehicle_id: str) -> None:
        super().__init__("Vehicle not found")
        self.vehicle_id = vehicle_id


class RepositoryError(DriveMatchError):
    """Unexpected catalog storage failure. Never retried."""

    status_code = 500


class AdvisorNotConfiguredError(DriveMatchError):
    """LLM advisor requested without an OpenAI API key."""

    status_code = 503
