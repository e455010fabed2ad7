class RouteOptimizerError(Exception):
    """Base exception for route optimization errors."""


class InvalidInputError(RouteOptimizerError):
    """Raised when a request carries too few or too many points."""


class NotFoundError(RouteOptimizerError):
    """Raised when a requested address id does not exist."""


class ExternalServiceError(RouteOptimizerError):
    """Raised when an upstream API call fails."""


class ProviderFailure(ExternalServiceError):
    """Raised when the routing provider cannot serve a request."""


class InvalidLocationError(RouteOptimizerError):
    """Raised when a location cannot be geocoded."""
