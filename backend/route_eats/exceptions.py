class RouteEatsError(Exception):
    """Base exception for route and restaurant search errors."""


class InvalidLocationError(RouteEatsError):
    """Raised when an address is empty, missing, or cannot be resolved."""


class NoRouteFoundError(RouteEatsError):
    """Raised when a drivable route cannot be generated."""


class ExternalServiceError(RouteEatsError):
    """Raised when an upstream API call fails."""
