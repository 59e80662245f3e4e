"""
Error taxonomy.

The fare engine and the distance accumulator never raise; everything here
is recovered at the session-controller or HTTP boundary.
"""


class AutometerError(Exception):
    """Base class for all recoverable domain errors."""


class PermissionDenied(AutometerError):
    """Position access was not granted; the session stays idle."""


class PositionUnavailable(AutometerError):
    """The position stream failed after permission was granted."""


class MappingServiceUnavailable(AutometerError):
    """The mapping backend failed, timed out or refused the request."""


class NoRouteFound(AutometerError):
    """The mapping backend found no route between the two addresses."""


class InvalidConfiguration(AutometerError):
    """A tariff failed validation."""


class InvalidStateTransition(AutometerError):
    """Raised when a meter session change violates the state machine."""


class RequestSuperseded(AutometerError):
    """A debounced lookup was overtaken by a newer one for the same key."""
