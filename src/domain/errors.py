"""Exceptions raised by the connection simulator core."""


class ConnectionSimulationError(Exception):
    """Base class for local validation failures of a simulation request."""


class InvalidInput(ConnectionSimulationError):
    """A required field is missing, blank, or out of domain."""


class MissingEndpoint(ConnectionSimulationError):
    """The start point or the client location has not been set."""


class InvalidConfiguration(ConnectionSimulationError):
    """An installation type has no entry in the cost model."""


class InvalidStateTransition(Exception):
    """Raised when a connection status change violates the state machine."""
