"""Exceptions raised by the order, line-item and draft services.

Everything derives from DomainException, which the CLI turns into a
plain error message.  Command API failures reach callers only as
PersistenceError or ProvisioningError, never as the raw exception.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    Raised locally, before anything reaches the command API.
    """


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProvisioningError(DomainException):
    """A draft order (and its placeholder client) could not be created."""


class PersistenceError(DomainException):
    """A command API call failed after the request passed validation."""


class CleanupError(DomainException):
    """A delete on the discard path failed.

    Only ever logged; callers of the discard path never see it.
    """
