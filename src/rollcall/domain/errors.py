"""Error taxonomy for attendance reconciliation.

Pipeline-aborting errors (malformed input, empty input, invalid configuration)
are raised before any review state exists. Classification outcomes such as
"no candidate found" or "ambiguous candidate" are association states, never
exceptions.
"""

from __future__ import annotations

from rollcall.config.errors import ConfigurationError


class RollcallError(Exception):
    """Base class for domain errors."""


class MalformedInputError(RollcallError):
    """The export could not be understood structurally (e.g. missing name column)."""


class EmptyInputError(RollcallError):
    """The export contained no usable rows."""


class InvalidConfigurationError(RollcallError, ConfigurationError):
    """A validation window is missing required bounds or carries invalid limits."""


class InvalidTransitionError(RollcallError):
    """An association lifecycle transition is not allowed from the current state."""


class RegistrationClaimedError(RollcallError):
    """A registration is already linked to another participant in the workspace."""

    def __init__(self, registration_id: int, claimed_by: str) -> None:
        super().__init__(f"Registration {registration_id} is already linked to {claimed_by!r}")
        self.registration_id = registration_id
        self.claimed_by = claimed_by


class PersistenceError(RollcallError):
    """Writing to the registration store failed."""


class RegistrationNotFoundError(PersistenceError):
    """The registration id does not exist in the store."""


class PendingNotFoundError(PersistenceError):
    """The pending attendance record does not exist or is already resolved."""


class ReviewIncompleteError(RollcallError):
    """Confirmation was requested while participants still await a decision."""

    def __init__(self, blocking: list[str]) -> None:
        preview = ", ".join(repr(name) for name in blocking[:5])
        more = f" and {len(blocking) - 5} more" if len(blocking) > 5 else ""
        super().__init__(f"{len(blocking)} participant(s) still need a decision: {preview}{more}")
        self.blocking = blocking
