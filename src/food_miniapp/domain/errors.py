"""Error types raised across the chain and suggestion layers."""


class ChainError(RuntimeError):
    """Base class for contract interaction failures."""


class ReadFailure(ChainError):
    """A contract read failed on transport, ABI or decoding."""


class SimulationFailure(ChainError):
    """A contract write would revert or was rejected before submission."""


class SubmissionFailure(ChainError):
    """A contract write could not be signed or submitted; may be transient."""


class PreferencesError(RuntimeError):
    """Base class for preference store failures."""


class PreferencesUnavailable(PreferencesError):
    """Preferences could not be read from the chain."""


class PreferencesWriteFailed(PreferencesError):
    """Preferences could not be written to the chain."""

    def __init__(self, message: str, *, retryable: bool) -> None:
        super().__init__(message)
        self.retryable = retryable


class ProviderCallFailure(RuntimeError):
    """The generative model call failed or returned nothing."""


class ResponseShapeInvalid(ValueError):
    """The generative model returned data that is not a valid suggestion set."""
