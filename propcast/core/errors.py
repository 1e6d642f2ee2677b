from __future__ import annotations


class PropcastError(Exception):
    """Base class for errors raised by the prediction engine."""


class MalformedPropositionError(PropcastError, ValueError):
    """A proposition record is missing the fields that identify it."""


class InvalidScenarioParametersError(PropcastError, ValueError):
    """Scenario parameters fall outside the accepted bounds."""


class UpstreamUnavailableError(PropcastError, RuntimeError):
    """A historical archive or finance source could not be reached."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
