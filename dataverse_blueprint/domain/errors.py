"""Error taxonomy for blueprint generation."""


class BlueprintError(Exception):
    """Base class for all blueprint generation errors."""


class ScopeConfigurationError(BlueprintError, ValueError):
    """Raised when a scope is missing, of an unknown type, or selects nothing."""


class MetadataClientError(BlueprintError):
    """Raised by a metadata client that cannot serve a request."""


class GenerationFailed(BlueprintError):
    """Raised when a run aborts on an unrecovered error.

    The originating exception is available as ``__cause__``.
    """

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Blueprint generation failed: {cause}")


class GenerationCancelled(BlueprintError):
    """Raised when the cancellation signal is observed during the schema phase.

    Carries the entity blueprints completed before the signal was seen.
    These never have automation attached.
    """

    def __init__(self, blueprints: list | None = None):
        self.blueprints = list(blueprints or [])
        super().__init__(
            f"Blueprint generation cancelled after {len(self.blueprints)} entities"
        )
