"""Error kinds raised by the generation pipeline and the view resolver.

Validation problems are never raised; they are returned by
``app.core.validation.validate_config``. Lookups in ``app.core.resolution``
return ``None`` for unknown ids.
"""
from __future__ import annotations
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.validation import ValidationIssue


class GenerationError(Exception):
    """Base class for failures of a single generation request."""
    code = "GENERATION_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GenerationInvalid(GenerationError):
    """No Validator-clean config after the initial attempt and one repair."""
    code = "GENERATION_INVALID"

    def __init__(self, message: str, errors: List["ValidationIssue"]):
        super().__init__(message)
        self.errors = list(errors)


class GenerationTimeout(GenerationError):
    code = "GENERATION_TIMEOUT"


class GenerationUpstreamFailure(GenerationError):
    """The language model returned an error or no structured output."""
    code = "GENERATION_UPSTREAM_FAILURE"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedViewKind(Exception):
    """A view kind has no registered renderer."""

    def __init__(self, kind: str, supported: List[str]):
        super().__init__(
            f"No renderer registered for view kind '{kind}' "
            f"(supported: {', '.join(supported)})"
        )
        self.kind = kind
        self.supported = list(supported)
