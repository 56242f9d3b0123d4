"""Error taxonomy for the search core."""
from __future__ import annotations

from .models import EntityKind, ErrorKind, SearchErrorInfo


class SearchError(Exception):
    """Base exception for search core errors."""

    retryable: bool = False


class RetrievalFailure(SearchError):
    """The entity store was unreachable or returned an error."""

    retryable = True

    def __init__(
        self,
        entity_kind: EntityKind | None,
        step: str,
        cause: BaseException | None = None,
        message: str | None = None,
    ):
        self.entity_kind = entity_kind
        self.step = step
        self.cause = cause
        kind = entity_kind.value if entity_kind else "any"
        super().__init__(message or f"Retrieval failed during '{step}' for {kind} entities: {cause!r}")

    def to_info(self) -> SearchErrorInfo:
        return SearchErrorInfo(
            kind=ErrorKind.retrieval_failure,
            message=str(self),
            retryable=self.retryable,
            entity_kind=self.entity_kind,
            step=self.step,
        )


class RetrievalTimeout(RetrievalFailure):
    """The entity store did not answer within the configured bound."""

    def __init__(self, entity_kind: EntityKind | None, step: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            entity_kind, step, message=f"Retrieval during '{step}' exceeded {timeout:g}s"
        )

    def to_info(self) -> SearchErrorInfo:
        info = super().to_info()
        return info.model_copy(update={"kind": ErrorKind.timeout})


class MalformedInput(ValueError, SearchError):
    """Caller input rejected before any retrieval."""

    retryable = False
