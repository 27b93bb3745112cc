"""
Error taxonomy.

Every public entry point either returns a fully-populated result or raises
one of these exceptions. There is no partial-success return shape.

Recoverable failures inside card insertion (printing history, individual
printings) and query-cache writes are NOT raised; they are logged and, for
insertion, reported as warnings on the InsertionResult.
"""

from collections.abc import Sequence
from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Resolution failures
    NOT_CACHED = "not_cached"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"

    # Integrity failures
    CACHE_INCONSISTENT = "cache_inconsistent"

    # Collaborator failures
    REMOTE_UNAVAILABLE = "remote_unavailable"
    MALFORMED_RECORD = "malformed_record"
    STORE_ERROR = "store_error"

    # Decklist failures
    PARSE_ERROR = "parse_error"
    VALIDATION_FAILED = "validation_failed"


class CardCacheError(Exception):
    """
    Base class for all known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)


class NotCachedError(CardCacheError):
    """
    A query, name or oracle id has never been resolved into the store.

    Distinct from a query that was resolved and cached with zero results.
    """

    def __init__(self, key: str, what: str = "query"):
        self.key = key
        super().__init__(
            kind=FailureKind.NOT_CACHED,
            message=f"{what} not cached: {key}",
            suggestion="Resolve it through the remote-backed lookup first.",
        )


class NotFoundError(CardCacheError):
    """The remote source has no card for this name or identifier."""

    def __init__(self, key: str, detail: str | None = None):
        self.key = key
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"card not found: {key}",
            detail=detail,
            suggestion="Check the spelling of the card name.",
        )


class AmbiguousCardError(CardCacheError):
    """A name matched several cards and none of them exactly."""

    def __init__(self, name: str, candidates: Sequence[str]):
        self.name = name
        self.candidates = tuple(candidates)
        super().__init__(
            kind=FailureKind.AMBIGUOUS,
            message=f"ambiguous card name '{name}', could be: {', '.join(self.candidates)}",
            suggestion="Use the full card name.",
        )


class CacheInconsistentError(CardCacheError):
    """
    A cached oracle id cannot be re-resolved from the store.

    Indicates store corruption or external tampering. Never patched over by
    returning a shorter result list.
    """

    def __init__(self, query: str, oracle_id: str):
        self.query = query
        self.oracle_id = oracle_id
        super().__init__(
            kind=FailureKind.CACHE_INCONSISTENT,
            message=f"cached query '{query}' references missing oracle_id {oracle_id}",
            suggestion="Invalidate the cached query and resolve it again.",
        )


class RemoteUnavailableError(CardCacheError):
    """Network or API failure on a primary fetch."""

    def __init__(self, key: str, reason: str, status_code: int | None = None):
        self.key = key
        self.status_code = status_code
        super().__init__(
            kind=FailureKind.REMOTE_UNAVAILABLE,
            message=f"remote lookup failed for '{key}': {reason}",
            detail=reason,
        )


class MalformedRecordError(CardCacheError):
    """A remote response or record is missing data required to store it."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(
            kind=FailureKind.MALFORMED_RECORD,
            message=f"malformed remote record for '{key}': {reason}",
            detail=reason,
        )


class StoreError(CardCacheError):
    """Underlying persistence failure."""

    def __init__(self, operation: str, key: str, reason: str):
        self.operation = operation
        self.key = key
        super().__init__(
            kind=FailureKind.STORE_ERROR,
            message=f"store {operation} failed for '{key}': {reason}",
            detail=reason,
        )


class DecklistParseError(CardCacheError):
    """
    Malformed decklist line or section structure.

    Aborts the entire parse; no partial Decklist is ever returned.
    """

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(
            kind=FailureKind.PARSE_ERROR,
            message=f"Parse error at line {line_number}: {reason}",
            detail=line,
        )


class SideboardLimitError(DecklistParseError):
    """Running sideboard total crossed the limit while parsing."""

    def __init__(self, line_number: int, line: str, total: int, limit: int):
        self.total = total
        self.limit = limit
        super().__init__(
            line_number, line, f"sideboard exceeds {limit} cards (has {total})"
        )


class ValidationRule(str, Enum):
    """Format-legality rule that a decklist violated."""

    MIN_MAINDECK = "min_maindeck"
    MAX_MAINDECK = "max_maindeck"
    MAX_SIDEBOARD = "max_sideboard"
    COPY_LIMIT = "copy_limit"
    SINGLETON = "singleton"


class DeckValidationError(CardCacheError):
    """
    Raised when a decklist fails a format-legality rule.

    Carries the violated rule plus the actual and limit values.
    """

    def __init__(
        self,
        rule: ValidationRule,
        actual: int,
        limit: int,
        message: str,
        card_name: str | None = None,
    ):
        self.rule = rule
        self.actual = actual
        self.limit = limit
        self.card_name = card_name
        super().__init__(kind=FailureKind.VALIDATION_FAILED, message=message)
