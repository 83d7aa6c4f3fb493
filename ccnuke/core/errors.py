"""Error taxonomy for ccnuke.

Validation errors are fatal and raised before any resource is deleted.
Per-identifier errors are collected into an AggregateError so that one bad
resource never stops its siblings.
"""
from typing import Iterable, List, Optional


class CcnukeError(Exception):
    """Base class for every error raised by ccnuke."""


class ConfigError(CcnukeError):
    """Config file or nuke plan has an unexpected shape."""


# --- Query validation ---

class QueryValidationError(CcnukeError):
    """The requested selection of regions or resource types is invalid."""


class ResourceTypeAndExcludeFlagsBothPassedError(QueryValidationError):
    def __str__(self):
        return "You can not specify both --resource-type and --exclude-resource-type"


class InvalidResourceTypesSuppliedError(QueryValidationError):
    def __init__(self, invalid_types: List[str]):
        super().__init__(invalid_types)
        self.invalid_types = list(invalid_types)

    def __str__(self):
        return (f"Invalid resourceTypes {self.invalid_types} specified: "
                "Try --list-resource-types to get a list of valid resource types.")


class AllResourceTypesExcludedError(QueryValidationError):
    def __str__(self):
        return "Cannot exclude all resource types: nothing would be left to nuke"


class InvalidTimeStringPassedError(QueryValidationError):
    def __init__(self, entry: str, underlying: Optional[Exception] = None):
        super().__init__(entry)
        self.entry = entry
        self.underlying = underlying

    def __str__(self):
        return f"Could not parse {self.entry} as a valid time duration. Underlying error: {self.underlying}"


class CouldNotSelectRegionError(QueryValidationError):
    def __init__(self, underlying: Exception):
        super().__init__(underlying)
        self.underlying = underlying

    def __str__(self):
        return ("Unable to determine target region set. Please double check your combination "
                f"of target and excluded regions. Original error: {self.underlying}")


class CouldNotDetermineEnabledRegionsError(QueryValidationError):
    def __init__(self, underlying: Exception):
        super().__init__(underlying)
        self.underlying = underlying

    def __str__(self):
        return f"Unable to determine enabled regions in target account. Original error: {self.underlying}"


class RegionSelectionError(CcnukeError):
    """Include/exclude region lists do not resolve to a usable target set."""


class RegionDiscoveryError(CcnukeError):
    """No candidate region answered describe_regions."""


class CatalogError(CcnukeError):
    def __init__(self, underlying: Exception):
        super().__init__(underlying)
        self.underlying = underlying

    def __str__(self):
        return f"Could not list supported resource types: {self.underlying}"


# --- Discovery ---

class DiscoveryListError(CcnukeError):
    def __init__(self, resource_type: str, underlying: Exception):
        super().__init__(resource_type, underlying)
        self.resource_type = resource_type
        self.underlying = underlying

    def __str__(self):
        return f"Error listing resources of type {self.resource_type}: {self.underlying}"


# --- Deletion ---

class TooManyResourcesTargetedError(CcnukeError):
    def __init__(self, num_targets: int):
        super().__init__(num_targets)
        self.num_targets = num_targets

    def __str__(self):
        return (f"You have selected too many resources ({self.num_targets}) to nuke at once. "
                "Halting to avoid hitting AWS API rate limits")


class ThrottleError(CcnukeError):
    """AWS rejected the request because the request rate limit was exceeded."""

    def __init__(self, operation: str, code: str, message: str = ''):
        super().__init__(operation, code, message)
        self.operation = operation
        self.code = code
        self.message = message

    def __str__(self):
        return f"{self.operation} throttled ({self.code}): {self.message}"


class DeleteSubmissionError(CcnukeError):
    def __init__(self, resource_type: str, identifier: str, underlying: Exception):
        super().__init__(resource_type, identifier, underlying)
        self.resource_type = resource_type
        self.identifier = identifier
        self.underlying = underlying

    def __str__(self):
        return f"Could not submit delete for {self.resource_type} {self.identifier}: {self.underlying}"


class PollError(CcnukeError):
    def __init__(self, request_token: str, underlying: Exception):
        super().__init__(request_token, underlying)
        self.request_token = request_token
        self.underlying = underlying

    def __str__(self):
        return f"Could not get status of request {self.request_token}: {self.underlying}"


class RequestFailedError(CcnukeError):
    """Cloud Control reported the delete request as FAILED."""

    def __init__(self, status: str, status_message: str, error_code: str):
        super().__init__(status, status_message, error_code)
        self.status = status
        self.status_message = status_message
        self.error_code = error_code

    def __str__(self):
        return (f"waiter state transitioned to {self.status}. "
                f"StatusMessage: {self.status_message}. ErrorCode: {self.error_code}")


class WaiterTimeoutError(CcnukeError):
    def __init__(self, request_token: str, timeout: float):
        super().__init__(request_token, timeout)
        self.request_token = request_token
        self.timeout = timeout

    def __str__(self):
        return f"Exceeded max wait time of {self.timeout:g}s for request {self.request_token}"


# --- Aggregation ---

class AggregateError(CcnukeError):
    """Several independent errors combined into one."""

    def __init__(self, errors: Iterable[Exception]):
        self.errors = list(errors)
        super().__init__(self.errors)

    def __len__(self):
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)

    def __str__(self):
        noun = "error" if len(self.errors) == 1 else "errors"
        lines = [f"{len(self.errors)} {noun} occurred:"]
        lines.extend(f"\t* {err}" for err in self.errors)
        return "\n".join(lines)


class AggregateRunError(AggregateError):
    """Every per-identifier failure of a whole run.

    results maps each processed region to its outcomes, failed or not.
    """

    def __init__(self, errors: Iterable[Exception], results=None):
        super().__init__(errors)
        self.results = results if results is not None else {}


class ErrorCollector:
    """Accumulates errors and turns them into an AggregateError on demand."""

    def __init__(self):
        self.errors: List[Exception] = []

    def append(self, err: Optional[Exception]) -> None:
        if err is None:
            return
        if isinstance(err, AggregateError):
            self.errors.extend(err.errors)
        else:
            self.errors.append(err)

    def __bool__(self):
        return bool(self.errors)

    def error_or_none(self, cls=AggregateError) -> Optional[AggregateError]:
        if not self.errors:
            return None
        return cls(self.errors)
