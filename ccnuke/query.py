import re
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from ccnuke.catalog import list_resource_types
from ccnuke.core.errors import (
    AllResourceTypesExcludedError,
    CouldNotDetermineEnabledRegionsError,
    CouldNotSelectRegionError,
    InvalidResourceTypesSuppliedError,
    InvalidTimeStringPassedError,
    RegionDiscoveryError,
    RegionSelectionError,
    ResourceTypeAndExcludeFlagsBothPassedError,
)
from ccnuke.models import GLOBAL_REGION
from ccnuke.regions import get_enabled_regions, get_target_regions

ALL_RESOURCE_TYPES = "all"

_DURATION_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|s|m|h|d)')
_UNIT_SECONDS = {'ms': 0.001, 's': 1, 'm': 60, 'h': 3600, 'd': 86400}


@dataclass(frozen=True)
class Query:
    """Validated parameters for scanning and nuking an account.

    An empty resource_types tuple means every resource type.
    """
    regions: Tuple[str, ...]
    resource_types: Tuple[str, ...] = ()
    exclude_after: Optional[datetime] = None


def is_valid_resource_type(resource_type: str, all_resource_types: List[str]) -> bool:
    return resource_type in all_resource_types


def is_nukeable(resource_type: str, resource_types: List[str]) -> bool:
    """Whether resource_type falls within the selected resource types."""
    return (not resource_types
            or ALL_RESOURCE_TYPES in resource_types
            or resource_type in resource_types)


def handle_resource_type_selections(selected: List[str], excluded: List[str],
                                    all_resource_types: List[str]) -> List[str]:
    """Resolve --resource-type / --exclude-resource-type into one selection."""
    if selected and excluded:
        raise ResourceTypeAndExcludeFlagsBothPassedError()

    invalid = [t for t in list(selected) + list(excluded)
               if t != ALL_RESOURCE_TYPES and not is_valid_resource_type(t, all_resource_types)]
    if invalid:
        raise InvalidResourceTypesSuppliedError(invalid)

    if selected:
        return list(selected)
    if excluded:
        # an empty selection means every type, so excluding everything must fail
        remaining = [] if ALL_RESOURCE_TYPES in excluded else \
            [t for t in all_resource_types if t not in excluded]
        if not remaining:
            raise AllResourceTypesExcludedError()
        return remaining
    return []


def parse_duration(text: str) -> timedelta:
    """Parse durations like 30s, 15m, 24h, 7d or 1h30m."""
    value = (text or '').strip()
    if not value or _DURATION_PART.sub('', value):
        raise InvalidTimeStringPassedError(text, ValueError('expected a duration such as 24h or 1h30m'))
    seconds = sum(float(n) * _UNIT_SECONDS[unit] for n, unit in _DURATION_PART.findall(value))
    return timedelta(seconds=seconds)


def exclude_after_from(older_than: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    if not older_than:
        return None
    now = now or datetime.now(timezone.utc)
    return now - parse_duration(older_than)


def new_query(session_provider, regions=None, exclude_regions=None, resource_types=None,
              exclude_resource_types=None, exclude_after=None, all_resource_types=None) -> Query:
    """Validate the requested selection and return a Query.

    Nothing is returned unless every check passes. Each failure raises its
    own QueryValidationError subclass.
    """
    regions = list(regions or [])
    exclude_regions = list(exclude_regions or [])
    resource_types = list(resource_types or [])
    exclude_resource_types = list(exclude_resource_types or [])

    if resource_types and exclude_resource_types:
        raise ResourceTypeAndExcludeFlagsBothPassedError()

    if all_resource_types is None and (resource_types or exclude_resource_types):
        all_resource_types = list_resource_types(session_provider)
    selected_types = handle_resource_type_selections(
        resource_types, exclude_resource_types, all_resource_types or [])

    try:
        enabled = get_enabled_regions(session_provider)
    except RegionDiscoveryError as e:
        raise CouldNotDetermineEnabledRegionsError(e) from e

    # global is a fake region, used to represent global resources
    enabled = enabled + [GLOBAL_REGION]

    try:
        target_regions = get_target_regions(enabled, regions, exclude_regions)
    except RegionSelectionError as e:
        raise CouldNotSelectRegionError(e) from e

    logging.info(f"Target regions: {target_regions}")
    return Query(
        regions=tuple(target_regions),
        resource_types=tuple(selected_types),
        exclude_after=exclude_after,
    )
