import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from ccnuke.catalog import list_resource_types
from ccnuke.cloudcontrol import CloudControlClient
from ccnuke.core.errors import DiscoveryListError
from ccnuke.core.logging import timed
from ccnuke.core.retry import retry_on_throttle
from ccnuke.models import GLOBAL_REGION, AwsAccountResources, AwsRegionResource
from ccnuke.query import ALL_RESOURCE_TYPES, is_nukeable

CREATION_TIME_KEYS = ('CreationTime', 'CreatedTime', 'CreationDate', 'CreatedAt', 'CreationTimestamp')


def _parse_timestamp(value) -> Optional[datetime]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Values this large are epoch milliseconds
        seconds = value / 1000 if value > 1e11 else value
        return datetime.fromtimestamp(seconds, timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return _parse_timestamp(int(text))
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def creation_time(properties: str) -> Optional[datetime]:
    """Creation timestamp from a resource's properties JSON, if it has one."""
    try:
        props = json.loads(properties) if properties else {}
    except ValueError:
        return None
    if not isinstance(props, dict):
        return None
    for key in CREATION_TIME_KEYS:
        if key in props:
            parsed = _parse_timestamp(props[key])
            if parsed is not None:
                return parsed
    return None


def is_newer_than_cutoff(properties: str, exclude_after: Optional[datetime]) -> bool:
    if exclude_after is None:
        return False
    created = creation_time(properties)
    if created is None:
        return False
    if exclude_after.tzinfo is None:
        exclude_after = exclude_after.replace(tzinfo=timezone.utc)
    return created > exclude_after


def resolve_resource_types(session_provider, query, all_resource_types=None) -> List[str]:
    """Concrete resource types to scan for a query."""
    selected = list(query.resource_types)
    if selected and ALL_RESOURCE_TYPES not in selected:
        return selected
    if all_resource_types is None:
        all_resource_types = list_resource_types(session_provider)
    return [t for t in all_resource_types if is_nukeable(t, selected)]


def list_identifiers(client: CloudControlClient, region: str, resource_type: str, exclude_after=None) -> List[str]:
    identifiers = []
    found = retry_on_throttle(lambda: client.list_resources(resource_type),
                              f"[{region}] ListResources {resource_type}")
    for identifier, properties in found:
        if is_newer_than_cutoff(properties, exclude_after):
            logging.debug(f"[{region}] Skipping {resource_type} {identifier}: created after cutoff")
            continue
        logging.debug(f"[{region}] Found resource ({identifier}) with properties: {properties}")
        identifiers.append(identifier)
    return identifiers


@timed
def get_all_resources(session_provider, query, all_resource_types=None) -> AwsAccountResources:
    """Scan every target region for resources of the selected types."""
    account = AwsAccountResources()
    resource_types = resolve_resource_types(session_provider, query, all_resource_types)
    total_regions = len(query.regions)

    for count, region in enumerate(query.regions, start=1):
        # Cloud Control has no global endpoint; global resources are listed
        # through the regional endpoints.
        if region == GLOBAL_REGION:
            continue

        logging.info(f"Checking region [{count}/{total_regions}]: {region}")
        client = CloudControlClient.for_region(session_provider, region)
        resources_in_region = AwsRegionResource()

        for resource_type in resource_types:
            try:
                identifiers = list_identifiers(client, region, resource_type, query.exclude_after)
            except DiscoveryListError as e:
                logging.error(f"[{region}] {e}", extra={'region': region, 'resource_type': resource_type})
                continue
            if identifiers:
                logging.info(f"[{region}] Found {len(identifiers)} {resource_type}")
                resources_in_region.add(resource_type, identifiers)

        if resources_in_region.resources:
            account.resources[region] = resources_in_region

    return account
