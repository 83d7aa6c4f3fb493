import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError

from ccnuke.cloudcontrol import CloudControlClient
from ccnuke.core.errors import (
    AggregateError,
    AggregateRunError,
    DeleteSubmissionError,
    ErrorCollector,
    PollError,
    RequestFailedError,
    ThrottleError,
    TooManyResourcesTargetedError,
    WaiterTimeoutError,
)
from ccnuke.core.logging import timed
from ccnuke.core.retry import BATCH_DELAY, THROTTLE_COOLDOWN, is_throttled
from ccnuke.core.waiter import DELETE, DELETE_TIMEOUT, POLL_DELAY, Waiter, is_already_deleted
from ccnuke.models import AwsAccountResources, AwsResource, DeletionOutcome, OperationStatus
from ccnuke.report import build_table, render_region
from ccnuke.session import session_region


def split(identifiers: List[str], limit: int) -> List[List[str]]:
    """Chunk identifiers into ordered batches of at most limit items.

    A limit of 0 returns everything as one batch.
    """
    if limit == 0:
        return [list(identifiers)]
    limit = abs(limit)
    return [list(identifiers[i:i + limit]) for i in range(0, len(identifiers), limit)]


def nuke_async(client: CloudControlClient, type_name: str, identifier: str,
               timeout: float = DELETE_TIMEOUT, delay: float = POLL_DELAY) -> DeletionOutcome:
    """Delete one resource and wait for Cloud Control to finish with it."""
    logging.info(f"Nuking resource type: {type_name} with identifier: {identifier}",
                 extra={'resource_type': type_name, 'resource_id': identifier, 'action': 'delete'})
    try:
        request_token = client.delete_resource(type_name, identifier)
    except (DeleteSubmissionError, ThrottleError) as e:
        logging.error(f"Delete of {type_name} {identifier} was not accepted: {e}")
        return DeletionOutcome(type_name, identifier, operation=DELETE, error=e)

    logging.debug(f"Waiting on deletion of resource type: {type_name} with identifier: {identifier}")
    waiter = Waiter(client, timeout=timeout, delay=delay)
    try:
        event = waiter.wait(request_token)
    except ThrottleError as e:
        logging.info(f"Delete of {type_name} {identifier} was throttled by its handler: {e}")
        return DeletionOutcome(type_name, identifier, operation=DELETE,
                               operation_status=OperationStatus.FAILED,
                               status_message=e.message, error=e)
    except RequestFailedError as e:
        last = waiter.last_event
        return DeletionOutcome(type_name, identifier,
                               operation=last.operation if last else DELETE,
                               operation_status=OperationStatus.FAILED,
                               status_message=e.status_message, error=e)
    except (PollError, WaiterTimeoutError) as e:
        logging.warning(f"Gave up waiting on {type_name} {identifier}: {e}")
        return DeletionOutcome(type_name, identifier, operation=DELETE,
                               operation_status=OperationStatus.NOT_AVAILABLE,
                               status_message=OperationStatus.NOT_AVAILABLE.value, error=e)

    status = event.operation_status
    if is_already_deleted(event):
        logging.info(f"{type_name} {identifier} was already deleted")
        status = OperationStatus.SUCCESS
    return DeletionOutcome(type_name, identifier, operation=event.operation or DELETE,
                           operation_status=status, status_message=event.status_message)


def nuke(resource: AwsResource, client: CloudControlClient, identifiers: List[str],
         timeout: float = DELETE_TIMEOUT, delay: float = POLL_DELAY) -> List[DeletionOutcome]:
    """Delete one batch of identifiers concurrently.

    Every task is joined before any outcome is read. Outcomes come back in
    the order of identifiers.
    """
    if len(identifiers) > resource.max_batch_size():
        logging.error(f"Nuking too many resources at once ({len(identifiers)}): "
                      "halting to avoid hitting AWS API rate limiting")
        raise TooManyResourcesTargetedError(len(identifiers))
    if not identifiers:
        return []

    logging.info(f"Nuking resource type ({resource.type_name}) in region ({client.region})")
    with ThreadPoolExecutor(max_workers=len(identifiers)) as executor:
        futures = [executor.submit(nuke_async, client, resource.type_name, identifier, timeout, delay)
                   for identifier in identifiers]

    outcomes = []
    for identifier, fut in zip(identifiers, futures):
        try:
            outcomes.append(fut.result())
        except Exception as ex:
            logging.error(f"Unexpected error nuking {resource.type_name} {identifier}: {ex}")
            outcomes.append(DeletionOutcome(resource.type_name, identifier, operation=DELETE, error=ex))
    return outcomes


def nuke_batch(resource: AwsResource, client: CloudControlClient, batch: List[str],
               cooldown: float = THROTTLE_COOLDOWN, timeout: float = DELETE_TIMEOUT,
               delay: float = POLL_DELAY) -> Tuple[List[DeletionOutcome], Optional[AggregateError]]:
    """Nuke a batch, retrying it in place while AWS throttles us.

    Only identifiers whose delete was throttled are submitted again; every
    other outcome is final the first time it is seen.
    """
    final: Dict[str, DeletionOutcome] = {}
    pending = list(batch)
    while True:
        outcomes = nuke(resource, client, pending, timeout, delay)
        throttled = [o.identifier for o in outcomes if is_throttled(o.error)]
        for outcome in outcomes:
            if outcome.identifier not in throttled:
                final[outcome.identifier] = outcome
        if not throttled:
            break
        logging.info(f"Request limit reached for {len(throttled)} {resource.type_name}. "
                     f"Waiting {cooldown} seconds before retrying the batch")
        time.sleep(cooldown)
        pending = throttled

    ordered = [final[identifier] for identifier in batch]
    errors = ErrorCollector()
    for outcome in ordered:
        errors.append(outcome.error)
    return ordered, errors.error_or_none()


@timed
def nuke_all_resources_in_region(account: AwsAccountResources, region: str, client: CloudControlClient,
                                 batch_delay: float = BATCH_DELAY, **kwargs
                                 ) -> Tuple[List[DeletionOutcome], Optional[AggregateError]]:
    """Delete every resource found in a region, type by type, batch by batch."""
    outcomes: List[DeletionOutcome] = []
    errors = ErrorCollector()

    for resource in account.get_region(region).resources:
        identifiers = resource.resource_identifiers()
        logging.info(f"[{region}] Terminating {len(identifiers)} {resource.type_name} in batches")
        batches = split(identifiers, resource.max_batch_size())

        for i, batch in enumerate(batches):
            try:
                batch_outcomes, batch_err = nuke_batch(resource, client, batch, **kwargs)
            except TooManyResourcesTargetedError as e:
                errors.append(e)
                continue
            outcomes.extend(batch_outcomes)
            errors.append(batch_err)

            if i != len(batches) - 1:
                logging.info(f"Sleeping for {batch_delay} seconds before processing next batch...")
                time.sleep(batch_delay)

    deleted = sum(1 for o in outcomes if o.succeeded)
    logging.info(f"[{region}] Nuked {deleted} of {len(outcomes)} resources", extra={'region': region})
    return outcomes, errors.error_or_none()


def nuke_all_resources(session_provider, account: AwsAccountResources, regions: List[str],
                       **kwargs) -> Dict[str, List[DeletionOutcome]]:
    """Nuke everything in account, region by region.

    A failing region never stops the next one. If anything failed an
    AggregateRunError carrying every error is raised once all regions ran.
    """
    results: Dict[str, List[DeletionOutcome]] = {}
    errors = ErrorCollector()

    for region in regions:
        if not account.get_region(region).resources:
            logging.debug(f"[{region}] Nothing to nuke")
            continue

        try:
            client = CloudControlClient.for_region(session_provider, session_region(region))
        except BotoCoreError as e:
            logging.error(f"[{region}] Could not create AWS session: {e}")
            errors.append(e)
            continue

        outcomes, region_err = nuke_all_resources_in_region(account, region, client, **kwargs)
        results[region] = outcomes
        if region_err:
            logging.error(f"[{region}] {len(region_err)} resources failed to nuke",
                          extra={'region': region})
            errors.append(region_err)

        if outcomes:
            render_region(region, build_table(outcomes))

    run_err = errors.error_or_none(AggregateRunError)
    if run_err:
        run_err.results = results
        raise run_err
    return results
