"""Polling of asynchronous Cloud Control requests."""
import time
import logging
from typing import Optional

from ccnuke.core.errors import RequestFailedError, ThrottleError, WaiterTimeoutError
from ccnuke.core.retry import is_throttle_code
from ccnuke.models import OperationStatus

DELETE_TIMEOUT = 600
POLL_DELAY = 5

NOT_FOUND = 'NotFound'
DELETE = 'DELETE'


class WaitRule:
    """Decides whether a request is still worth waiting on."""

    def should_keep_waiting(self, event) -> bool:
        """Return True to keep polling, False when done.

        Raise to signal that the request finished unsuccessfully.
        """
        raise NotImplementedError


class DeleteCompletionRule(WaitRule):
    """Terminal states for a delete request.

    SUCCESS and CANCEL_COMPLETE finish the wait. A FAILED delete whose error
    code is NotFound means the resource is already gone and also finishes it.
    A FAILED request whose handler was throttled raises ThrottleError so the
    delete can be submitted again.
    """

    done_states = (OperationStatus.SUCCESS, OperationStatus.CANCEL_COMPLETE)

    def should_keep_waiting(self, event) -> bool:
        if event.operation_status in self.done_states:
            return False
        if event.operation_status == OperationStatus.FAILED:
            if is_already_deleted(event):
                return False
            if is_throttle_code(event.error_code):
                raise ThrottleError(event.operation or DELETE, event.error_code, event.status_message)
            raise RequestFailedError(event.operation_status.value, event.status_message,
                                     event.error_code)
        return True


def is_already_deleted(event) -> bool:
    return (event.operation_status == OperationStatus.FAILED
            and event.error_code == NOT_FOUND
            and event.operation == DELETE)


class Waiter:
    """Poll get_resource_request_status until the rule says stop.

    last_event holds the most recent status seen, even when waiting fails.
    """

    def __init__(self, client, rule: Optional[WaitRule] = None,
                 timeout: float = DELETE_TIMEOUT, delay: float = POLL_DELAY):
        self.client = client
        self.rule = rule or DeleteCompletionRule()
        self.timeout = timeout
        self.delay = delay
        self.last_event = None

    def wait(self, request_token: str):
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                event = self.client.get_resource_request_status(request_token)
            except ThrottleError as e:
                logging.debug(f"Status poll for {request_token} throttled ({e.code}), backing off")
            else:
                self.last_event = event
                if not self.rule.should_keep_waiting(event):
                    return event
            if time.monotonic() + self.delay > deadline:
                raise WaiterTimeoutError(request_token, self.timeout)
            time.sleep(self.delay)
