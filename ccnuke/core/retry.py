import time
import logging
from botocore.exceptions import ClientError

from ccnuke.core.errors import AggregateError, ThrottleError

THROTTLE_COOLDOWN = 60
BATCH_DELAY = 10

THROTTLE_CODES = frozenset([
    'Throttling',
    'ThrottlingException',
    'ThrottledException',
    'RequestLimitExceeded',
    'RequestThrottled',
    'RequestThrottledException',
    'TooManyRequestsException',
    'SlowDown',
])


def error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


def is_throttle_code(code: str) -> bool:
    return code in THROTTLE_CODES


def classify_client_error(error: ClientError, operation: str):
    """Return a ThrottleError for rate limit rejections, otherwise None."""
    code = error_code(error)
    if is_throttle_code(code):
        message = error.response.get('Error', {}).get('Message', '')
        return ThrottleError(operation, code, message)
    return None


def is_throttled(error) -> bool:
    if isinstance(error, ThrottleError):
        return True
    if isinstance(error, AggregateError):
        return any(is_throttled(e) for e in error.errors)
    return False


def retry_on_throttle(operation, description, cooldown=THROTTLE_COOLDOWN):
    """Call operation until it stops raising ThrottleError.

    There is no attempt limit; any other exception propagates.
    """
    while True:
        try:
            return operation()
        except ThrottleError as e:
            logging.info(f'{description} hit the request limit ({e.code}); '
                         f'waiting {cooldown} seconds before retrying')
            time.sleep(cooldown)
