"""Thin wrapper around the boto3 Cloud Control client.

Every botocore error is converted here so callers only ever see ccnuke
errors, and throttling is always a ThrottleError.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from ccnuke.core.errors import (
    DeleteSubmissionError,
    DiscoveryListError,
    PollError,
)
from ccnuke.core.retry import classify_client_error
from ccnuke.models import OperationStatus


@dataclass(frozen=True)
class ProgressEvent:
    type_name: str
    identifier: str
    request_token: str
    operation: str
    operation_status: OperationStatus
    status_message: str = ""
    error_code: str = ""

    @classmethod
    def from_response(cls, event: dict) -> "ProgressEvent":
        return cls(
            type_name=event.get('TypeName', ''),
            identifier=event.get('Identifier', ''),
            request_token=event.get('RequestToken', ''),
            operation=event.get('Operation', ''),
            operation_status=OperationStatus.parse(event.get('OperationStatus')),
            status_message=event.get('StatusMessage', ''),
            error_code=event.get('ErrorCode', ''),
        )


class CloudControlClient:
    """list / delete / get-status for any registered resource type."""

    def __init__(self, client, region: Optional[str] = None):
        self.client = client
        self.region = region

    @classmethod
    def for_region(cls, session_provider, region: str) -> "CloudControlClient":
        return cls(session_provider.client('cloudcontrol', region), region)

    def list_resources(self, type_name: str) -> List[Tuple[str, str]]:
        """Return (identifier, properties JSON) for every resource of a type."""
        found = []
        try:
            paginator = self.client.get_paginator('list_resources')
            for page in paginator.paginate(TypeName=type_name):
                for description in page.get('ResourceDescriptions', []):
                    found.append((description.get('Identifier', ''),
                                  description.get('Properties', '')))
        except ClientError as e:
            throttled = classify_client_error(e, f'ListResources {type_name}')
            if throttled:
                raise throttled from e
            raise DiscoveryListError(type_name, e) from e
        except BotoCoreError as e:
            raise DiscoveryListError(type_name, e) from e
        return found

    def delete_resource(self, type_name: str, identifier: str) -> str:
        """Submit a delete and return its request token."""
        try:
            response = self.client.delete_resource(TypeName=type_name, Identifier=identifier)
        except ClientError as e:
            throttled = classify_client_error(e, f'DeleteResource {type_name} {identifier}')
            if throttled:
                raise throttled from e
            raise DeleteSubmissionError(type_name, identifier, e) from e
        except BotoCoreError as e:
            raise DeleteSubmissionError(type_name, identifier, e) from e
        token = response.get('ProgressEvent', {}).get('RequestToken')
        if not token:
            raise DeleteSubmissionError(type_name, identifier,
                                        ValueError('response carried no request token'))
        logging.debug(f"Delete of {type_name} {identifier} accepted with token {token}")
        return token

    def get_resource_request_status(self, request_token: str) -> ProgressEvent:
        try:
            response = self.client.get_resource_request_status(RequestToken=request_token)
        except ClientError as e:
            throttled = classify_client_error(e, f'GetResourceRequestStatus {request_token}')
            if throttled:
                raise throttled from e
            raise PollError(request_token, e) from e
        except BotoCoreError as e:
            raise PollError(request_token, e) from e
        return ProgressEvent.from_response(response.get('ProgressEvent', {}))
