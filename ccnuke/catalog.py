import logging
from typing import List

from botocore.exceptions import BotoCoreError, ClientError

from ccnuke.core.errors import CatalogError
from ccnuke.core.retry import classify_client_error, retry_on_throttle
from ccnuke.models import DEFAULT_REGION

LIST_TYPES_FILTERS = {
    'DeprecatedStatus': 'LIVE',
    'Filters': {'Category': 'AWS_TYPES'},
    'ProvisioningType': 'FULLY_MUTABLE',
    'Visibility': 'PUBLIC',
}


def _list_types(cfn) -> List[str]:
    type_names = []
    try:
        paginator = cfn.get_paginator('list_types')
        for page in paginator.paginate(**LIST_TYPES_FILTERS):
            for summary in page.get('TypeSummaries', []):
                type_names.append(summary['TypeName'])
    except ClientError as e:
        throttled = classify_client_error(e, 'ListTypes')
        if throttled:
            raise throttled from e
        raise CatalogError(e) from e
    except BotoCoreError as e:
        raise CatalogError(e) from e
    return type_names


def list_resource_types(session_provider) -> List[str]:
    """Every resource type that can be passed to --resource-type, sorted."""
    cfn = session_provider.client('cloudformation', DEFAULT_REGION)
    type_names = retry_on_throttle(lambda: _list_types(cfn), 'ListTypes')
    logging.debug(f"Registry reports {len(type_names)} fully mutable resource types")
    return sorted(type_names)
