import logging
from typing import List

from botocore.exceptions import BotoCoreError, ClientError

from ccnuke.core.errors import RegionDiscoveryError, RegionSelectionError

# Regions enabled by default on new AWS accounts. Since spring 2019 newer
# regions must be opted into explicitly.
OPT_IN_NOT_REQUIRED_REGIONS = [
    "eu-north-1",
    "ap-south-1",
    "eu-west-3",
    "eu-west-2",
    "eu-west-1",
    "ap-northeast-3",
    "ap-northeast-2",
    "ap-northeast-1",
    "sa-east-1",
    "ca-central-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "eu-central-1",
    "us-east-1",
    "us-east-2",
    "us-west-1",
    "us-west-2",
]

# In accounts with GovCloud enabled these are the only available regions.
GOV_CLOUD_REGIONS = [
    "us-gov-east-1",
    "us-gov-west-1",
]


def get_enabled_regions(session_provider) -> List[str]:
    """Regions enabled in the account, as reported by describe_regions.

    A default region may have been disabled on purpose, so each candidate is
    tried in turn until one answers.
    """
    for region in OPT_IN_NOT_REQUIRED_REGIONS + GOV_CLOUD_REGIONS:
        ec2 = session_provider.client('ec2', region)
        try:
            response = ec2.describe_regions()
        except (ClientError, BotoCoreError) as e:
            logging.debug(f"describe_regions failed in {region}: {e}")
            continue
        regions = [r['RegionName'] for r in response.get('Regions', [])]
        logging.info('Retrieved regions: %s', regions)
        return regions
    raise RegionDiscoveryError("could not find any enabled regions")


def get_target_regions(enabled: List[str], selected: List[str], excluded: List[str]) -> List[str]:
    """Combine enabled, selected and excluded regions into the final target list."""
    if not enabled:
        raise RegionSelectionError("Cannot have empty enabled regions")

    if selected and excluded:
        raise RegionSelectionError("Cannot specify both selected and excluded regions")

    if not selected and not excluded:
        return list(enabled)

    if selected:
        invalid = [r for r in selected if r not in enabled]
        if invalid:
            raise RegionSelectionError(f"Invalid values for region: {invalid}")
        return list(selected)

    invalid = [r for r in excluded if r not in enabled]
    if invalid:
        raise RegionSelectionError(f"Invalid values for exclude-region: {invalid}")

    targets = [r for r in enabled if r not in excluded]
    if not targets:
        raise RegionSelectionError(f"Cannot exclude all regions: {list(excluded)}")
    return targets
