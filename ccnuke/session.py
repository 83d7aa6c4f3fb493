import logging
from typing import Dict, Optional

import boto3

from ccnuke.models import DEFAULT_REGION, GLOBAL_REGION


def session_region(region: str) -> str:
    """There is no real region named global; pick a concrete one for the session."""
    if region == GLOBAL_REGION:
        return DEFAULT_REGION
    return region


class SessionProvider:
    """Builds boto3 sessions and clients for a region.

    Credentials passed in here take precedence over the default credential
    chain. One provider is created per run and handed to every component that
    talks to AWS.
    """

    def __init__(self, profile_name: Optional[str] = None,
                 credentials: Optional[Dict[str, str]] = None,
                 session_factory=boto3.session.Session):
        self.profile_name = profile_name
        self.credentials = dict(credentials or {})
        self.session_factory = session_factory

    def session(self, region: str):
        kwargs = {'region_name': session_region(region)}
        if self.profile_name:
            kwargs['profile_name'] = self.profile_name
        kwargs.update(self.credentials)
        logging.debug(f"Creating AWS session for region {kwargs['region_name']}")
        return self.session_factory(**kwargs)

    def client(self, service: str, region: str):
        return self.session(region).client(service, region_name=session_region(region))
