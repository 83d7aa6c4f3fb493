import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from ccnuke.core.errors import DiscoveryListError, ThrottleError
from ccnuke.discovery import creation_time, get_all_resources, is_newer_than_cutoff, resolve_resource_types
from ccnuke.query import Query

LOG_GROUP = 'AWS::Logs::LogGroup'
ROLE = 'AWS::IAM::Role'
CUTOFF = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def cc_client():
    client = MagicMock()
    client.list_resources.return_value = []
    return client


def scan(client, query, all_types=None):
    with patch('ccnuke.discovery.CloudControlClient.for_region', return_value=client) as for_region:
        account = get_all_resources(MagicMock(), query, all_types)
    return account, for_region


def test_discovers_log_groups(cc_client):
    cc_client.list_resources.return_value = [('testy', '{}'), ('westside', '{}')]

    account, _ = scan(cc_client, Query(regions=('us-east-1',), resource_types=(LOG_GROUP,)))

    assert list(account.resources) == ['us-east-1']
    assert account.get_region('us-east-1').identifiers_for_resource_type(LOG_GROUP) == ['testy', 'westside']
    cc_client.list_resources.assert_called_once_with(LOG_GROUP)


def test_global_region_is_not_scanned(cc_client):
    account, for_region = scan(cc_client, Query(regions=('global',), resource_types=(LOG_GROUP,)))

    for_region.assert_not_called()
    assert account.resources == {}


def test_regions_without_resources_are_omitted(cc_client):
    cc_client.list_resources.side_effect = lambda t: [('testy', '{}')] if cc_client.list_resources.call_count == 1 else []

    account, _ = scan(cc_client, Query(regions=('us-east-1', 'eu-west-1'), resource_types=(LOG_GROUP,)))

    assert list(account.resources) == ['us-east-1']


def test_empty_types_are_not_attached(cc_client):
    cc_client.list_resources.side_effect = lambda t: [('role-a', '{}')] if t == ROLE else []

    account, _ = scan(cc_client, Query(regions=('us-east-1',), resource_types=(LOG_GROUP, ROLE)))

    resources = account.get_region('us-east-1').resources
    assert [r.type_name for r in resources] == [ROLE]


def test_list_failure_skips_only_that_type(cc_client):
    def list_resources(type_name):
        if type_name == LOG_GROUP:
            raise DiscoveryListError(type_name, Exception('UnsupportedActionException'))
        return [('role-a', '{}')]
    cc_client.list_resources.side_effect = list_resources

    account, _ = scan(cc_client, Query(regions=('us-east-1',), resource_types=(LOG_GROUP, ROLE)))

    region = account.get_region('us-east-1')
    assert not region.resource_type_present(LOG_GROUP)
    assert region.identifiers_for_resource_type(ROLE) == ['role-a']


def test_throttled_listing_is_retried(cc_client):
    cc_client.list_resources.side_effect = [ThrottleError('ListResources', 'Throttling'), [('testy', '{}')]]

    with patch('time.sleep') as mock_sleep:
        account, _ = scan(cc_client, Query(regions=('us-east-1',), resource_types=(LOG_GROUP,)))

    assert account.total_count() == 1
    mock_sleep.assert_called_once_with(60)


def test_resources_newer_than_cutoff_are_skipped(cc_client):
    cc_client.list_resources.return_value = [
        ('old', json.dumps({'CreationTime': 1672531200000})),
        ('new', json.dumps({'CreationTime': '2024-06-01T00:00:00Z'})),
        ('unknown', json.dumps({'LogGroupName': 'unknown'})),
    ]

    account, _ = scan(cc_client, Query(regions=('us-east-1',), resource_types=(LOG_GROUP,), exclude_after=CUTOFF))

    assert account.get_region('us-east-1').identifiers_for_resource_type(LOG_GROUP) == ['old', 'unknown']


def test_all_types_come_from_catalog(cc_client):
    query = Query(regions=('us-east-1',), resource_types=('all',))
    assert resolve_resource_types(MagicMock(), query, [LOG_GROUP, ROLE]) == [LOG_GROUP, ROLE]


def test_empty_selection_fetches_catalog():
    with patch('ccnuke.discovery.list_resource_types', return_value=[ROLE]) as mock_catalog:
        assert resolve_resource_types(MagicMock(), Query(regions=('us-east-1',))) == [ROLE]
    mock_catalog.assert_called_once()


@pytest.mark.parametrize('props,expected', [
    ({'CreationTime': 1704067200}, datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ({'CreatedAt': '1704067200000'}, datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ({'CreationDate': '2024-01-01T00:00:00'}, datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ({'CreationDate': 'yesterday'}, None),
    ({}, None),
])
def test_creation_time(props, expected):
    assert creation_time(json.dumps(props)) == expected


def test_creation_time_bad_json():
    assert creation_time('not json') is None
    assert creation_time('') is None


def test_no_cutoff_keeps_everything():
    assert not is_newer_than_cutoff(json.dumps({'CreationTime': '2030-01-01T00:00:00Z'}), None)
