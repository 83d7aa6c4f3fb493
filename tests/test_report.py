from ccnuke.core.errors import DeleteSubmissionError
from ccnuke.models import AwsAccountResources, AwsRegionResource, AwsResource, DeletionOutcome, OperationStatus
from ccnuke.report import HEADER, build_table, format_table, render_inventory, render_region

LOG_GROUP = 'AWS::Logs::LogGroup'


def outcomes():
    return [
        DeletionOutcome(LOG_GROUP, 'testy', 'DELETE', OperationStatus.SUCCESS, ''),
        DeletionOutcome(LOG_GROUP, 'westside', 'DELETE', OperationStatus.NOT_AVAILABLE, 'Not Available',
                        DeleteSubmissionError(LOG_GROUP, 'westside', Exception('AccessDenied'))),
    ]


def test_build_table_rows():
    rows = build_table(outcomes())

    assert rows[0] == HEADER
    assert len(rows) == 3
    assert rows[1] == [f'{LOG_GROUP} - testy', 'DELETE', 'SUCCESS', '', 'nil']
    assert rows[2][2] == 'Not Available'
    assert 'AccessDenied' in rows[2][4]


def test_format_table_aligns_columns():
    text = format_table([['a', 'bb'], ['ccc', 'd']])
    lines = text.splitlines()

    assert lines[0] == 'a   | bb'
    assert lines[1] == '----+---'
    assert lines[2] == 'ccc | d'


def test_render_region(capsys):
    render_region('us-east-1', build_table(outcomes()))
    out = capsys.readouterr().out

    assert 'Region: us-east-1' in out
    assert f'{LOG_GROUP} - westside' in out


def test_render_inventory(capsys):
    account = AwsAccountResources({'eu-west-1': AwsRegionResource([AwsResource(LOG_GROUP, ['testy'])])})
    render_inventory(account)
    out = capsys.readouterr().out

    assert 'Region: eu-west-1' in out
    assert '- testy' in out


def test_render_inventory_empty(capsys):
    render_inventory(AwsAccountResources())
    assert 'None' in capsys.readouterr().out
