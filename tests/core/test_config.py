import pytest
import yaml

from ccnuke.core.config import Config, load_config, load_nuke_plan
from ccnuke.core.errors import ConfigError


def test_load_config_defaults():
    config = load_config(None)
    assert config == Config()
    assert config.regions == []
    assert config.dry_run is False


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / 'ccnuke.yml'
    path.write_text(
        "regions: [us-east-1, eu-west-1]\n"
        "resource_types:\n"
        "  - AWS::Logs::LogGroup\n"
        "older_than: 24h\n"
        "dry_run: true\n"
        "verbosity: 2\n"
    )

    config = load_config(str(path))

    assert config.regions == ['us-east-1', 'eu-west-1']
    assert config.resource_types == ['AWS::Logs::LogGroup']
    assert config.older_than == '24h'
    assert config.dry_run is True
    assert config.verbosity == 2


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / 'nope.yml'))


def test_load_config_wrong_shape(tmp_path):
    path = tmp_path / 'ccnuke.yml'
    path.write_text("regions: {us-east-1: true}\n")

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_load_nuke_plan(tmp_path):
    (tmp_path / 'nuke-plan.yml').write_text(
        "ResourcesToNuke:\n"
        "  - AWS::Logs::LogGroup\n"
        "  - AWS::IAM::Role\n"
    )

    plan = load_nuke_plan(str(tmp_path))

    assert plan.targets == ['AWS::Logs::LogGroup', 'AWS::IAM::Role']


def test_load_nuke_plan_from_working_directory(tmp_path, monkeypatch):
    (tmp_path / 'nuke-plan.yml').write_text("ResourcesToNuke:\n  - AWS::EC2::FlowLog\n")
    monkeypatch.chdir(tmp_path)

    assert load_nuke_plan().targets == ['AWS::EC2::FlowLog']


def test_load_nuke_plan_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_nuke_plan(str(tmp_path))


def test_load_nuke_plan_invalid_yaml(tmp_path):
    (tmp_path / 'nuke-plan.yml').write_text("ResourcesToNuke: [unterminated\n")

    with pytest.raises(yaml.YAMLError):
        load_nuke_plan(str(tmp_path))
