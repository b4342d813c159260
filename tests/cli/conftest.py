"""Fixtures for CLI tests."""

import json

import pytest
import yaml
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def valid_record_file(tmp_path, valid_record_data):
    """A passing record written as YAML."""
    path = tmp_path / "record.yaml"
    path.write_text(yaml.safe_dump(valid_record_data))
    return path


@pytest.fixture
def invalid_record_file(tmp_path, invalid_record_data):
    """A failing record written as JSON."""
    path = tmp_path / "record.json"
    path.write_text(json.dumps(invalid_record_data))
    return path
