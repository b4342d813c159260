"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config lookup for each test.

    Configuration is discovered from the working directory, the XDG config
    home and ``DCFORM_*`` variables, so each test gets clean versions of all
    three.
    """
    for name in list(os.environ):
        if name.startswith("DCFORM_"):
            monkeypatch.delenv(name)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def valid_record_data():
    """A metadata record that passes every check."""
    return {
        "titles": [
            {"title": "Seismic velocity model of the Central Andes", "titleType": "main-title"},
            {"title": "Andes velocity model", "titleType": "alternative-title"},
        ],
        "publicationYear": 2023,
        "version": "1.0.0",
        "doi": "https://doi.org/10.5880/GFZ.2.4.2023.001",
        "abstract": "A three-dimensional P-wave velocity model.",
        "url": "https://dataservices.example.org/andes",
        "dates": [
            {"dateType": "created", "startDate": "2020-01-01", "endDate": "2020-12-31"},
            {"dateType": "available", "startDate": "2023-06-01"},
        ],
        "contributors": [
            {"roles": ["Researcher"], "firstName": "Ana", "lastName": "Rojas",
             "orcid": "0000-0002-1825-0097"},
            {"roles": "hosting-institution", "institutionName": "Data Centre"},
        ],
    }


@pytest.fixture
def invalid_record_data():
    """A metadata record with several blocking problems."""
    return {
        "titles": [
            {"title": "Ocean data", "titleType": "main-title"},
            {"title": "ocean  DATA", "titleType": "main-title"},
        ],
        "version": "01.2",
        "doi": "10.12/too-short",
        "abstract": "",
        "dates": [
            {"dateType": "collected", "startDate": "2021-05-01", "endDate": "2020-01-01"},
        ],
        "contributors": [
            {"roles": [], "firstName": "No", "lastName": "Roles"},
            {"roles": ["Editor"], "orcid": "0000-0002-1825-0098"},
        ],
    }
