"""Shared test fixtures."""

import json
import shutil
from pathlib import Path

import pytest

from jsonsite.taxonomy import TaxonomyDefinition, TermShape

REPO_ROOT = Path(__file__).resolve().parent.parent

GAMES = [
    {
        "id": 1,
        "title": "Starfall Academy",
        "tags": ["Action", "RPG"],
        "developers": [{"name": "Miel"}],
    },
    {
        "id": 2,
        "title": "Harbor Lights",
        "tags": ["action", "Mystery"],
        "developers": [{"name": "Miel"}, {"name": "Studio Kaze"}],
    },
]


@pytest.fixture
def tag_taxonomy():
    return TaxonomyDefinition("tag", "tags")


@pytest.fixture
def developer_taxonomy():
    return TaxonomyDefinition("developer", "developers", TermShape.STRUCTURED)


@pytest.fixture
def games():
    return json.loads(json.dumps(GAMES))


@pytest.fixture
def site_dir(tmp_path, monkeypatch):
    """A project directory with templates, data and a TOML config."""
    shutil.copytree(REPO_ROOT / "templates", tmp_path / "templates")
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "games.json").write_text(json.dumps(GAMES), encoding="utf-8")
    (tmp_path / "site.toml").write_text(
        "\n".join(
            [
                'site_name = "Test Site"',
                'data = "data/games.json"',
                'output = "public"',
                'site_url = "https://example.com"',
                'structured_fields = ["developers"]',
                "",
                "[taxonomies]",
                'tag = "tags"',
                'developer = "developers"',
                "",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path
