"""Tests for the command line entry point."""

import json
import logging

import pytest

from depfetch.cli import build_strategy, main
from depfetch.args import parse_args
from depfetch.constants import ExitCodes
from depfetch.filters import CombinedFilter, NonTransitiveFilter
from depfetch.strategy import TRANSITIVE
from conftest import dependency_xml


@pytest.fixture(autouse=True)
def offline_repo(local_repo, monkeypatch):
    """Point the CLI at the test repository and keep it offline."""
    monkeypatch.delenv("DEPFETCH_CONFIG", raising=False)
    monkeypatch.setenv("DEPFETCH_LOCAL_REPOSITORY", local_repo.root)
    monkeypatch.setenv("DEPFETCH_OFFLINE", "true")
    yield
    logging.getLogger().setLevel(logging.WARNING)


class TestMain:
    """End-to-end runs against a local repository."""

    def test_prints_paths(self, local_repo, capsys):
        local_repo.add("org.app:app:1.0", [dependency_xml("org.lib:core:2.0")])
        local_repo.add("org.lib:core:2.0")

        code = main(["org.app:app:1.0", "--no-central"])

        lines = capsys.readouterr().out.strip().splitlines()
        assert code == ExitCodes.SUCCESS.value
        assert [line.rsplit("/", 1)[-1] for line in lines] == ["app-1.0.jar", "core-2.0.jar"]

    def test_json_without_transitivity(self, local_repo, capsys):
        local_repo.add("org.app:app:1.0", [dependency_xml("org.lib:core:2.0")])
        local_repo.add("org.lib:core:2.0")

        code = main(["org.app:app:1.0", "--without-transitivity", "--format", "json"])

        payload = json.loads(capsys.readouterr().out)
        assert code == ExitCodes.SUCCESS.value
        assert [entry["coordinate"] for entry in payload] == ["org.app:app:1.0"]
        assert payload[0]["dependencies"] == ["org.lib:core:2.0"]

    def test_reject_option(self, local_repo, capsys):
        local_repo.add("org.app:app:1.0", [dependency_xml("org.lib:core:2.0")])
        local_repo.add("org.lib:core:2.0")

        main(["org.app:app:1.0", "--reject", "org.lib:core"])

        assert "core-2.0.jar" not in capsys.readouterr().out

    def test_resolution_failure(self):
        assert main(["org.missing:thing:1.0"]) == ExitCodes.RESOLUTION_ERROR.value

    def test_bad_coordinate(self):
        assert main(["org.missing:thing"]) == ExitCodes.FILE_ERROR.value

    def test_bad_repository(self):
        assert main(["g:a:1", "--repo", "no-equals-sign"]) == ExitCodes.FILE_ERROR.value


class TestBuildStrategy:
    """Strategy composition from options."""

    def test_default_is_transitive(self):
        assert build_strategy(parse_args(["g:a:1"])) is TRANSITIVE

    def test_combination(self):
        strategy = build_strategy(parse_args(["g:a:1", "--without-transitivity", "--scope", "compile"]))
        assert isinstance(strategy.pre_filters[0], CombinedFilter)
        assert any(isinstance(f, NonTransitiveFilter) for f in strategy.pre_filters[0].filters)
