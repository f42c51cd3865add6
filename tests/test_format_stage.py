"""Tests for format stages and their single/many result contracts."""

import logging

import pytest

from depfetch import ArtifactInfo, FormatStage, LegacyFormatStage, OutputKind, ResolvedArtifact
from depfetch.coordinates import parse_coordinate
from depfetch.errors import (
    AmbiguousResultError,
    InvalidArgumentError,
    NoResultError,
    UnsupportedOperationError,
)


def artifact(coordinate, file, **kwargs):
    return ResolvedArtifact.create(parse_coordinate(coordinate), file, **kwargs)


class TestSingle:
    """as_single contract."""

    def test_no_result(self):
        with pytest.raises(NoResultError):
            FormatStage([]).as_single(OutputKind.FILE)

    def test_exactly_one(self, make_file):
        jar = make_file("a.jar")
        assert FormatStage([artifact("g:a:1", jar)]).as_single(OutputKind.FILE) == jar

    def test_ambiguous_lists_every_result(self, make_file):
        first, second, third = make_file("a.jar"), make_file("b.jar"), make_file("c.jar")
        stage = FormatStage([artifact("g:a:1", first), artifact("g:b:1", second), artifact("g:c:1", third)])

        with pytest.raises(AmbiguousResultError) as excinfo:
            stage.as_single(OutputKind.FILE)

        assert excinfo.value.results == [first, second, third]
        for path in (first, second, third):
            assert str(path) in str(excinfo.value)

    def test_same_artifact_different_classifiers(self, engine, new_resolver, make_file):
        linux, windows = make_file("bar-linux.jar"), make_file("bar-windows.jar")
        engine.register("foo:bar:jar:linux:1", linux)
        engine.register("foo:bar:jar:windows:1", windows)

        format_stage = new_resolver().resolve("foo:bar:jar:linux:1", "foo:bar:jar:windows:1").with_transitivity()

        with pytest.raises(AmbiguousResultError) as excinfo:
            format_stage.as_single(OutputKind.FILE)
        assert excinfo.value.results == [linux, windows]

    def test_ambiguous_streams_are_closed(self, make_file):
        stage = FormatStage([artifact("g:a:1", make_file("a.jar")), artifact("g:b:1", make_file("b.jar"))])
        with pytest.raises(AmbiguousResultError) as excinfo:
            stage.as_single(OutputKind.STREAM)
        assert all(stream.closed for stream in excinfo.value.results)


class TestMany:
    """as_many conversions."""

    def test_order_preserved(self, make_file):
        paths = [make_file(f"{name}.jar") for name in ("z", "a", "m")]
        stage = FormatStage([artifact(f"g:{p.stem}:1", p) for p in paths])
        assert stage.as_many(OutputKind.FILE) == paths
        assert stage.as_file() == paths

    def test_stream(self, make_file):
        stage = FormatStage([artifact("g:a:1", make_file("a.jar", b"bytes!"))])
        with stage.as_single_input_stream() as stream:
            assert stream.read() == b"bytes!"

    def test_resolved_artifact_carries_file(self, make_file):
        jar = make_file("a.jar")
        result = FormatStage([artifact("g:a:1", jar)]).as_single_resolved_artifact()
        assert isinstance(result, ResolvedArtifact)
        assert result.file == jar
        assert result.resolved_version == "1"

    def test_artifact_info_skips_materialization(self, tmp_path):
        missing = tmp_path / "not-there.jar"
        info = FormatStage([artifact("g:a:1", missing)]).as_single(OutputKind.ARTIFACT_INFO)
        assert isinstance(info, ArtifactInfo)
        assert not isinstance(info, ResolvedArtifact)
        assert str(info.coordinate) == "g:a:1"

    def test_unmappable_artifacts_skipped(self, make_file, caplog):
        stage = FormatStage([artifact("g:parent:pom:1", make_file("parent.pom")),
                             artifact("g:a:1", make_file("a.jar"))])
        with caplog.at_level(logging.INFO, logger="depfetch.stages"):
            files = stage.as_many(OutputKind.FILE)
        assert [p.name for p in files] == ["a.jar"]
        assert "cannot be mapped to a file" in caplog.text

    def test_invalid_kind(self):
        with pytest.raises(InvalidArgumentError):
            FormatStage([]).as_many("file")


class TestLegacy:
    """The legacy surface refuses descriptor-only output."""

    def test_artifact_info_unsupported(self, make_file):
        stage = LegacyFormatStage([artifact("g:a:1", make_file("a.jar"))])
        with pytest.raises(UnsupportedOperationError):
            stage.as_many(OutputKind.ARTIFACT_INFO)
        with pytest.raises(UnsupportedOperationError):
            stage.as_single(OutputKind.ARTIFACT_INFO)

    def test_unsupported_even_when_empty(self):
        with pytest.raises(UnsupportedOperationError):
            LegacyFormatStage([]).as_single(OutputKind.ARTIFACT_INFO)

    def test_files_still_supported(self, make_file):
        jar = make_file("a.jar")
        assert LegacyFormatStage([artifact("g:a:1", jar)]).as_single_file() == jar

    def test_resolver_builds_legacy_stage(self, engine, new_resolver, make_file):
        engine.register("foo:bar:2", make_file("bar.jar"))
        format_stage = new_resolver(legacy=True).resolve("foo:bar:2").with_transitivity()
        assert isinstance(format_stage, LegacyFormatStage)
