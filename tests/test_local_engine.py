"""Tests for the local repository engine, driven through the staged API."""

import os
import zipfile
from unittest.mock import patch

import pytest

from conftest import dependency_xml, pom_xml
from depfetch import LocalRepositoryEngine, Settings, resolver
from depfetch.engine import DependencyCollectionError
from depfetch.errors import ResolutionFailedError


@pytest.fixture
def local_resolver(local_repo):
    """Resolver on an offline local repository without Maven Central."""
    def _make(workspace_roots=(), offline=True):
        engine = LocalRepositoryEngine(local_repo.root, workspace_roots=workspace_roots, offline=offline)
        return resolver(engine=engine, settings=Settings(use_maven_central=False))
    return _make


def names(paths):
    return [os.path.basename(str(p)) for p in paths]


class TestTransitiveCollection:
    """Graph walk over POM declarations."""

    def test_scopes_and_optional(self, local_repo, local_resolver):
        local_repo.add("org.app:app:1.0", [
            dependency_xml("org.lib:core:2.0"),
            dependency_xml("junit:junit:4.13", scope="test"),
            dependency_xml("org.lib:extra:1.0", optional=True),
        ])
        local_repo.add("org.lib:core:2.0", [dependency_xml("org.lib:util:1.1", scope="runtime")])
        local_repo.add("org.lib:util:1.1")

        artifacts = local_resolver().resolve("org.app:app:1.0").with_transitivity().as_resolved_artifact()

        assert names(a.file for a in artifacts) == ["app-1.0.jar", "core-2.0.jar", "util-1.1.jar"]
        assert "org.lib:core:2.0" in [str(c) for c in artifacts[0].dependencies]

    def test_without_transitivity(self, local_repo, local_resolver):
        local_repo.add("org.app:app:1.0", [dependency_xml("org.lib:core:2.0")])
        local_repo.add("org.lib:core:2.0")

        files = local_resolver().resolve("org.app:app:1.0").without_transitivity().as_file()

        assert names(files) == ["app-1.0.jar"]

    def test_exclusions(self, local_repo, local_resolver):
        local_repo.add("org.app:app:1.0", [
            dependency_xml("org.lib:core:2.0", exclusions=["org.lib:util"]),
        ])
        local_repo.add("org.lib:core:2.0", [dependency_xml("org.lib:util:1.1")])
        local_repo.add("org.lib:util:1.1")

        files = local_resolver().resolve("org.app:app:1.0").with_transitivity().as_file()

        assert names(files) == ["app-1.0.jar", "core-2.0.jar"]

    def test_version_range(self, local_repo, local_resolver):
        local_repo.add("org.app:app:1.0", [dependency_xml("org.lib:core:[1.0,2.0)")])
        for version in ("1.0", "1.5", "2.0"):
            local_repo.add(f"org.lib:core:{version}")

        files = local_resolver().resolve("org.app:app:1.0").with_transitivity().as_file()

        assert names(files) == ["app-1.0.jar", "core-1.5.jar"]

    def test_unsatisfiable_range(self, local_repo, local_resolver):
        local_repo.add("org.app:app:1.0", [dependency_xml("org.lib:core:[3.0,)")])
        local_repo.add("org.lib:core:1.0")

        with pytest.raises(ResolutionFailedError) as excinfo:
            local_resolver().resolve("org.app:app:1.0").with_transitivity()
        assert "Unable to collect dependency tree" in str(excinfo.value)

    def test_cyclic_parents(self, local_repo, local_resolver):
        local_repo.add("org.app:parent-a:1", packaging="pom", parent="org.app:parent-b:1")
        local_repo.add("org.app:parent-b:1", packaging="pom", parent="org.app:parent-a:1")
        local_repo.add("org.app:app:1.0", parent="org.app:parent-a:1")

        with pytest.raises(ResolutionFailedError) as excinfo:
            local_resolver().resolve("org.app:app:1.0").with_transitivity()
        assert "Cyclic parent POM reference" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, DependencyCollectionError)

    def test_management_overrides_transitive_version(self, local_repo, local_resolver):
        local_repo.add("org.app:app:1.0", [dependency_xml("org.lib:core:2.0")])
        local_repo.add("org.lib:core:1.0")

        files = (local_resolver()
                 .add_dependency_management("org.lib:core:1.0")
                 .resolve("org.app:app:1.0")
                 .with_transitivity()
                 .as_file())

        assert names(files) == ["app-1.0.jar", "core-1.0.jar"]

    def test_parent_properties_and_management(self, local_repo, local_resolver):
        local_repo.add("org.app:parent:1", packaging="pom",
                       properties={"lib.version": "2.0"},
                       managed=[dependency_xml("org.lib:util:1.1")])
        local_repo.add("org.app:child:1", [
            dependency_xml("org.lib:core:${lib.version}"),
            dependency_xml("org.lib:util"),
        ], parent="org.app:parent:1")
        local_repo.add("org.lib:core:2.0")
        local_repo.add("org.lib:util:1.1")

        files = local_resolver().resolve("org.app:child:1").with_transitivity().as_file()

        assert names(files) == ["child-1.jar", "core-2.0.jar", "util-1.1.jar"]

    def test_pom_packaging_contributes_only_children(self, local_repo, local_resolver):
        local_repo.add("org.app:bundle:1", [dependency_xml("org.lib:core:2.0")], packaging="pom")
        local_repo.add("org.lib:core:2.0")

        files = local_resolver().resolve("org.app:bundle:pom:1").with_transitivity().as_file()

        assert names(files) == ["core-2.0.jar"]

    def test_snapshot_flag(self, local_repo, local_resolver):
        local_repo.add("org.lib:snap:1.0-SNAPSHOT")

        artifact = local_resolver().resolve("org.lib:snap:1.0-SNAPSHOT").with_transitivity() \
            .as_single_resolved_artifact()

        assert artifact.snapshot_version is True


class TestMissingFiles:
    """Missing POMs and artifacts."""

    def test_missing_artifact(self, local_repo, local_resolver):
        local_repo.add("org.lib:core:2.0", jar=False)

        with pytest.raises(ResolutionFailedError) as excinfo:
            local_resolver().resolve("org.lib:core:2.0").with_transitivity()
        assert "Unable to get artifact from the repository" in str(excinfo.value)

    def test_missing_pom_tolerated(self, local_repo, local_resolver):
        jar = local_repo.add("org.lib:core:2.0")
        os.remove(jar[:-len(".jar")] + ".pom")

        files = local_resolver().resolve("org.lib:core:2.0").with_transitivity().as_file()

        assert names(files) == ["core-2.0.jar"]


class TestWorkspace:
    """Projects resolved from build output directories."""

    @pytest.fixture
    def workspace(self, tmp_path, local_repo):
        project = tmp_path / "workspace" / "proj"
        classes = project / "target" / "classes" / "org" / "ws"
        classes.mkdir(parents=True)
        (classes / "A.class").write_bytes(b"class-bytes")
        (project / "pom.xml").write_text(pom_xml("org.ws:proj:1.0", [dependency_xml("org.lib:core:2.0")]))
        local_repo.add("org.lib:core:2.0")
        return tmp_path / "workspace"

    def test_build_output_is_packaged(self, workspace, local_resolver):
        stage = local_resolver(workspace_roots=[str(workspace)])

        files = stage.resolve("org.ws:proj:1.0").with_transitivity().as_file()

        assert len(files) == 2
        assert names(files)[1] == "core-2.0.jar"
        with zipfile.ZipFile(files[0]) as zf:
            assert zf.namelist() == ["org/ws/A.class"]
            assert zf.read("org/ws/A.class") == b"class-bytes"

    def test_workspace_artifact_flagged_unpackaged(self, workspace, local_resolver):
        format_stage = local_resolver(workspace_roots=[str(workspace)]).resolve("org.ws:proj:1.0") \
            .without_transitivity()

        artifact = format_stage.artifacts[0]
        assert artifact.unpackaged is True
        assert artifact.file.name == "pom.xml"

    def test_workspace_disabled(self, workspace, local_resolver):
        stage = local_resolver(workspace_roots=[str(workspace)]).with_classpath_resolution(False)

        with pytest.raises(ResolutionFailedError):
            stage.resolve("org.ws:proj:1.0").with_transitivity()


class TestRemoteRepositories:
    """Fetching missing files."""

    def test_downloads_missing_files(self, local_repo):
        def fake_download(url, dest):
            if url.endswith(".pom"):
                os.makedirs(os.path.dirname(dest), exist_ok=True)
                with open(dest, "w", encoding="utf-8") as fh:
                    fh.write(pom_xml("org.lib:lib:1.0"))
                return True
            if url.endswith(".jar"):
                with open(dest, "wb") as fh:
                    fh.write(b"remote-jar")
                return True
            return False

        engine = LocalRepositoryEngine(local_repo.root)
        stage = resolver(engine=engine, settings=Settings(use_maven_central=False))
        stage.with_remote_repo("test", "http://repo.test/maven2")

        with patch("depfetch.engine.local.http_client.download", side_effect=fake_download) as download:
            jar = stage.resolve("org.lib:lib:1.0").with_transitivity().as_single_file()

        assert jar.read_bytes() == b"remote-jar"
        urls = [call.args[0] for call in download.call_args_list]
        assert "http://repo.test/maven2/org/lib/lib/1.0/lib-1.0.pom" in urls
        assert "http://repo.test/maven2/org/lib/lib/1.0/lib-1.0.jar" in urls

    def test_offline_never_downloads(self, local_repo, local_resolver):
        stage = local_resolver(offline=True).with_remote_repo("test", "http://repo.test/maven2")

        with patch("depfetch.engine.local.http_client.download") as download:
            with pytest.raises(ResolutionFailedError):
                stage.resolve("org.lib:lib:1.0").with_transitivity()

        download.assert_not_called()
