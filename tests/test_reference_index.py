"""Tests for the reference index builder, snapshot store and queries."""

import json

import pytest

from docgraph.config_runtime import load_runtime_config
from docgraph.errors import DocGraphError, IndexNotFoundError
from docgraph.graph import (
    ReferenceIndexBuilder,
    build_reference_index,
    classify_code_file,
    code_references,
    feature_details,
    load_index,
    load_project_index,
    overview,
    term_usage,
)
from docgraph.graph import builder as builder_module
from docgraph.graph.builder import resolve_import
from docgraph.graph.types import ReferenceIndex


@pytest.fixture
def built(sample_project, clean_env):
    return build_reference_index(sample_project)


class TestHelpers:
    @pytest.mark.parametrize(
        "path,kind",
        [
            ("src/graph/build.ts", "source"),
            ("src/graph/build.test.ts", "test"),
            ("tests/test_build.py", "test"),
            ("src/__tests__/x.ts", "test"),
            ("tsconfig.json", "config"),
            ("src/app.config.ts", "config"),
            ("config/settings.yaml", "config"),
        ],
    )
    def test_classify_code_file(self, path, kind):
        assert classify_code_file(path) == kind

    def test_resolve_python_relative_imports(self):
        known = {"pkg/a.py", "pkg/sub/__init__.py", "other.py"}
        assert resolve_import(".a", "pkg/b.py", known) == "pkg/a.py"
        assert resolve_import(".sub", "pkg/b.py", known) == "pkg/sub/__init__.py"
        assert resolve_import("..other", "pkg/b.py", known) == "other.py"
        assert resolve_import("json", "pkg/b.py", known) is None

    def test_resolve_js_relative_imports(self):
        known = {"src/util.ts", "src/lib/index.tsx", "src/esm.ts"}
        assert resolve_import("./util", "src/app.ts", known) == "src/util.ts"
        assert resolve_import("../lib", "src/x/app.ts", known) == "src/lib/index.tsx"
        assert resolve_import("./esm.js", "src/app.ts", known) == "src/esm.ts"
        assert resolve_import("react", "src/app.ts", known) is None


class TestBuilder:
    def test_entities(self, built):
        index = built.index
        assert sorted(index.features) == ["01_GraphBuild", "02_Validation"]
        assert sorted(index.code) == ["src/graph/build.py", "src/graph/store.py", "src/validate.py"]
        assert sorted(index.interfaces) == ["01--02", "01--02_01--03"]
        assert sorted(index.terms) == ["Feature Document", "Finding", "Reference Index"]

        stats = built.stats
        assert (stats.features, stats.code_files, stats.interfaces, stats.terms) == (2, 3, 2, 3)
        assert stats.skipped_documents == []
        assert stats.term_conflicts == []

    def test_code_edges_are_bidirectional(self, built):
        code = built.index.code
        assert code["src/graph/build.py"].imports == ["src/graph/store.py"]
        assert code["src/graph/store.py"].imported_by == ["src/graph/build.py"]
        assert code["src/graph/build.py"].imported_by == ["src/validate.py"]
        assert code["src/graph/build.py"].documented_in == ["01_GraphBuild"]
        assert code["src/graph/build.py"].exports == ["build"]

    def test_feature_edges(self, built):
        graph_build = built.index.features["01_GraphBuild"]
        validation = built.index.features["02_Validation"]

        assert graph_build.code_uses == ["src/graph/build.py", "src/graph/store.py"]
        assert graph_build.code_used_by == ["src/validate.py"]
        assert graph_build.used_by_features == ["02_Validation"]
        assert validation.used_by_features == ["01_GraphBuild"]
        assert graph_build.tested_by == ["tests/test_build.py"]

        assert graph_build.interfaces_provided == ["graph/build", "graph/query", "01--02"]
        assert validation.interfaces_used == ["01--02"]

        assert graph_build.terms_used == ["Reference Index", "Feature Document"]
        assert validation.terms_defined == ["Finding"]

    def test_interfaces(self, built):
        pair = built.index.interfaces["01--02"]
        assert (pair.from_feature, pair.to_feature, pair.kind) == ("01_GraphBuild", "02_Validation", "api")
        assert pair.shared_types == ["01--02_01--03"]

        shared = built.index.interfaces["01--02_01--03"]
        assert shared.kind == "shared"
        assert shared.interfaces == ["01--02", "01--03"]

    def test_term_usage(self, built):
        usage = built.index.terms["Reference Index"]
        assert usage.scope == "global"
        assert usage.usage_count == 4
        assert {r["file"] for r in usage.references} == {
            "tasks/features/01_GraphBuild.md",
            "tasks/features/02_Validation.md",
            "docs/GLOSSARY.md",
        }

    def test_without_symbols(self, sample_project, clean_env):
        result = ReferenceIndexBuilder(sample_project, include_symbols=False).build()
        assert result.index.code["src/graph/build.py"].imports == []
        assert result.index.features["01_GraphBuild"].code_used_by == []

    def test_feature_id_falls_back_to_filename(self, sample_project, write_file, clean_env):
        write_file(sample_project, "tasks/features/03_Untitled.md", "# No frontmatter\n")
        index = ReferenceIndexBuilder(sample_project).build().index
        assert index.features["03_Untitled"].file == "tasks/features/03_Untitled.md"

    def test_duplicate_feature_keeps_first(self, sample_project, write_file, clean_env):
        write_file(sample_project, "tasks/features/03_Copy.md", "---\nfeature: 01_GraphBuild\n---\n")

        result = ReferenceIndexBuilder(sample_project).build()

        assert result.index.features["01_GraphBuild"].file == "tasks/features/01_GraphBuild.md"
        assert result.stats.duplicate_features == ["tasks/features/03_Copy.md"]

    def test_bad_frontmatter_is_skipped(self, sample_project, write_file, clean_env):
        write_file(sample_project, "tasks/features/04_Broken.md", "---\nfeature: [unclosed\n---\n")

        result = ReferenceIndexBuilder(sample_project).build()

        assert result.stats.skipped_documents == ["tasks/features/04_Broken.md"]
        assert len(result.index.features) == 2

    def test_term_conflict_is_recorded(self, sample_project, write_file, clean_env):
        write_file(sample_project, "docs/terms/extra.md", "## [[Finding]]\n\nAgain.\n")

        result = ReferenceIndexBuilder(sample_project).build()

        assert len(result.stats.term_conflicts) == 1
        assert "Finding" in result.stats.term_conflicts[0]
        # first definition in scan order wins
        assert result.index.terms["Finding"].file == "docs/terms/extra.md"

    def test_unsorted_interface_name_is_normalized(self, sample_project, write_file, clean_env):
        write_file(sample_project, "tasks/interfaces/03--02.md", "---\nfrom: 02_Validation\nto: 01_GraphBuild\n---\n")

        index = ReferenceIndexBuilder(sample_project).build().index

        assert "02--03" in index.interfaces
        assert "02--03" in index.features["02_Validation"].interfaces_provided

    def test_unreadable_code_file_is_recorded(self, sample_project, monkeypatch, clean_env):
        original = builder_module.read_text

        def guarded(path):
            if path.name == "store.py":
                raise PermissionError(13, "Permission denied", str(path))
            return original(path)

        monkeypatch.setattr(builder_module, "read_text", guarded)

        result = ReferenceIndexBuilder(sample_project).build()

        assert list(result.stats.parse_failures) == ["src/graph/store.py"]
        assert "PermissionError" in result.stats.parse_failures["src/graph/store.py"][0]
        assert result.index.code["src/graph/store.py"].exports == []
        assert result.index.code["src/graph/build.py"].imports == ["src/graph/store.py"]


class TestSnapshot:
    def test_build_writes_snapshot(self, built, sample_project):
        assert built.output == sample_project.resolve() / ".docgraph" / "references.json"
        data = json.loads(built.output.read_text(encoding="utf-8"))
        assert set(data) == {"version", "generated", "features", "code", "interfaces", "terms"}
        feature = data["features"]["01_GraphBuild"]
        assert set(feature) == {"file", "code", "features", "interfaces", "terms", "tests"}
        assert data["code"]["src/graph/build.py"]["type"] == "source"
        assert data["terms"]["Reference Index"]["usage_count"] == 4

    def test_round_trip(self, built, sample_project):
        loaded = load_project_index(sample_project)
        assert loaded.to_dict() == built.index.to_dict()

    def test_rebuild_overwrites(self, built, sample_project, clean_env):
        (sample_project / "tasks/features/02_Validation.md").unlink()
        build_reference_index(sample_project)
        assert sorted(load_project_index(sample_project).features) == ["01_GraphBuild"]

    def test_relative_output_resolves_against_root(self, sample_project, clean_env):
        result = build_reference_index(sample_project, output="out/index.json")
        assert result.output == sample_project.resolve() / "out" / "index.json"
        assert result.output.exists()

    def test_configured_index_path(self, sample_project, write_file, clean_env):
        write_file(sample_project, "docgraph.config.json", '{"paths": {"index": "build/refs.json"}}')
        cfg = load_runtime_config(sample_project)
        result = build_reference_index(sample_project, cfg=cfg)
        assert result.output == sample_project.resolve() / "build" / "refs.json"

    def test_missing_snapshot(self, tmp_path):
        with pytest.raises(IndexNotFoundError):
            load_index(tmp_path / "nope.json")

    def test_corrupt_snapshot(self, tmp_path):
        path = tmp_path / "refs.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DocGraphError, match="corrupt"):
            load_index(path)


class TestQueries:
    def test_feature_details(self, built):
        data = feature_details(built.index, "02_Validation")
        assert data["id"] == "02_Validation"
        assert data["interfaces"]["uses"] == [
            {"id": "01--02", "from": "01_GraphBuild", "to": "02_Validation", "documented": True}
        ]
        provided = feature_details(built.index, "01_GraphBuild")["interfaces"]["provides"]
        assert provided[0] == {"id": "graph/build", "from": "", "to": "", "documented": False}

    def test_unknown_feature(self, built):
        with pytest.raises(DocGraphError):
            feature_details(built.index, "99_Missing")

    def test_code_references(self, built):
        data = code_references(built.index, "./src/graph/store.py")
        assert data["path"] == "src/graph/store.py"
        assert data["documented_in"] == [{"feature": "01_GraphBuild", "file": "tasks/features/01_GraphBuild.md"}]
        assert data["imported_by"] == ["src/graph/build.py"]

    def test_term_usage_limit(self, built):
        data = term_usage(built.index, "Reference Index", limit=1)
        assert data["usage_count"] == 4
        assert len(data["references"]) == 1
        assert data["hidden_references"] == 3

    def test_overview(self, built):
        data = overview(built.index)
        assert data["features"] == {"total": 2, "with_tests": 1}
        assert data["interfaces"] == {"total": 2, "shared": 1}
        assert data["terms"]["top"][0] == {"term": "Reference Index", "usage_count": 4}

    def test_empty_index(self):
        data = overview(ReferenceIndex())
        assert data["terms"]["top"] == []
