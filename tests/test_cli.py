"""CLI tests through click's CliRunner."""

import json

import pytest
from click.testing import CliRunner

from docgraph import __version__
from docgraph.cli import cli


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, sample_project, clean_env):
    """Run a docgraph command against the sample project."""

    def _invoke(*args):
        return runner.invoke(cli, [*args, "--project-path", str(sample_project)])

    return _invoke


def _json(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestRoot:
    def test_help_lists_command_groups(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("graph", "validate", "terms"):
            assert name in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize("group", ["graph", "validate", "terms"])
    def test_group_help(self, runner, group):
        assert runner.invoke(cli, [group, "--help"]).exit_code == 0


class TestGraphCommands:
    def test_build_json(self, invoke, sample_project):
        result = invoke("graph", "build", "--format", "json")

        data = _json(result)
        assert data["stats"]["features"] == 2
        assert data["stats"]["interfaces"] == 2
        assert (sample_project / ".docgraph" / "references.json").exists()

    def test_build_text(self, invoke):
        result = invoke("graph", "build")
        assert result.exit_code == 0
        assert "Reference Index Build" in result.output

    def test_query_requires_index(self, invoke):
        result = invoke("graph", "query")
        assert result.exit_code == 3

    def test_query_feature(self, invoke):
        invoke("graph", "build")
        data = _json(invoke("graph", "query", "--feature", "01_GraphBuild", "--format", "json"))
        assert data["code"]["used_by"] == ["src/validate.py"]

    def test_query_unknown_feature(self, invoke):
        invoke("graph", "build")
        assert invoke("graph", "query", "--feature", "99_Nope").exit_code == 1

    def test_query_term_and_overview(self, invoke):
        invoke("graph", "build")
        term = invoke("graph", "query", "--term", "Reference Index")
        assert term.exit_code == 0
        assert "4 references" in term.output

        overview = _json(invoke("graph", "query", "--format", "json"))
        assert overview["terms"]["total"] == 3

    def test_query_code(self, invoke):
        invoke("graph", "build")
        result = invoke("graph", "query", "--code", "src/graph/store.py")
        assert result.exit_code == 0
        assert "01_GraphBuild" in result.output

    def test_save(self, invoke, sample_project):
        invoke("graph", "build")
        target = sample_project / "reports" / "overview.txt"
        result = invoke("graph", "query", "--save", str(target))
        assert result.exit_code == 0
        assert "Reference Index Overview" in target.read_text(encoding="utf-8")


class TestValidateCommands:
    def test_naming_json(self, invoke):
        data = _json(invoke("validate", "naming", "--format", "json"))
        assert data["success"] is True
        assert data["total_files"] == 2

    def test_naming_failure_exit_code(self, invoke, sample_project, write_file):
        write_file(sample_project, "tasks/interfaces/02--01.md", "---\nfrom: 02_Validation\n---\n")
        result = invoke("validate", "naming")
        assert result.exit_code == 1
        assert "rename to 01--02.md" in result.output

    def test_orphans(self, invoke, sample_project, write_file):
        assert invoke("validate", "orphans").exit_code == 0

        write_file(sample_project, "src/unused.py", "x = 1\n")
        result = invoke("validate", "orphans", "--format", "json")
        assert result.exit_code == 1
        assert [o["path"] for o in json.loads(result.output)["orphan_files"]] == ["src/unused.py"]

    def test_interfaces_requires_index(self, invoke):
        assert invoke("validate", "interfaces").exit_code == 3

    def test_interfaces(self, invoke):
        invoke("graph", "build")
        result = invoke("validate", "interfaces", "--verbose")
        assert result.exit_code == 0
        assert "graph/build" in result.output

    def test_interfaces_unknown_feature(self, invoke):
        invoke("graph", "build")
        assert invoke("validate", "interfaces", "--feature", "nope").exit_code == 1

    def test_terms_json(self, invoke):
        data = _json(invoke("validate", "terms", "--format", "json"))
        assert data["success"] is True
        assert data["stats"]["total_definitions"] == 3

    def test_terms_conflict(self, invoke, sample_project, write_file):
        write_file(sample_project, "docs/terms/extra.md", "## [[Finding]]\n")
        assert invoke("validate", "terms").exit_code == 1

    def test_structure_json(self, invoke):
        data = _json(invoke("validate", "structure", "--format", "json"))
        assert data["success"] is True
        assert data["total_features"] == 2
        assert [w["type"] for w in data["warnings"]] == ["not_referenced"]

    def test_structure_cycle_fails(self, invoke, sample_project, write_file):
        write_file(
            sample_project,
            "tasks/features/01_GraphBuild.md",
            "---\nfeature: 01_GraphBuild\nstatus: active\ndepends_on:\n  - 02_Validation\n---\n# Graph Build\n",
        )
        result = invoke("validate", "structure")
        assert result.exit_code == 1
        assert "01_GraphBuild -> 02_Validation -> 01_GraphBuild" in result.output

    def test_exports_requires_index(self, invoke):
        assert invoke("validate", "exports").exit_code == 3

    def test_exports(self, invoke, sample_project, write_file):
        invoke("graph", "build")
        assert invoke("validate", "exports").exit_code == 0

        write_file(sample_project, "src/extra.py", "def helper():\n    return 1\n")
        result = invoke("validate", "exports", "--format", "json")
        assert result.exit_code == 1
        undocumented = json.loads(result.output)["undocumented"]
        assert [(u["file"], u["name"]) for u in undocumented] == [("src/extra.py", "helper")]

    def test_dependencies_blocked_provider(self, invoke):
        invoke("graph", "build")
        result = invoke("validate", "dependencies", "--format", "json")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert [(f["feature"], f["readiness"], f["blockers"]) for f in data["features"]] == [
            ("02_Validation", "blocked", ["01_GraphBuild"])
        ]

    def test_dependencies_requires_index(self, invoke):
        assert invoke("validate", "dependencies").exit_code == 3

    def test_dependencies_unknown_feature(self, invoke):
        invoke("graph", "build")
        assert invoke("validate", "dependencies", "--feature", "nope").exit_code == 1

    def test_impact_is_informational(self, invoke):
        invoke("graph", "build")
        result = invoke("validate", "impact", "--interface", "01--02")
        assert result.exit_code == 0, result.output
        assert "01--02: 01_GraphBuild at 0% (1 blocked, 0 at risk)" in result.output

    def test_all_passes_on_sample(self, invoke):
        result = invoke("validate", "all")
        assert result.exit_code == 0, result.output
        assert "Summary" in result.output

    def test_all_json_reports_each_check(self, invoke, sample_project, write_file):
        write_file(sample_project, "tasks/notes.md", "Mentions [[Finding]] and [[Ghost]].\n")

        result = invoke("validate", "all", "--format", "json")

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["checks"] == {
            "naming": True,
            "orphans": True,
            "interfaces": True,
            "terms": False,
            "structure": True,
        }
        assert {e["type"] for e in data["terms"]["errors"]} == {"scope_violation", "undefined_term"}


class TestTermsCommands:
    def test_list_json(self, invoke):
        data = _json(invoke("terms", "list", "--format", "json"))
        assert data["total"] == 3
        usage = {t["term"]: t["usage_count"] for t in data["terms"]}
        assert usage["Reference Index"] == 4

    def test_list_scope_filter(self, invoke):
        data = _json(invoke("terms", "list", "--scope", "document", "--format", "json"))
        assert [t["term"] for t in data["terms"]] == ["Finding"]

    def test_list_text(self, invoke):
        result = invoke("terms", "list")
        assert result.exit_code == 0
        assert "GLOBAL TERMS" in result.output

    def test_find_by_alias(self, invoke):
        result = invoke("terms", "find", "refindex", "--format", "json")
        data = _json(result)
        assert data["found"] is True
        assert data["term"]["term"] == "Reference Index"
        assert data["usage_count"] == 4

    def test_find_search(self, invoke):
        data = _json(invoke("terms", "find", "document", "--format", "json"))
        assert data["found"] is False
        assert [m["term"] for m in data["matches"]] == ["Feature Document", "Reference Index"]

    def test_find_nothing(self, invoke):
        assert invoke("terms", "find", "zzz-nothing").exit_code == 1

    def test_generate_global_terms(self, invoke):
        result = invoke("terms", "generate")
        assert result.exit_code == 0, result.output
        assert result.output.startswith("---\ngenerated_by: docgraph\n")
        assert "### [[Reference Index]]" in result.output
        assert "[[Finding]]" not in result.output

    def test_generated_glossary_is_not_rescanned(self, invoke, sample_project):
        target = sample_project / "docs" / "generated" / "GLOSSARY.md"
        assert invoke("terms", "generate", "--include-document", "--save", str(target)).exit_code == 0
        assert "### [[Finding]]" in target.read_text(encoding="utf-8")

        data = _json(invoke("validate", "terms", "--format", "json"))
        assert data["stats"]["total_definitions"] == 3
