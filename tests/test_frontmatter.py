"""Tests for YAML frontmatter extraction."""

import pytest

from docgraph import frontmatter
from docgraph.frontmatter import FrontmatterError


def test_fields_and_body():
    text = (
        "---\n"
        "feature: 01_GraphBuild\n"
        "code_references:\n"
        "  - src/a.ts\n"
        "  - src/b.ts\n"
        "owner:\n"
        "  team: docs\n"
        "---\n"
        "# Title\n"
    )
    doc = frontmatter.extract(text)

    assert doc.present
    assert doc.get_str("feature") == "01_GraphBuild"
    assert doc.get_list("code_references") == ["src/a.ts", "src/b.ts"]
    assert doc.get("owner") == {"team": "docs"}
    assert doc.body == "# Title\n"
    assert doc.body_line_offset == 8


def test_no_frontmatter():
    doc = frontmatter.extract("# Just a heading\n")
    assert not doc.present
    assert doc.fields == {}
    assert doc.body == "# Just a heading\n"
    assert doc.body_line_offset == 0


def test_empty_block():
    doc = frontmatter.extract("---\n\n---\nbody")
    assert doc.present
    assert doc.fields == {}
    assert doc.body == "body"


def test_crlf_and_bom():
    doc = frontmatter.extract("\ufeff---\r\nstatus: active\r\n---\r\nbody\r\n")
    assert doc.get_str("status") == "active"
    assert doc.body == "body\n"


@pytest.mark.parametrize(
    "value,expected",
    [(None, []), ("single", ["single"]), (["a", None, {"x": 1}, 3], ["a", "3"]), ({"k": "v"}, []), ("  ", [])],
)
def test_as_str_list(value, expected):
    assert frontmatter.as_str_list(value) == expected


def test_get_str_rejects_collections():
    doc = frontmatter.extract("---\ntags: [a, b]\ncount: 3\n---\n")
    assert doc.get_str("tags", "none") == "none"
    assert doc.get_str("count") == "3"


def test_invalid_yaml():
    with pytest.raises(FrontmatterError, match="Invalid YAML"):
        frontmatter.extract("---\nfeature: [unclosed\n---\n")


def test_non_mapping():
    with pytest.raises(FrontmatterError, match="mapping"):
        frontmatter.extract("---\n- a\n- b\n---\n")


def test_numeric_codes_keep_leading_zeros():
    doc = frontmatter.extract("---\nfeature: 01\nfrom: 08\nversion: 1.10\ndepends_on: [02, 10]\ndraft: true\n---\n")
    assert doc.get_str("feature") == "01"
    assert doc.get_str("from") == "08"
    assert doc.get_str("version") == "1.10"
    assert doc.get_list("depends_on") == ["02", "10"]
    assert doc.get("draft") is True
