"""Document metadata extractor - YAML frontmatter + markdown body.

Frontmatter is the block between the leading ``---`` markers of a markdown
document. It is parsed with a ``yaml.SafeLoader`` subclass so scalars, string
arrays and nested mappings are all representable. Numeric-looking scalars stay
strings (``feature: 01`` is "01"):

    ---
    feature: 01_GraphBuild
    status: active
    code_references:
      - "src/graph/build.ts"
    owner:
      team: docs
    ---
"""

import re
from dataclasses import dataclass, field
from typing import Any

import yaml

from docgraph.errors import DocGraphError

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_NUMERIC_TAGS = ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")


class _CodeLoader(yaml.SafeLoader):
    """SafeLoader that keeps numeric-looking scalars as strings.

    Feature and interface codes must survive verbatim: plain YAML reads
    ``01`` as the integer 1 but ``08`` as the string "08".
    """


_CodeLoader.yaml_implicit_resolvers = {
    key: [(tag, regexp) for tag, regexp in values if tag not in _NUMERIC_TAGS]
    for key, values in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class FrontmatterError(DocGraphError):
    """Raised when a frontmatter block exists but is not a valid YAML mapping."""


@dataclass
class Frontmatter:
    """Structured result of metadata extraction."""

    fields: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    present: bool = False
    body_line_offset: int = 0  # lines consumed by the frontmatter block

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def get_str(self, key: str, default: str = "") -> str:
        """Scalar field as a string ('' / default when missing or not scalar)."""
        value = self.fields.get(key)
        if value is None or isinstance(value, (list, dict)):
            return default
        return str(value).strip()

    def get_list(self, key: str) -> list[str]:
        """Field coerced to a list of strings.

        A scalar becomes a one-item list, ``None`` an empty list, and nested
        mappings inside the list are dropped.
        """
        return as_str_list(self.fields.get(key))


def as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and not isinstance(v, (dict, list))]
    if isinstance(value, dict):
        return []
    text = str(value).strip()
    return [text] if text else []


def extract(text: str) -> Frontmatter:
    """Split ``text`` into frontmatter fields and body.

    Documents without a frontmatter block return ``present=False`` and the
    whole text as body.

    Raises:
        FrontmatterError: the block is not valid YAML or not a mapping.
    """
    text = text.lstrip("\ufeff").replace("\r\n", "\n")
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return Frontmatter(body=text)

    raw = match.group(1)
    try:
        data = yaml.load(raw, Loader=_CodeLoader)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML frontmatter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}"
        )

    body = text[match.end():]
    return Frontmatter(
        fields={str(k): v for k, v in data.items()},
        body=body,
        present=True,
        body_line_offset=text[: match.end()].count("\n"),
    )
