"""TypeScript / JavaScript source parser using tree-sitter grammars.

Grammars come from ``tree_sitter_language_pack``; the TSX grammar is used for
``.tsx``/``.jsx`` files so JSX syntax does not produce error nodes.
"""

from functools import lru_cache
from typing import Any

from docgraph.utils.logging import logger

from .base import ExportInfo, ImportInfo, LanguageParser, ParseError, ParseResult

_DECLARATION_KINDS = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "function_signature": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "enum",
}


@lru_cache(maxsize=None)
def _load_parser(grammar: str):
    """Load (once) the tree-sitter parser for ``grammar``."""
    from tree_sitter_language_pack import get_parser

    return get_parser(grammar)


def _text(node: Any) -> str:
    return node.text.decode("utf-8", errors="ignore") if node is not None and node.text else ""


def _string_value(node: Any) -> str:
    return _text(node).strip("\"'`")


def _line(node: Any) -> int:
    return node.start_point[0] + 1


class TypeScriptParser(LanguageParser):
    """Extract ES module / CommonJS imports and exports."""

    language_name = "typescript"
    supported_extensions = (".ts", ".tsx", ".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs")

    @staticmethod
    def grammar_for(file_path: str) -> str:
        lower = file_path.lower()
        if lower.endswith((".tsx", ".jsx")):
            return "tsx"
        if lower.endswith((".js", ".mjs", ".cjs")):
            return "javascript"
        return "typescript"

    def parse(self, content: str, file_path: str) -> ParseResult:
        grammar = self.grammar_for(file_path)
        try:
            parser = _load_parser(grammar)
            tree = parser.parse(content.encode("utf-8"))
        except Exception as e:  # grammar missing or native parser failure
            logger.debug(f"tree-sitter parse failed for {file_path}: {e}")
            return ParseResult(errors=[ParseError(message=f"{grammar} parser failed: {e}", code="PARSER_FAILED")])

        result = ParseResult()
        root = tree.root_node
        self._walk(root, result)

        if root.has_error:
            result.errors.append(
                ParseError(
                    message="Syntax error in source",
                    code="SYNTAX_ERROR",
                    line=self._first_error_line(root),
                )
            )
        return result

    def _walk(self, node: Any, result: ParseResult) -> None:
        if node.type == "import_statement":
            self._import_statement(node, result)
        elif node.type == "export_statement":
            self._export_statement(node, result)
        elif node.type == "call_expression":
            self._call_expression(node, result)

        for child in node.children:
            self._walk(child, result)

    def _import_statement(self, node: Any, result: ParseResult) -> None:
        source_node = node.child_by_field_name("source")
        if source_node is None:
            source_node = next((c for c in node.children if c.type == "string"), None)
        if source_node is None:
            return

        names = []
        is_type_only = any(c.type == "type" for c in node.children)
        for child in node.children:
            if child.type != "import_clause":
                continue
            for spec in child.children:
                if spec.type == "identifier":
                    names.append(_text(spec))
                elif spec.type == "namespace_import":
                    names.append("*")
                elif spec.type == "named_imports":
                    for element in spec.children:
                        if element.type == "import_specifier":
                            names.append(_text(element.child_by_field_name("name")))

        result.imports.append(
            ImportInfo(source=_string_value(source_node), names=names, line=_line(node), is_type_only=is_type_only)
        )

    def _export_statement(self, node: Any, result: ParseResult) -> None:
        is_default = any(c.type == "default" for c in node.children)
        source_node = node.child_by_field_name("source")

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._export_declaration(declaration, is_default, result)
        elif is_default:
            result.exports.append(ExportInfo(name="default", kind="variable", line=_line(node), is_default=True))

        for child in node.children:
            if child.type == "export_clause":
                for spec in child.children:
                    if spec.type == "export_specifier":
                        alias = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                        result.exports.append(ExportInfo(name=_text(alias), kind="variable", line=_line(spec)))

        if source_node is not None:
            # Re-exports also import their source module
            result.imports.append(ImportInfo(source=_string_value(source_node), line=_line(node)))

    def _export_declaration(self, declaration: Any, is_default: bool, result: ParseResult) -> None:
        kind = _DECLARATION_KINDS.get(declaration.type)
        line = _line(declaration)
        if kind is not None:
            name_node = declaration.child_by_field_name("name")
            name = _text(name_node) if name_node is not None else "default"
            result.exports.append(ExportInfo(name=name, kind=kind, line=line, is_default=is_default))
            return

        if declaration.type in ("lexical_declaration", "variable_declaration"):
            is_const = any(c.type == "const" for c in declaration.children)
            for child in declaration.children:
                if child.type == "variable_declarator":
                    name_node = child.child_by_field_name("name")
                    if name_node is not None and name_node.type == "identifier":
                        result.exports.append(
                            ExportInfo(name=_text(name_node), kind="const" if is_const else "variable", line=line)
                        )

    def _call_expression(self, node: Any, result: ParseResult) -> None:
        function = node.child_by_field_name("function")
        if function is None or _text(function) not in ("require", "import"):
            return
        arguments = node.child_by_field_name("arguments")
        if arguments is None:
            return
        first = next((c for c in arguments.children if c.type in ("string", "template_string")), None)
        if first is not None:
            result.imports.append(ImportInfo(source=_string_value(first), line=_line(node)))

    @staticmethod
    def _first_error_line(node: Any) -> int | None:
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type == "ERROR" or current.is_missing:
                return _line(current)
            stack.extend(reversed(current.children))
        return None
