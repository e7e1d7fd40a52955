"""Python source parser built on the standard library ``ast`` module.

Python has no explicit export list: every public module-level definition
(function, class, assignment) counts as an export unless ``__all__`` names
them explicitly.
"""

import ast

from .base import ExportInfo, ImportInfo, LanguageParser, ParseError, ParseResult


class PythonParser(LanguageParser):
    """Extract imports and exports from Python files."""

    language_name = "python"
    supported_extensions = (".py", ".pyi")

    def parse(self, content: str, file_path: str) -> ParseResult:
        try:
            tree = ast.parse(content, filename=file_path)
        except SyntaxError as e:
            return ParseResult(
                errors=[ParseError(message=f"SyntaxError: {e.msg}", code="SYNTAX_ERROR", line=e.lineno)]
            )
        except ValueError as e:
            # Null bytes in source
            return ParseResult(errors=[ParseError(message=str(e), code="INVALID_SOURCE")])

        return ParseResult(imports=self._imports(tree), exports=self._exports(tree))

    def _imports(self, tree: ast.Module) -> list[ImportInfo]:
        imports = []
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    imports.append(ImportInfo(source=alias.name, line=node.lineno))
            elif isinstance(node, ast.ImportFrom):
                source = "." * node.level + (node.module or "")
                names = [alias.name for alias in node.names]
                imports.append(ImportInfo(source=source, names=names, line=node.lineno))
        return imports

    def _exports(self, tree: ast.Module) -> list[ExportInfo]:
        declared = self._declared_all(tree)
        exports = []

        for node in tree.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                exports.append(ExportInfo(name=node.name, kind="function", line=node.lineno))
            elif isinstance(node, ast.ClassDef):
                exports.append(ExportInfo(name=node.name, kind="class", line=node.lineno))
            elif isinstance(node, ast.Assign):
                for target in node.targets:
                    if isinstance(target, ast.Name):
                        exports.append(ExportInfo(name=target.id, kind=_assign_kind(target.id), line=node.lineno))
            elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                exports.append(ExportInfo(name=node.target.id, kind=_assign_kind(node.target.id), line=node.lineno))

        if declared is not None:
            return [e for e in exports if e.name in declared]
        return [e for e in exports if not e.name.startswith("_")]

    @staticmethod
    def _declared_all(tree: ast.Module) -> set[str] | None:
        for node in tree.body:
            if isinstance(node, ast.Assign) and any(
                isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets
            ):
                if isinstance(node.value, (ast.List, ast.Tuple)):
                    return {
                        elt.value
                        for elt in node.value.elts
                        if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
                    }
        return None


def _assign_kind(name: str) -> str:
    return "const" if name.isupper() else "variable"
