"""Collect term definitions and references from a documentation tree."""

from collections.abc import Callable
from pathlib import Path

from docgraph import frontmatter
from docgraph.errors import TermConflictError
from docgraph.parsers.term_parser import TermParser
from docgraph.utils.constants import SKIP_DIRS
from docgraph.utils.helpers import find_markdown_files, read_text, relative_posix
from docgraph.utils.logging import logger

from .glossary import GENERATED_BY
from .registry import TermRegistry


def scan_terms(
    root: Path,
    registry: TermRegistry,
    parser: TermParser,
    on_conflict: Callable[[TermConflictError], None] | None = None,
) -> int:
    """Feed every markdown file under ``root`` into ``registry``.

    Frontmatter is skipped (line numbers still refer to the full file), and
    so are glossaries generated by ``docgraph terms generate``.
    Without ``on_conflict`` a duplicate definition propagates as
    TermConflictError; with it, the first definition wins and the callback
    receives the error.

    Returns:
        Number of documents scanned
    """
    scanned = 0
    for path in find_markdown_files(root, SKIP_DIRS):
        file = relative_posix(path, root)
        try:
            text = read_text(path)
        except OSError as e:
            logger.warning(f"Skipping {file}: {e}")
            continue
        try:
            doc = frontmatter.extract(text)
            body, offset = doc.body, doc.body_line_offset
        except frontmatter.FrontmatterError:
            body, offset = text, 0
        else:
            if doc.get_str("generated_by") == GENERATED_BY:
                logger.debug(f"Skipping generated glossary {file}")
                continue

        for defn in parser.extract_definitions(body, file, offset):
            try:
                registry.add_definition(defn)
            except TermConflictError as e:
                if on_conflict is None:
                    raise
                on_conflict(e)
        for ref in parser.extract_references(body, file, offset):
            registry.add_reference(ref)
        scanned += 1

    logger.debug(
        f"Scanned {scanned} documents: {len(registry.definitions)} terms, {len(registry.references)} references"
    )
    return scanned
