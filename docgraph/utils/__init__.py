"""docgraph utilities package."""

from .constants import (
    CONFIG_FILE_NAME,
    ERROR_LOG_FILE,
    INDEX_FILE,
    INDEX_VERSION,
    OUTPUT_DIR,
    SKIP_DIRS,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .helpers import (
    find_markdown_files,
    list_markdown_files,
    load_json_file,
    normalize_path,
    read_text,
    save_json_file,
)
from .logging import logger

__all__ = [
    "CONFIG_FILE_NAME",
    "ERROR_LOG_FILE",
    "INDEX_FILE",
    "INDEX_VERSION",
    "OUTPUT_DIR",
    "SKIP_DIRS",
    "handle_exceptions",
    "ExitCodes",
    "find_markdown_files",
    "list_markdown_files",
    "load_json_file",
    "normalize_path",
    "read_text",
    "save_json_file",
    "logger",
]
