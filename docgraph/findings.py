"""Structured validation findings shared by every validator."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Finding severity. Only ERROR affects a validator's success flag."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class Finding:
    """A single validation error or warning with its location."""

    type: str
    severity: Severity
    message: str
    file: str | None = None
    line: int | None = None
    suggestion: str | None = None
    subject: str | None = None  # term, interface id, pair ... the finding is about
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def location(self) -> str:
        """``file[:line]`` or an empty string."""
        if not self.file:
            return ""
        return f"{self.file}:{self.line}" if self.line else self.file

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return {k: v for k, v in data.items() if v not in (None, {})}


def error(type_: str, message: str, **kwargs: Any) -> Finding:
    return Finding(type=type_, severity=Severity.ERROR, message=message, **kwargs)


def warning(type_: str, message: str, **kwargs: Any) -> Finding:
    return Finding(type=type_, severity=Severity.WARNING, message=message, **kwargs)


def split_by_severity(findings: list[Finding]) -> tuple[list[Finding], list[Finding]]:
    """Partition findings into (errors, warnings), keeping their order."""
    errors = [f for f in findings if f.severity == Severity.ERROR]
    warnings = [f for f in findings if f.severity != Severity.ERROR]
    return errors, warnings
