from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from schema_lint.fs import Statement


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class LintError(Exception):
    pass


class ConfigError(LintError):
    """A configuration problem that prevents linting from starting."""


class ExecutionError(LintError):
    """A non-fatal problem hit while evaluating schemas or walking directories."""


@dataclass
class Annotation:
    statement: Optional[Statement]
    summary: str
    message: str
    line_offset: int = field(default=0, compare=False)

    def location(self) -> str:
        if self.statement is None:
            return "<unknown>"
        return f"{self.statement.file}:{self.statement.line_no + self.line_offset}"

    def message_with_location(self) -> str:
        return f"{self.location()}: {self.message}"


@dataclass
class Result:
    errors: List[Annotation] = field(default_factory=list)
    warnings: List[Annotation] = field(default_factory=list)
    format_notices: List[Annotation] = field(default_factory=list)
    debug_logs: List[str] = field(default_factory=list)
    exceptions: List[Exception] = field(default_factory=list)

    def merge(self, other: Result) -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.format_notices.extend(other.format_notices)
        self.debug_logs.extend(other.debug_logs)
        self.exceptions.extend(other.exceptions)

    def add(self, severity: Severity, annotations: List[Annotation]) -> None:
        if severity == Severity.ERROR:
            self.errors.extend(annotations)
        else:
            self.warnings.extend(annotations)


def bad_config_result(err: Exception) -> Result:
    if not isinstance(err, ConfigError):
        err = ConfigError(str(err))
    return Result(exceptions=[err])


@dataclass(frozen=True)
class Options:
    problem_severity: Dict[str, Severity] = field(default_factory=dict)
    allowed_charsets: List[str] = field(default_factory=list)
    allowed_engines: List[str] = field(default_factory=list)
