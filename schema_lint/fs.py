from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from schema_lint.config import DEFAULT_ENVIRONMENT, OPTION_FILE, DirConfig, read_option_file
from schema_lint.policy.sql_sanitize import DELIMITER, classify_statement, split_statements
from schema_lint.policy.types import ConfigError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Statement:
    file: Path
    line_no: int
    text: str
    kind: str = "other"
    object_name: Optional[str] = None
    from_file: Optional[SqlFile] = field(default=None, repr=False)

    def split_text_body(self) -> Tuple[str, str]:
        body = self.text.rstrip()
        if body.endswith(DELIMITER):
            body = body[: -len(DELIMITER)].rstrip()
        return body, self.text[len(body):]


@dataclass(eq=False)
class SqlFile:
    path: Path
    statements: List[Statement] = field(default_factory=list)

    @classmethod
    def read(cls, path: Path) -> SqlFile:
        sql_file = cls(path)
        # bytes, so line endings survive a rewrite untouched
        text = path.read_bytes().decode("utf-8")
        line_no = 1
        for chunk in split_statements(text):
            kind, name = classify_statement(chunk)
            sql_file.statements.append(
                Statement(
                    file=path,
                    line_no=line_no,
                    text=chunk,
                    kind=kind,
                    object_name=name,
                    from_file=sql_file,
                )
            )
            line_no += chunk.count("\n")
        return sql_file

    def text(self) -> str:
        return "".join(statement.text for statement in self.statements)

    def rewrite(self) -> int:
        data = self.text().encode("utf-8")
        self.path.write_bytes(data)
        return len(data)


@dataclass
class LogicalSchema:
    name: str = ""
    create_tables: Dict[str, Statement] = field(default_factory=dict)

    def add_create_table(self, statement: Statement) -> None:
        existing = self.create_tables.get(statement.object_name)
        if existing is not None:
            raise ConfigError(
                f"Table {statement.object_name} is defined twice: "
                f"{existing.file}:{existing.line_no} and {statement.file}:{statement.line_no}"
            )
        self.create_tables[statement.object_name] = statement


class Dir:
    def __init__(
        self,
        path: Path,
        config: DirConfig,
        environment: str = DEFAULT_ENVIRONMENT,
        base_path: Optional[Path] = None,
    ) -> None:
        self.path = path
        self.config = config
        self.environment = environment
        self.base_path = base_path or path
        self.sql_files: List[SqlFile] = []
        self.logical_schemas: List[LogicalSchema] = []
        self.ignored_statements: List[Statement] = []

    def __str__(self) -> str:
        return str(self.path)

    def rel_path(self) -> str:
        try:
            return self.path.relative_to(self.base_path).as_posix()
        except ValueError:
            return str(self.path)

    def subdirs(self) -> Tuple[List[Dir], int]:
        entries = sorted(
            entry for entry in self.path.iterdir() if entry.is_dir() and not entry.name.startswith(".")
        )
        subdirs: List[Dir] = []
        bad_count = 0
        for entry in entries:
            try:
                subdirs.append(parse_dir(entry, self.config, self.environment, self.base_path))
            except (ConfigError, OSError, UnicodeDecodeError) as exc:
                logger.warning("Unable to parse %s: %s", entry, exc)
                bad_count += 1
        return subdirs, bad_count

    def _collect_logical_schemas(self) -> None:
        schemas: Dict[str, LogicalSchema] = {}
        for sql_file in self.sql_files:
            current = ""
            for statement in sql_file.statements:
                if statement.kind == "use":
                    current = statement.object_name
                elif statement.kind == "create_table":
                    schemas.setdefault(current, LogicalSchema(name=current)).add_create_table(statement)
                elif statement.kind != "noop":
                    self.ignored_statements.append(statement)
        self.logical_schemas = list(schemas.values())


def parse_dir(
    path: Union[str, Path],
    parent_config: Optional[DirConfig] = None,
    environment: str = DEFAULT_ENVIRONMENT,
    base_path: Optional[Path] = None,
) -> Dir:
    path = Path(path)
    if not path.is_dir():
        raise ConfigError(f"{path} is not a directory")
    config = parent_config or DirConfig()
    option_file = path / OPTION_FILE
    if option_file.is_file():
        config = config.derive(read_option_file(option_file, environment))

    directory = Dir(path, config, environment, base_path)
    directory.sql_files = [SqlFile.read(sql_path) for sql_path in sorted(path.glob("*.sql")) if sql_path.is_file()]
    directory._collect_logical_schemas()
    return directory
