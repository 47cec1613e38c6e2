from __future__ import annotations

from typing import Mapping

from schema_lint.fs import Dir
from schema_lint.policy.checks import DETECTORS, Detector
from schema_lint.policy.options import options_for_config
from schema_lint.policy.types import Annotation, ConfigError, ExecutionError, Result, bad_config_result
from schema_lint.workspace.evaluator import SchemaEvaluator
from schema_lint.workspace.options import WorkspaceOptions


def lint_dir(
    directory: Dir,
    ws_opts: WorkspaceOptions,
    evaluator: SchemaEvaluator,
    registry: Mapping[str, Detector] = DETECTORS,
) -> Result:
    """Lint the logical schemas of one directory, without descending into subdirs."""
    try:
        ignore_table = directory.config.get_regexp("ignore-table")
        ignore_schema = directory.config.get_regexp("ignore-schema")
        opts = options_for_config(directory.config, registry)
    except ConfigError as exc:
        return bad_config_result(exc)

    result = Result()
    for logical_schema in directory.logical_schemas:
        # Only literal schema names are matched. A match skips everything left
        # in the directory, not just this logical schema.
        if ignore_schema is not None:
            if any(ignore_schema.search(name) for name in directory.config.get_slice("schema")):
                result.debug_logs.append(
                    f"Skipping schema in {directory.rel_path()} because ignore-schema='{ignore_schema.pattern}'"
                )
                return result

        try:
            schema, statement_errors = evaluator.evaluate(logical_schema, ws_opts)
        except Exception as exc:
            result.exceptions.append(
                ExecutionError(f"Skipping schema in {directory.rel_path()} due to error: {exc}")
            )
            continue

        for stmt_err in statement_errors:
            if ignore_table is not None and ignore_table.search(stmt_err.table_name):
                result.debug_logs.append(
                    f"Skipping table {stmt_err.table_name} because ignore-table='{ignore_table.pattern}'"
                )
                continue
            result.errors.append(
                Annotation(
                    statement=stmt_err.statement,
                    summary="SQL statement returned an error",
                    message=str(stmt_err),
                )
            )

        for name, severity in opts.problem_severity.items():
            result.add(severity, registry[name](schema, logical_schema, opts))

        for table in schema.tables:
            if ignore_table is not None and ignore_table.search(table.name):
                result.debug_logs.append(
                    f"Skipping table {table.name} because ignore-table='{ignore_table.pattern}'"
                )
                continue
            statement = logical_schema.create_tables.get(table.name)
            if statement is None:
                result.debug_logs.append(
                    f"Table {table.name} in {directory.rel_path()} has no CREATE TABLE file; not checking its format"
                )
                continue
            body, suffix = statement.split_text_body()
            if table.create_statement != body:
                result.format_notices.append(
                    Annotation(
                        statement=statement,
                        summary="SQL statement should be reformatted",
                        message=f"{table.create_statement}{suffix}",
                    )
                )
    return result
