from __future__ import annotations

import logging
from typing import Mapping

from schema_lint.fs import Dir
from schema_lint.policy.checks import DETECTORS, Detector
from schema_lint.policy.lint import lint_dir
from schema_lint.policy.types import ConfigError, ExecutionError, Result, bad_config_result
from schema_lint.workspace.evaluator import SchemaEvaluator
from schema_lint.workspace.options import options_for_dir

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5


def lint_walker(
    directory: Dir,
    evaluator: SchemaEvaluator,
    max_depth: int = DEFAULT_MAX_DEPTH,
    registry: Mapping[str, Detector] = DETECTORS,
) -> Result:
    """Lint directory and its subdirs, returning one cumulative Result.

    The directory itself is always linted. Subdirs are walked in name order
    while max_depth remains positive; each child result is merged into this
    one after the child returns.
    """
    logger.info("Linting %s", directory)
    if directory.ignored_statements:
        logger.warning(
            "Ignoring %d non-CREATE TABLE statements found in this directory's *.sql files",
            len(directory.ignored_statements),
        )

    try:
        ws_opts = options_for_dir(directory)
    except ConfigError as exc:
        return bad_config_result(exc)

    result = lint_dir(directory, ws_opts, evaluator, registry)

    try:
        subdirs, bad_count = directory.subdirs()
    except OSError as exc:
        result.exceptions.append(ExecutionError(f"Cannot list subdirs of {directory}: {exc}"))
        return result

    if subdirs and max_depth <= 0:
        result.exceptions.append(ExecutionError(f"Not walking subdirs of {directory}: max depth reached"))
        return result
    if bad_count > 0:
        result.exceptions.append(
            ExecutionError(f"Ignoring {bad_count} subdirs of {directory} with configuration errors")
        )
    for sub in subdirs:
        result.merge(lint_walker(sub, evaluator, max_depth - 1, registry))
    return result
