from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from schema_lint.config import DEFAULT_ENVIRONMENT, DirConfig, load_user_config
from schema_lint.fs import parse_dir
from schema_lint.policy.types import ConfigError, Result
from schema_lint.walker import lint_walker
from schema_lint.workspace.evaluator import SchemaEvaluator, load_evaluator

logger = logging.getLogger("schema_lint")

CODE_SUCCESS = 0
CODE_DIFFERENCES_FOUND = 1
CODE_FATAL_ERROR = 2
CODE_BAD_CONFIG = 78

DESCRIPTION = """Verify table files and reformat them in a standardized way.

Every CREATE TABLE file is evaluated by the configured schema evaluator, checked
against the lint-warning and lint-error problems, and rewritten to match the
canonical format reported by the evaluator.

Exit code 0 means all files were already formatted properly, 1 means some files
were reformatted but no problems were found, 2 means errors, warnings or other
failures occurred, and 78 means the configuration is invalid."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schema-lint",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "environment",
        nargs="?",
        default=DEFAULT_ENVIRONMENT,
        help="Environment section of option files to apply (default: %(default)s)",
    )
    parser.add_argument("--dir", default=".", help="Root directory to lint (default: current directory)")
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum subdirectory depth to walk")
    parser.add_argument("--evaluator", default=None, help="Schema evaluator as module:attribute")
    parser.add_argument(
        "--skip-format", action="store_true", help="Report format differences without rewriting files"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG level logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    return parser


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def apply_format_notices(result: Result) -> None:
    for annotation in result.format_notices:
        statement = annotation.statement
        statement.text = annotation.message
        try:
            length = statement.from_file.rewrite()
        except OSError as exc:
            write_err = OSError(f"Unable to write to {statement.file}: {exc}")
            logger.error(str(write_err))
            result.exceptions.append(write_err)
        else:
            logger.info("Wrote %s (%d bytes) -- updated file to normalize format", statement.file, length)


def report(result: Result, rewrite: bool = True) -> None:
    for exc in result.exceptions:
        logger.error(str(exc))
    for annotation in result.errors:
        logger.error(annotation.message_with_location())
    for annotation in result.warnings:
        logger.warning(annotation.message_with_location())
    if rewrite:
        apply_format_notices(result)
    else:
        for annotation in result.format_notices:
            logger.info("%s: %s", annotation.location(), annotation.summary)
    for line in result.debug_logs:
        logger.debug(line)


def exit_code(result: Result) -> Tuple[int, str]:
    for exc in result.exceptions:
        if isinstance(exc, ConfigError):
            return CODE_BAD_CONFIG, str(exc)
    if result.exceptions:
        return CODE_FATAL_ERROR, f"Skipped {len(result.exceptions)} operations due to fatal errors"
    if result.errors:
        return CODE_FATAL_ERROR, f"Found {len(result.errors)} errors"
    if result.warnings:
        return CODE_FATAL_ERROR, f"Found {len(result.warnings)} warnings"
    if result.format_notices:
        return CODE_DIFFERENCES_FOUND, ""
    return CODE_SUCCESS, ""


def main(argv: Optional[List[str]] = None, evaluator: Optional[SchemaEvaluator] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    user_config = load_user_config(args.environment)
    for warning in user_config.warnings:
        logger.warning("Config warning (%s): %s", user_config.path, warning)

    try:
        directory = parse_dir(args.dir, DirConfig(user_config.config), args.environment)
        max_depth = args.max_depth if args.max_depth is not None else directory.config.get_int("max-depth")
        if evaluator is None:
            reference = args.evaluator or directory.config.get("evaluator")
            if not reference:
                raise ConfigError("No schema evaluator configured; set option evaluator or pass --evaluator")
            evaluator = load_evaluator(reference)
    except ConfigError as exc:
        logger.error(str(exc))
        return CODE_BAD_CONFIG
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Unable to read %s: %s", args.dir, exc)
        return CODE_FATAL_ERROR

    result = lint_walker(directory, evaluator, max_depth)
    report(result, rewrite=not args.skip_format)

    code, message = exit_code(result)
    if message:
        logger.error(message)
    return code


if __name__ == "__main__":
    sys.exit(main())
