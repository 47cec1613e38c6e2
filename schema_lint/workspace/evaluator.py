from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import List, Protocol, Tuple, Union

from schema_lint.fs import LogicalSchema, Statement
from schema_lint.policy.types import ConfigError
from schema_lint.workspace.model import Schema
from schema_lint.workspace.options import WorkspaceOptions


@dataclass
class StatementError:
    table_name: str
    statement: Statement
    error: Union[str, Exception]

    def __str__(self) -> str:
        return str(self.error)


class SchemaEvaluator(Protocol):
    """Materializes a logical schema in a workspace.

    Implementations own SQL execution and any provisioning of the workspace.
    A failure to evaluate the schema as a whole is signalled by raising; errors
    from individual statements are returned alongside the schema.
    """

    def evaluate(
        self, logical_schema: LogicalSchema, options: WorkspaceOptions
    ) -> Tuple[Schema, List[StatementError]]: ...


def load_evaluator(reference: str) -> SchemaEvaluator:
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigError(f"Evaluator must be given as module:attribute (found {reference!r})")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Unable to import evaluator module {module_name}: {exc}") from exc
    factory = getattr(module, attribute, None)
    if factory is None:
        raise ConfigError(f"Module {module_name} has no attribute {attribute}")
    evaluator = factory()
    if not callable(getattr(evaluator, "evaluate", None)):
        raise ConfigError(f"Evaluator {reference} does not provide an evaluate method")
    return evaluator
