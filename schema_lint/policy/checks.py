from __future__ import annotations

from types import MappingProxyType
from typing import Callable, List, Mapping, Sequence

from schema_lint.fs import LogicalSchema
from schema_lint.policy.types import Annotation, Options
from schema_lint.workspace.model import Schema

# Detectors work on a whole schema, even though the built-in ones only look at
# one table at a time.
Detector = Callable[[Schema, LogicalSchema, Options], List[Annotation]]


def is_allowed(value: str, allowed: Sequence[str]) -> bool:
    value = value.lower()
    return any(value == candidate.lower() for candidate in allowed)


def check_no_pk(schema: Schema, logical_schema: LogicalSchema, opts: Options) -> List[Annotation]:
    findings: List[Annotation] = []
    for table in schema.tables:
        if not table.has_primary_key:
            findings.append(
                Annotation(
                    statement=logical_schema.create_tables.get(table.name),
                    summary="No primary key",
                    message=f"Table {table.name} does not define a PRIMARY KEY",
                )
            )
    return findings


def check_bad_charset(schema: Schema, logical_schema: LogicalSchema, opts: Options) -> List[Annotation]:
    findings: List[Annotation] = []
    for table in schema.tables:
        if not is_allowed(table.charset, opts.allowed_charsets):
            findings.append(
                Annotation(
                    statement=logical_schema.create_tables.get(table.name),
                    summary="Character set not permitted",
                    message=(
                        f"Table {table.name} is using character set {table.charset}, "
                        "which is not in lint-allowed-charset"
                    ),
                )
            )
    return findings


def check_bad_engine(schema: Schema, logical_schema: LogicalSchema, opts: Options) -> List[Annotation]:
    findings: List[Annotation] = []
    for table in schema.tables:
        if not is_allowed(table.engine, opts.allowed_engines):
            findings.append(
                Annotation(
                    statement=logical_schema.create_tables.get(table.name),
                    summary="Storage engine not permitted",
                    message=(
                        f"Table {table.name} is using storage engine {table.engine}, "
                        "which is not in lint-allowed-engine"
                    ),
                )
            )
    return findings


DETECTORS: Mapping[str, Detector] = MappingProxyType(
    {
        "no-pk": check_no_pk,
        "bad-charset": check_bad_charset,
        "bad-engine": check_bad_engine,
    }
)


def with_detectors(extra: Mapping[str, Detector], base: Mapping[str, Detector] = DETECTORS) -> Mapping[str, Detector]:
    registry = dict(base)
    registry.update({name.lower(): detector for name, detector in extra.items()})
    return MappingProxyType(registry)


def problem_exists(name: str, registry: Mapping[str, Detector] = DETECTORS) -> bool:
    return name.lower() in registry


def all_problem_names(registry: Mapping[str, Detector] = DETECTORS) -> List[str]:
    return sorted(registry)
