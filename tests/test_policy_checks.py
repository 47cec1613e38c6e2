from fakes import logical_schema

from schema_lint.policy.checks import (
    DETECTORS,
    all_problem_names,
    check_bad_charset,
    check_bad_engine,
    check_no_pk,
    is_allowed,
    problem_exists,
    with_detectors,
)
from schema_lint.policy.types import Annotation, Options
from schema_lint.workspace.model import Schema, Table

OPTS = Options(allowed_charsets=["latin1", "utf8mb4"], allowed_engines=["innodb"])


def _schema(*tables):
    return Schema(name="", tables=list(tables))


def test_no_pk_one_finding_per_table():
    logical = logical_schema("a", "b", "c")
    schema = _schema(
        Table("a", "", has_primary_key=False),
        Table("b", "", has_primary_key=True),
        Table("c", "", has_primary_key=False),
    )
    findings = check_no_pk(schema, logical, OPTS)
    assert [f.message for f in findings] == [
        "Table a does not define a PRIMARY KEY",
        "Table c does not define a PRIMARY KEY",
    ]
    assert findings[0].statement is logical.create_tables["a"]
    assert findings[1].statement is logical.create_tables["c"]


def test_no_pk_clean_schema():
    schema = _schema(Table("a", "", has_primary_key=True))
    assert check_no_pk(schema, logical_schema("a"), OPTS) == []


def test_allow_lists_are_case_insensitive():
    schema = _schema(Table("a", "", charset="UTF8MB4", engine="InnoDB"))
    logical = logical_schema("a")
    assert check_bad_charset(schema, logical, OPTS) == []
    assert check_bad_engine(schema, logical, OPTS) == []


def test_bad_charset_and_engine_checks_every_table():
    schema = _schema(
        Table("a", "", charset="utf16", engine="MyISAM"),
        Table("b", "", charset="latin1", engine="InnoDB"),
        Table("c", "", charset="ucs2", engine="MEMORY"),
    )
    logical = logical_schema("a", "b", "c")
    charset = check_bad_charset(schema, logical, OPTS)
    assert [f.statement.object_name for f in charset] == ["a", "c"]
    assert charset[0].summary == "Character set not permitted"
    assert "utf16" in charset[0].message
    engine = check_bad_engine(schema, logical, OPTS)
    assert [f.statement.object_name for f in engine] == ["a", "c"]
    assert engine[1].message == "Table c is using storage engine MEMORY, which is not in lint-allowed-engine"


def test_is_allowed():
    assert is_allowed("InnoDB", ["innodb"])
    assert not is_allowed("InnoDB", [])


def test_registry_lookup():
    assert all_problem_names() == ["bad-charset", "bad-engine", "no-pk"]
    assert problem_exists("NO-PK")
    assert not problem_exists("no-such-rule")


def test_registering_a_detector():
    def check_everything(schema, logical, opts):
        return [Annotation(statement=None, summary="x", message=t.name) for t in schema.tables]

    registry = with_detectors({"Everything": check_everything})
    assert problem_exists("everything", registry)
    assert not problem_exists("everything")
    assert set(DETECTORS) < set(registry)
