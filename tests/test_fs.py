import pytest
from fakes import create_table, write_table

from schema_lint.config import DirConfig
from schema_lint.fs import SqlFile, parse_dir
from schema_lint.policy.sql_sanitize import classify_statement, split_statements
from schema_lint.policy.types import ConfigError


def test_split_statements_keeps_every_byte():
    sql = (
        "-- header comment\n"
        "CREATE TABLE a (s varchar(10) DEFAULT ';');\r\n"
        "\n"
        "/* block; comment */ INSERT INTO a VALUES ('x;y');\n"
        "CREATE TABLE `b` (c int COMMENT \"semi;colon\")"
    )
    chunks = split_statements(sql)
    assert "".join(chunks) == sql
    assert [classify_statement(chunk)[0] for chunk in chunks] == [
        "noop",
        "create_table",
        "noop",
        "other",
        "create_table",
    ]
    assert chunks[1] == "CREATE TABLE a (s varchar(10) DEFAULT ';');\r\n"


def test_classify_statement_names():
    assert classify_statement("create table if not exists `my``t` (id int);") == ("create_table", "my`t")
    assert classify_statement("USE `shop`;\n") == ("use", "shop")
    assert classify_statement("  \n# nothing\n") == ("noop", None)


def test_sql_file_line_numbers_and_rewrite(tmp_path):
    path = tmp_path / "t.sql"
    path.write_bytes(b"-- one\n\nCREATE TABLE t (id int);\r\nCREATE TABLE u (id int);\n")
    sql_file = SqlFile.read(path)
    tables = [s for s in sql_file.statements if s.kind == "create_table"]
    assert [s.line_no for s in tables] == [3, 4]
    assert tables[0].split_text_body() == ("CREATE TABLE t (id int)", ";\r\n")

    tables[1].text = "CREATE TABLE `u` (\n  `id` int\n);\n"
    length = sql_file.rewrite()
    expected = b"-- one\n\nCREATE TABLE t (id int);\r\nCREATE TABLE `u` (\n  `id` int\n);\n"
    assert path.read_bytes() == expected
    assert length == len(expected)


def test_parse_dir_groups_logical_schemas(tmp_path):
    write_table(tmp_path, "a")
    write_table(tmp_path, "b", "USE other;\n" + create_table("b") + ";\nINSERT INTO b VALUES (1);\n")
    directory = parse_dir(tmp_path)
    assert [s.name for s in directory.logical_schemas] == ["", "other"]
    assert list(directory.logical_schemas[0].create_tables) == ["a"]
    assert list(directory.logical_schemas[1].create_tables) == ["b"]
    assert len(directory.ignored_statements) == 1


def test_duplicate_table_is_config_error(tmp_path):
    write_table(tmp_path, "a")
    write_table(tmp_path, "copy_of_a", create_table("a") + ";\n")
    with pytest.raises(ConfigError, match="defined twice"):
        parse_dir(tmp_path)


def test_subdirs_inherit_config_and_count_bad_ones(tmp_path):
    (tmp_path / ".schema-lint.yaml").write_text("lint-allowed-engine: innodb,myrocks\n")
    write_table(tmp_path / "b_good", "t")
    (tmp_path / "a_bad").mkdir()
    (tmp_path / "a_bad" / ".schema-lint.yaml").write_text("not-an-option: 1\n")
    (tmp_path / ".hidden").mkdir()
    (tmp_path / "c_override").mkdir()
    (tmp_path / "c_override" / ".schema-lint.yaml").write_text("lint-allowed-engine: [rocksdb]\n")

    root = parse_dir(tmp_path, DirConfig())
    subdirs, bad_count = root.subdirs()
    assert bad_count == 1
    assert [d.path.name for d in subdirs] == ["b_good", "c_override"]
    assert subdirs[0].config.get_slice("lint-allowed-engine") == ["innodb", "myrocks"]
    assert subdirs[1].config.get_slice("lint-allowed-engine") == ["rocksdb"]
    assert subdirs[0].rel_path() == "b_good"


def test_parse_dir_requires_directory(tmp_path):
    with pytest.raises(ConfigError):
        parse_dir(tmp_path / "missing")


def test_classify_schema_qualified_table():
    assert classify_statement("CREATE TABLE app.users (id int);") == ("create_table", "users")
    assert classify_statement("create table if not exists `app` . `log.v2` (id int)") == ("create_table", "log.v2")


def test_qualified_tables_in_one_schema(tmp_path):
    write_table(tmp_path, "users", "CREATE TABLE app.users (id int);\n")
    write_table(tmp_path, "posts", "CREATE TABLE `app`.`posts` (id int);\n")
    directory = parse_dir(tmp_path)
    assert sorted(directory.logical_schemas[0].create_tables) == ["posts", "users"]
