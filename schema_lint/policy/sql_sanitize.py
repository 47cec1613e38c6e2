from __future__ import annotations

import re
from typing import List, Optional, Tuple

SINGLE_LINE_COMMENT = re.compile(r"(?:--|#).*?$", re.MULTILINE)
MULTI_LINE_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
STRING_LITERAL = re.compile(r"'(?:''|\\.|[^'\\])*'")
DOUBLE_QUOTED_LITERAL = re.compile(r'"(?:""|\\.|[^"\\])*"')
BACKTICK_LITERAL = re.compile(r"`[^`]*`")
DELIMITER = ";"

TOKEN = re.compile(
    "|".join(
        pattern.pattern
        for pattern in (
            SINGLE_LINE_COMMENT,
            MULTI_LINE_COMMENT,
            STRING_LITERAL,
            DOUBLE_QUOTED_LITERAL,
            BACKTICK_LITERAL,
        )
    )
    + "|" + re.escape(DELIMITER),
    re.MULTILINE | re.DOTALL,
)
NOISE = re.compile(r"(?:\s|(?:--|#)[^\n]*(?:\n|$)|/\*.*?\*/)*", re.DOTALL)
LINE_TAIL = re.compile(r"[ \t]*(?:\r?\n)?")

NAME = r"(?:`(?:``|[^`])+`|[\w$]+)"
IDENTIFIER = rf"({NAME})"
CREATE_TABLE = re.compile(
    rf"^create\s+table\s+(?:if\s+not\s+exists\s+)?(?:{NAME}\s*\.\s*)?{IDENTIFIER}", re.IGNORECASE
)
USE = re.compile(rf"^use\s+{IDENTIFIER}", re.IGNORECASE)


def strip_comments(sql: str) -> str:
    sql = SINGLE_LINE_COMMENT.sub("", sql)
    sql = MULTI_LINE_COMMENT.sub("", sql)
    return sql


def is_noise(sql: str) -> bool:
    return NOISE.fullmatch(sql) is not None


def _split_leading_noise(chunk: str) -> List[str]:
    noise_end = NOISE.match(chunk).end()
    if 0 < noise_end < len(chunk):
        return [chunk[:noise_end], chunk[noise_end:]]
    return [chunk]


def split_statements(sql: str) -> List[str]:
    """Split SQL text into statements, keeping every byte of the input.

    Each statement ends after its delimiter plus any trailing blanks and one
    newline. Comments and whitespace in front of a statement are returned as
    separate chunks, so ``"".join(split_statements(sql)) == sql``.
    """
    chunks: List[str] = []
    start = 0
    for match in TOKEN.finditer(sql):
        if match.group(0) != DELIMITER:
            continue
        end = LINE_TAIL.match(sql, match.end()).end()
        chunks.extend(_split_leading_noise(sql[start:end]))
        start = end
    if start < len(sql):
        chunks.extend(_split_leading_noise(sql[start:]))
    return chunks


def _unquote(identifier: str) -> str:
    if identifier.startswith("`") and identifier.endswith("`"):
        return identifier[1:-1].replace("``", "`")
    return identifier


def classify_statement(sql: str) -> Tuple[str, Optional[str]]:
    if is_noise(sql):
        return "noop", None
    stripped = strip_comments(sql).strip()
    match = CREATE_TABLE.match(stripped)
    if match:
        return "create_table", _unquote(match.group(1))
    match = USE.match(stripped)
    if match:
        return "use", _unquote(match.group(1))
    return "other", None
