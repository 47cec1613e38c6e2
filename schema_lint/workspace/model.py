from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class Table:
    name: str
    create_statement: str
    has_primary_key: bool = True
    charset: str = ""
    engine: str = ""


@dataclass
class Schema:
    name: str
    tables: List[Table] = field(default_factory=list)
