from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List


class NodeKind(str, Enum):
    PROGRAM = "Program"
    FUNCTION_DECL = "FunctionDecl"
    CLASS_DECL = "ClassDecl"
    VAR_DECL = "VarDecl"
    ASSIGNMENT = "Assignment"
    IF = "If"
    FOR = "For"
    WHILE = "While"
    PRINT = "Print"
    RETURN = "Return"
    EXPRESSION = "Expression"
    COMMENT = "Comment"
    UNKNOWN = "Unknown"


BLOCK_KINDS = frozenset({NodeKind.FUNCTION_DECL, NodeKind.CLASS_DECL, NodeKind.IF, NodeKind.FOR, NodeKind.WHILE})


@dataclass(frozen=True)
class Span:
    start_line: int
    end_line: int


@dataclass
class IRNode:
    kind: NodeKind
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["IRNode"] = field(default_factory=list)
    span: Span = Span(1, 1)

    def attr(self, key: str, default: str = "") -> str:
        return self.attributes.get(key, default)

    @property
    def is_block(self) -> bool:
        if self.kind is NodeKind.UNKNOWN:
            return bool(self.children) or self.attr("block") == "1"
        return self.kind in BLOCK_KINDS

    def walk(self) -> Iterator["IRNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def count_kinds(self) -> Counter:
        return Counter(n.kind for n in self.walk() if n.kind is not NodeKind.PROGRAM)


def unknown(raw: str, start: int, end: int | None = None) -> IRNode:
    return IRNode(NodeKind.UNKNOWN, {"raw": raw}, [], Span(start, end or start))


def program(children: List[IRNode], end_line: int) -> IRNode:
    return IRNode(NodeKind.PROGRAM, {}, children, Span(1, max(1, end_line)))
