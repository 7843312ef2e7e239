# Typed tree consumed by the runtime
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional

from .types import Value


class NodeKind(str, Enum):
    FunctionList = "function_list"
    Function = "function"
    ParamList = "param_list"
    ParamValue = "param_value"
    ParamRef = "param_ref"
    Block = "block"
    # statements
    Assign = "assign"
    If = "if"
    While = "while"
    Return = "return"
    Read = "read"
    Write = "write"
    FunCall = "funcall"
    ArgList = "arg_list"
    # atoms
    Id = "id"
    Int = "int"
    Float = "float"
    Boolean = "boolean"
    String = "string"
    # operators
    Plus = "+"
    Minus = "-"
    Mul = "*"
    Div = "/"
    Mod = "%"
    Equal = "=="
    NotEqual = "!="
    Lt = "<"
    Le = "<="
    Gt = ">"
    Ge = ">="
    And = "and"
    Or = "or"
    Not = "not"


LITERAL_KINDS = (NodeKind.Int, NodeKind.Float, NodeKind.Boolean, NodeKind.String)
RELATIONAL_KINDS = (NodeKind.Equal, NodeKind.NotEqual, NodeKind.Lt, NodeKind.Le, NodeKind.Gt, NodeKind.Ge)
ARITHMETIC_KINDS = (NodeKind.Plus, NodeKind.Minus, NodeKind.Mul, NodeKind.Div, NodeKind.Mod)


@dataclass
class Node:
    kind: NodeKind
    line: int = 0
    children: List["Node"] = field(default_factory=list)
    # identifier name, or raw literal text before load-time resolution
    text: str = ""
    # constant resolved at load for literal nodes
    value: Optional[Value] = None

    def pretty(self, indent: int = 0) -> str:
        label = self.kind.value
        if self.text:
            label += f" {self.text!r}"
        lines = ["  " * indent + f"{label} <line {self.line}>"]
        for ch in self.children:
            lines.append(ch.pretty(indent + 1))
        return "\n".join(lines)


@dataclass
class Param:
    name: str
    by_ref: bool = False


@dataclass
class FunctionDef:
    name: str
    params: List[Param]
    body: Node
    line: int = 0
