from __future__ import annotations
from typing import Dict, Iterator, List, Optional
from loguru import logger

from .ast import FunctionDef, Node, NodeKind, Param
from .errors import LoadError
from .types import bool_val, float_val, int_val, string_val, wrap_int32


class FunctionTable:
    """Immutable name -> FunctionDef mapping built once from a parsed program.

    Loading also resolves every literal node to its constant value so the
    evaluator never looks at literal text again.
    """

    def __init__(self, functions: Dict[str, FunctionDef]):
        self._functions = dict(functions)

    @classmethod
    def from_program(cls, tree: Node) -> FunctionTable:
        if tree.kind != NodeKind.FunctionList:
            raise LoadError(f"Expected a function list, got {tree.kind.value}", line=tree.line)
        functions: Dict[str, FunctionDef] = {}
        for fnode in tree.children:
            if fnode.kind != NodeKind.Function:
                raise LoadError(f"Malformed function node: {fnode.kind.value}", line=fnode.line)
            name = fnode.text
            if name in functions:
                raise LoadError(f"Multiple definitions of function {name}", line=fnode.line)
            params_node, body = fnode.children[0], fnode.children[1]
            params: List[Param] = [Param(p.text, by_ref=(p.kind == NodeKind.ParamRef)) for p in params_node.children]
            resolve_literals(body)
            functions[name] = FunctionDef(name=name, params=params, body=body, line=fnode.line)
        logger.debug("loaded {} function(s): {}", len(functions), ", ".join(functions))
        return cls(functions)

    def get(self, name: str) -> Optional[FunctionDef]:
        return self._functions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)


def resolve_literals(node: Node) -> None:
    match node.kind:
        case NodeKind.Int:
            n = int(node.text)
            if wrap_int32(n) != n:
                raise LoadError(f"Integer literal out of range: {node.text}", line=node.line)
            node.value = int_val(n)
        case NodeKind.Float:
            node.value = float_val(float(node.text))
        case NodeKind.Boolean:
            node.value = bool_val(node.text == "true")
        case NodeKind.String:
            node.value = string_val(node.text)
    for ch in node.children:
        resolve_literals(ch)
