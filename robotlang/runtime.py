from __future__ import annotations
import re
import sys
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional, TextIO, Tuple

from loguru import logger

from .ast import ARITHMETIC_KINDS, LITERAL_KINDS, RELATIONAL_KINDS, FunctionDef, Node, NodeKind, Param
from .builtins import BUILTINS
from .config import SimulationConfig
from .display import Display
from .errors import (
    ArityError,
    InputError,
    RobotLangError,
    RobotRuntimeError,
    TypeMismatchError,
    UndefinedError,
)
from .parser import parse_program
from .semantic import FunctionTable
from .simulation import World
from .stack import CallStack, Cell
from .tracer import Binding, CallTracer
from .types import Value, ValueType, float_val, int_val, string_val, void_val, wrap_int32

_INT_TOKEN = re.compile(r"[+-]?\d+")

# Python frames available to a run; each user-level call costs several
RECURSION_LIMIT = 10000


def value_from_token(token: str) -> Value:
    """Integer if the token parses as one, else float, else the raw string."""
    if _INT_TOKEN.fullmatch(token):
        n = int(token)
        if wrap_int32(n) == n:
            return int_val(n)
    if "_" not in token:
        try:
            return float_val(float(token))
        except ValueError:
            pass
    return string_val(token)


class TokenReader:
    """Whitespace-delimited tokens pulled lazily from a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._pending: Deque[str] = deque()

    def next_token(self) -> str:
        while not self._pending:
            line = self.stream.readline()
            if not line:
                raise InputError("no more input to read")
            self._pending.extend(line.split())
        return self._pending.popleft()


class Runtime:
    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        display: Optional[Display] = None,
        tracer: Optional[CallTracer] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        text_trace: bool = False,
        recursion_limit: int = RECURSION_LIMIT,
        trace_items: Optional[int] = None,
    ):
        self.world = World(config, display)
        self.tracer = tracer
        self.stdin = stdin
        self.stdout = stdout
        self.text_trace = text_trace
        self.recursion_limit = recursion_limit
        # frames kept at each end of an error's call stack; None keeps all
        self.trace_items = trace_items
        self.console: List[str] = []
        self.program: Optional[Node] = None
        self.functions: Optional[FunctionTable] = None
        self.stack = CallStack()
        # line of the node being evaluated, reported by runtime errors
        self.line = -1
        self._reader: Optional[TokenReader] = None

    @property
    def out(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    def log(self, msg: str):
        self.console.append(msg)
        self.out.write(msg + "\n")

    def load(self, source: str | Path) -> Node:
        return self.load_program(parse_program(source))

    def load_program(self, tree: Node) -> Node:
        self.functions = FunctionTable.from_program(tree)
        self.program = tree
        return tree

    # ---------- Execution entry ----------
    def run(self, entry: str = "main") -> Value:
        """Call the entry function with no arguments."""
        return self.call(entry)

    def call(self, name: str, args: Optional[List[Node]] = None) -> Value:
        if self.functions is None:
            raise RobotRuntimeError("No program loaded")
        previous_limit = sys.getrecursionlimit()
        if previous_limit < self.recursion_limit:
            sys.setrecursionlimit(self.recursion_limit)
        try:
            return self.execute_function(name, args or [])
        except RobotLangError as e:
            self._annotate(e)
            raise
        except RecursionError:
            raise self._stack_overflow() from None
        finally:
            sys.setrecursionlimit(previous_limit)

    def stack_trace(self, nitems: Optional[int] = None) -> List[str]:
        return self.stack.stack_trace(self.line, nitems)

    def _annotate(self, e: RobotLangError) -> None:
        if e.line is None:
            e.line = self.line
        if not e.call_stack:
            e.call_stack = self.stack_trace(self.trace_items)

    def _stack_overflow(self) -> RobotRuntimeError:
        err = RobotRuntimeError("stack overflow")
        self._annotate(err)
        return err

    # ---------- Function dispatch ----------
    def execute_function(self, name: str, args: List[Node]) -> Value:
        handler = BUILTINS.get(name)
        if handler is not None:
            return handler(self, args)

        fn = self.functions.get(name)
        if fn is None:
            raise UndefinedError(f"function {name} not declared")

        call_line = self.line
        bound = self._list_arguments(fn, args)
        depth = self.stack.depth
        if self.tracer:
            self.tracer.on_call(name, [Binding(p.name, c.value.copy(), p.by_ref) for p, c in bound],
                                call_line, depth, depth == 0)
        logger.debug("call {} depth={} line={}", name, depth, call_line)

        self.stack.push(name, call_line)
        self.line = fn.line
        try:
            for param, cell in bound:
                self.stack.bind(param.name, cell)
            result = self._exec_block(fn.body)
            if result is None:
                result = void_val()
            if self.tracer:
                refs = [Binding(p.name, c.value.copy(), True) for p, c in bound if p.by_ref]
                self.tracer.on_return(name, result, refs, self.line, depth)
        except RobotLangError as e:
            self._annotate(e)
            raise
        except RecursionError:
            raise self._stack_overflow() from None
        finally:
            self.stack.pop()
        self.line = call_line
        return result

    def _list_arguments(self, fn: FunctionDef, args: List[Node]) -> List[Tuple[Param, Cell]]:
        if len(fn.params) != len(args):
            raise ArityError(f"Incorrect number of parameters calling function {fn.name}")
        bound: List[Tuple[Param, Cell]] = []
        for param, arg in zip(fn.params, args):
            self.line = arg.line
            if not param.by_ref:
                bound.append((param, Cell(self.evaluate(arg))))
                continue
            if arg.kind != NodeKind.Id:
                raise ArityError("Wrong argument for pass by reference")
            bound.append((param, self.stack.cell(arg.text)))
        return bound

    # ---------- Statement execution ----------
    def _exec_block(self, block: Node) -> Optional[Value]:
        for stmt in block.children:
            result = self._exec_stmt(stmt)
            if result is not None:
                return result
        return None

    def _exec_stmt(self, node: Node) -> Optional[Value]:
        self.line = node.line
        match node.kind:
            case NodeKind.Assign:
                value = self.evaluate(node.children[1])
                self.stack.define(node.children[0].text, value)
                return None
            case NodeKind.If:
                return self._exec_if(node)
            case NodeKind.While:
                return self._exec_while(node)
            case NodeKind.Return:
                if node.children:
                    return self.evaluate(node.children[0])
                return void_val()
            case NodeKind.Read:
                self._exec_read(node)
                return None
            case NodeKind.Write:
                self._exec_write(node)
                return None
            case NodeKind.FunCall:
                self.execute_function(node.children[0].text, node.children[1].children)
                return None
            case _:
                raise RobotRuntimeError(f"Unsupported statement: {node.kind.value}")

    def _exec_if(self, node: Node) -> Optional[Value]:
        cond = self._check_boolean(self.evaluate(node.children[0]))
        if cond.data:
            return self._exec_block(node.children[1])
        if len(node.children) == 3:
            return self._exec_block(node.children[2])
        return None

    def _exec_while(self, node: Node) -> Optional[Value]:
        cond_node, body = node.children
        while True:
            cond = self._check_boolean(self.evaluate(cond_node))
            if not cond.data:
                return None
            result = self._exec_block(body)
            if result is not None:
                return result

    def _exec_read(self, node: Node):
        if self._reader is None:
            self._reader = TokenReader(self.stdin if self.stdin is not None else sys.stdin)
        value = value_from_token(self._reader.next_token())
        self.stack.define(node.children[0].text, value)

    def _exec_write(self, node: Node):
        operand = node.children[0]
        if operand.kind == NodeKind.String:
            # literal strings are emitted verbatim, no placeholder substitution
            self.out.write(operand.value.data)
            return
        self.out.write(self.evaluate(operand).render())

    # ---------- Expressions ----------
    def evaluate(self, node: Node) -> Value:
        previous = self.line
        self.line = node.line
        value = self._eval_expr(node)
        self.line = previous
        return value

    def _eval_expr(self, node: Node) -> Value:
        kind = node.kind
        if kind == NodeKind.Id:
            return self.stack.get(node.text)
        if kind in LITERAL_KINDS:
            if node.value is None:
                raise RobotRuntimeError(f"Unresolved {kind.value} literal")
            return node.value.copy()
        if kind == NodeKind.FunCall:
            value = self.execute_function(node.children[0].text, node.children[1].children)
            if value.is_void:
                raise TypeMismatchError("function expected to return a value")
            return value

        if len(node.children) == 1:
            return self._unary(kind, self.evaluate(node.children[0]))

        if kind in (NodeKind.And, NodeKind.Or):
            return self._eval_boolean(node)

        left = self.evaluate(node.children[0])
        right = self.evaluate(node.children[1])
        if kind in RELATIONAL_KINDS:
            return left.relational(kind.value, right)
        if kind in ARITHMETIC_KINDS:
            if kind == NodeKind.Mod:
                self._check_integer(left)
                self._check_integer(right)
            else:
                self._check_numeric(left)
                self._check_numeric(right)
            left.arithmetic(kind.value, right)
            return left
        raise RobotRuntimeError(f"Unsupported expression node: {kind.value}")

    def _eval_boolean(self, node: Node) -> Value:
        # short-circuit: the right operand is evaluated only when needed
        left = self._check_boolean(self.evaluate(node.children[0]))
        if node.kind == NodeKind.And and not left.data:
            return left
        if node.kind == NodeKind.Or and left.data:
            return left
        return self._check_boolean(self.evaluate(node.children[1]))

    def _unary(self, kind: NodeKind, v: Value) -> Value:
        match kind:
            case NodeKind.Plus:
                self._check_numeric(v)
            case NodeKind.Minus:
                self._check_numeric(v)
                v.negate()
            case NodeKind.Not:
                v.logical_not()
            case _:
                raise RobotRuntimeError(f"Unknown unary {kind.value}")
        return v

    @staticmethod
    def _check_boolean(v: Value) -> Value:
        if v.type != ValueType.Boolean:
            raise TypeMismatchError("Expecting Boolean expression")
        return v

    @staticmethod
    def _check_integer(v: Value) -> Value:
        if v.type != ValueType.Integer:
            raise TypeMismatchError("Expecting integer number")
        return v

    @staticmethod
    def _check_numeric(v: Value) -> Value:
        if not v.is_numeric:
            raise TypeMismatchError("Expecting numerical expression")
        return v
