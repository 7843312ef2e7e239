from pathlib import Path
from lark import Lark, Token, Transformer, Tree, v_args
from lark.exceptions import LarkError, UnexpectedInput, VisitError

from .ast import Node, NodeKind
from .errors import ParseError

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_parser = None

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}


def _load_parser() -> Lark:
    global _parser
    if _parser is None:
        grammar = GRAMMAR_PATH.read_text(encoding="utf-8")
        _parser = Lark(grammar, start="start", parser="lalr", maybe_placeholders=True)
    return _parser


def _unescape(raw: str) -> str:
    out = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            nxt = raw[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _id(tok: Token) -> Node:
    return Node(NodeKind.Id, line=tok.line, text=str(tok))


@v_args(inline=True)
class AstBuilder(Transformer):
    """Turns the lark parse tree into the typed Node tree."""

    def start(self, *functions):
        line = functions[0].line if functions else 0
        return Node(NodeKind.FunctionList, line=line, children=list(functions))

    def function(self, func_tok, name, params, body, _end):
        if params is None:
            params = Node(NodeKind.ParamList, line=func_tok.line)
        return Node(NodeKind.Function, line=func_tok.line, text=str(name), children=[params, body])

    def param_list(self, *params):
        return Node(NodeKind.ParamList, line=params[0].line, children=list(params))

    def param_value(self, name):
        return Node(NodeKind.ParamValue, line=name.line, text=str(name))

    def param_ref(self, name):
        return Node(NodeKind.ParamRef, line=name.line, text=str(name))

    def block(self, *stmts):
        stmts = [s for s in stmts if s is not None]
        return Node(NodeKind.Block, line=stmts[0].line if stmts else 0, children=stmts)

    # ---------- statements ----------
    def assign(self, name, expr):
        return Node(NodeKind.Assign, line=name.line, children=[_id(name), expr])

    def if_stmt(self, tok, cond, then_block, _else_tok, else_block):
        children = [cond, then_block]
        if else_block is not None:
            children.append(else_block)
        return Node(NodeKind.If, line=tok.line, children=children)

    def while_stmt(self, tok, cond, body):
        return Node(NodeKind.While, line=tok.line, children=[cond, body])

    def return_stmt(self, tok, expr):
        return Node(NodeKind.Return, line=tok.line, children=[expr] if expr is not None else [])

    def read_stmt(self, tok, name):
        return Node(NodeKind.Read, line=tok.line, children=[_id(name)])

    def write_stmt(self, tok, expr):
        return Node(NodeKind.Write, line=tok.line, children=[expr])

    def call_stmt(self, name, args):
        return self.funcall(name, args)

    def empty_stmt(self):
        return None

    # ---------- expressions ----------
    def arg_list(self, *exprs):
        return Node(NodeKind.ArgList, line=exprs[0].line, children=list(exprs))

    def funcall(self, name, args):
        if args is None:
            args = Node(NodeKind.ArgList, line=name.line)
        return Node(NodeKind.FunCall, line=name.line, children=[_id(name), args])

    def var(self, name):
        return _id(name)

    def _binary(self, kind, left, right):
        return Node(kind, line=left.line, children=[left, right])

    def or_op(self, a, b):
        return self._binary(NodeKind.Or, a, b)

    def and_op(self, a, b):
        return self._binary(NodeKind.And, a, b)

    def eq(self, a, b):
        return self._binary(NodeKind.Equal, a, b)

    def ne(self, a, b):
        return self._binary(NodeKind.NotEqual, a, b)

    def lt(self, a, b):
        return self._binary(NodeKind.Lt, a, b)

    def le(self, a, b):
        return self._binary(NodeKind.Le, a, b)

    def gt(self, a, b):
        return self._binary(NodeKind.Gt, a, b)

    def ge(self, a, b):
        return self._binary(NodeKind.Ge, a, b)

    def add(self, a, b):
        return self._binary(NodeKind.Plus, a, b)

    def sub(self, a, b):
        return self._binary(NodeKind.Minus, a, b)

    def mul(self, a, b):
        return self._binary(NodeKind.Mul, a, b)

    def div(self, a, b):
        return self._binary(NodeKind.Div, a, b)

    def mod(self, a, b):
        return self._binary(NodeKind.Mod, a, b)

    def not_op(self, operand):
        return Node(NodeKind.Not, line=operand.line, children=[operand])

    def neg(self, operand):
        return Node(NodeKind.Minus, line=operand.line, children=[operand])

    def pos(self, operand):
        return Node(NodeKind.Plus, line=operand.line, children=[operand])

    # ---------- literals (text only; values are resolved at load) ----------
    def int_lit(self, tok):
        return Node(NodeKind.Int, line=tok.line, text=str(tok))

    def float_lit(self, tok):
        return Node(NodeKind.Float, line=tok.line, text=str(tok))

    def true_lit(self, tok):
        return Node(NodeKind.Boolean, line=tok.line, text="true")

    def false_lit(self, tok):
        return Node(NodeKind.Boolean, line=tok.line, text="false")

    def string_lit(self, tok):
        return Node(NodeKind.String, line=tok.line, text=_unescape(str(tok)[1:-1]))


def parse(source: str | Path) -> Tree:
    """Parse program text (or a Path to a program file) into a lark tree."""
    try:
        text = Path(source).read_text(encoding="utf-8") if isinstance(source, Path) else str(source)
        parser = _load_parser()
        return parser.parse(text)
    except UnexpectedInput as e:
        raise ParseError(str(e), line=getattr(e, "line", None)) from e
    except (LarkError, OSError) as e:
        raise ParseError(str(e)) from e


def parse_program(source: str | Path) -> Node:
    """Parse program text into the typed tree consumed by the runtime."""
    tree = parse(source)
    try:
        return AstBuilder().transform(tree)
    except VisitError as e:
        raise ParseError(str(e.orig_exc)) from e
