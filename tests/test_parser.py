"""
Unit tests for the robotlang parser.
Tests parse(), parse_program() and ParseError from robotlang.parser.
"""
import pytest

from robotlang.ast import NodeKind
from robotlang.parser import parse, parse_program, ParseError


def test_parse_simple_program():
    """Test parsing a single function into a lark tree."""
    src = """
    func main()
      x = 1;
      write x;
    endfunc
    """
    tree = parse(src)
    assert tree is not None
    assert tree.data == "start"
    funcs = list(tree.find_data("function"))
    assert len(funcs) == 1


def test_program_tree_shape():
    src = """
    func add(a, &b)
      b = a + b;
      return b;
    endfunc
    """
    prog = parse_program(src)
    assert prog.kind == NodeKind.FunctionList
    fn = prog.children[0]
    assert fn.kind == NodeKind.Function
    assert fn.text == "add"
    params, body = fn.children
    assert [p.kind for p in params.children] == [NodeKind.ParamValue, NodeKind.ParamRef]
    assert [p.text for p in params.children] == ["a", "b"]
    assert [s.kind for s in body.children] == [NodeKind.Assign, NodeKind.Return]


def test_line_numbers_are_tracked():
    src = "func main()\n  x = 1;\n\n  write x;\nendfunc\n"
    body = parse_program(src).children[0].children[1]
    assert body.children[0].line == 2
    assert body.children[1].line == 4


def test_operator_precedence():
    """* binds tighter than +, relational tighter than and, and tighter than or."""
    src = "func main() x = a or b and 1 + 2 * 3 < 10; endfunc"
    expr = parse_program(src).children[0].children[1].children[0].children[1]
    assert expr.kind == NodeKind.Or
    right = expr.children[1]
    assert right.kind == NodeKind.And
    rel = right.children[1]
    assert rel.kind == NodeKind.Lt
    add = rel.children[0]
    assert add.kind == NodeKind.Plus
    assert add.children[1].kind == NodeKind.Mul


def test_left_associative_subtraction():
    src = "func main() x = 10 - 3 - 2; endfunc"
    expr = parse_program(src).children[0].children[1].children[0].children[1]
    assert expr.kind == NodeKind.Minus
    assert expr.children[0].kind == NodeKind.Minus
    assert expr.children[1].text == "2"


def test_unary_operators():
    src = "func main() x = -y; z = not true; w = +1.5; endfunc"
    stmts = parse_program(src).children[0].children[1].children
    neg, notb, pos = (s.children[1] for s in stmts)
    assert neg.kind == NodeKind.Minus and len(neg.children) == 1
    assert notb.kind == NodeKind.Not
    assert pos.kind == NodeKind.Plus and pos.children[0].kind == NodeKind.Float


def test_literals_and_escapes():
    src = 'func main() write "a\\tb\\n"; x = 2.5e1; y = 7; z = false; endfunc'
    stmts = parse_program(src).children[0].children[1].children
    assert stmts[0].children[0].kind == NodeKind.String
    assert stmts[0].children[0].text == "a\tb\n"
    assert stmts[1].children[1].kind == NodeKind.Float
    assert stmts[2].children[1].kind == NodeKind.Int
    assert stmts[3].children[1].kind == NodeKind.Boolean


def test_control_flow_statements():
    src = """
    func main()
      if x > 0 then write 1; else write 2; endif
      while x < 3 do x = x + 1; endwhile
      read y;
      rSet(1.5, 1.5, 0.0);
      return;
    endfunc
    """
    stmts = parse_program(src).children[0].children[1].children
    kinds = [s.kind for s in stmts]
    assert kinds == [NodeKind.If, NodeKind.While, NodeKind.Read, NodeKind.FunCall, NodeKind.Return]
    assert len(stmts[0].children) == 3
    assert stmts[3].children[0].text == "rSet"
    assert len(stmts[3].children[1].children) == 3
    assert stmts[4].children == []


def test_keywords_do_not_swallow_identifiers():
    src = "func main() iffy = 1; done = iffy; endfunc"
    stmts = parse_program(src).children[0].children[1].children
    assert stmts[0].children[0].text == "iffy"
    assert stmts[1].children[0].text == "done"


def test_comments_are_ignored():
    src = """
    // line comment
    func main() /* block
    comment */ x = 1; // trailing
    endfunc
    """
    prog = parse_program(src)
    assert len(prog.children[0].children[1].children) == 1


def test_parse_errors():
    """Test parsing invalid programs raises ParseError."""
    with pytest.raises(ParseError):
        parse("func main( x = 1; endfunc")

    with pytest.raises(ParseError):
        parse("this is not a program")

    with pytest.raises(ParseError):
        parse("func main() x = 1 endfunc")


def test_parse_error_has_line():
    with pytest.raises(ParseError) as exc:
        parse("func main()\n  x = 1;\n  y = ;\nendfunc\n")
    assert exc.value.line == 3


def test_parse_example_file(examples_dir):
    tree = parse(examples_dir / "square.rl")
    assert len(list(tree.find_data("function"))) == 2
