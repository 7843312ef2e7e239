"""
Built-in robot operations driven through programs.
"""
import pytest

from robotlang.builtins import BUILTINS
from robotlang.config import SimulationConfig
from robotlang.errors import ArityError, SimulationError, TypeMismatchError

FAST = SimulationConfig(speed=0.01)


def test_builtin_table():
    assert set(BUILTINS) == {"rSet", "rMove", "rTurn", "oSet", "rTrail", "rFeel",
                             "rXPosition", "rYPosition", "rRotation"}


def test_round_trip_accessors(run_source):
    src = """
    func main()
      rSet(12.5, 30, 370);
      write rXPosition(); write " ";
      write rYPosition(); write " ";
      write rRotation();
    endfunc
    """
    _, out = run_source(src)
    assert out == "12.5 30.0 10.0"


def test_boundary_via_program(run_source):
    with pytest.raises(SimulationError, match="Position out of bounds") as exc:
        run_source("func main()\n  rSet(0.5, 25, 0);\nendfunc\n")
    assert exc.value.line == 2
    rt, _ = run_source("func main() rSet(1.5, 25, 0); endfunc")
    assert rt.world.positioned


def test_move_stops_before_obstacle(run_source):
    src = """
    func main()
      rSet(5, 5, 0);
      oSet(10, 5, 2, 2);
      rMove(10);
      write rXPosition() < 9.0;
    endfunc
    """
    rt, out = run_source(src, config=FAST)
    assert out == "true"
    assert rt.world.x_position() == pytest.approx(8.0, abs=0.02)


def test_feel_leaves_pose_unchanged(run_source):
    src = """
    func main()
      rSet(5, 5, 0);
      oSet(7, 5, 1, 1);
      write rFeel(0); write " ";
      write rFeel(4); write " ";
      write rXPosition(); write " ";
      write rRotation();
    endfunc
    """
    _, out = run_source(src)
    assert out == "true false 5.0 0.0"


def test_text_trace_lines(run_source):
    src = """
    func main()
      rSet(10, 10, 90);
      rSet(12.5, 10, 0);
      rTurn(45);
      oSet(30, 30, 2, 2);
      rTrail(true);
      rTrail(false);
    endfunc
    """
    rt, out = run_source(src, text_trace=True)
    assert rt.console == [
        "Robot positioned:",
        "X: 10.0, Y: 10.0, Rotation(Deg): 90.0",
        "Robot repositioned:",
        "X: 12.5, Y: 10.0, Rotation(Deg): 0.0",
        "Robot rotated:",
        "Rotation(Deg): 45.0",
        "Obstacle set:",
        "X: 30.0, Y: 30.0, H. size: 2.0, V. size: 2.0",
        "Trailing enabled.",
        "Trailing disabled.",
    ]
    assert out == "\n".join(rt.console) + "\n"


def test_text_trace_move(run_source):
    rt, _ = run_source("func main() rSet(10, 10, 0); rMove(1); endfunc", config=FAST, text_trace=True)
    assert rt.console[2] == "Robot moved:"
    assert rt.console[3].startswith("X: ")
    assert rt.console[3].endswith("Y: 10.0")
    assert rt.world.x_position() == pytest.approx(11.0, abs=1e-4)


def test_no_trace_by_default(run_source):
    rt, out = run_source("func main() rSet(10, 10, 0); rTrail(true); endfunc")
    assert out == ""
    assert rt.console == []


def test_display_notifications(run_source, display):
    run_source("func main() oSet(20, 20, 2, 2); rSet(10, 10, 0); rTrail(true); rTurn(90); endfunc")
    kinds = [e[0] for e in display.events]
    assert kinds == ["obstacle", "position", "positioned", "trail", "position"]
    assert display.events[-1] == ("position", (10.0, 10.0, 90.0))
    assert display.positioned and display.trail


@pytest.mark.parametrize("call", [
    "rMove(1)", "rTurn(90)", "rFeel(0)", "rXPosition()", "rYPosition()", "rRotation()", "rMove()",
])
def test_requires_positioning(run_source, call):
    with pytest.raises(SimulationError, match="robot is not positioned yet"):
        run_source(f"func main() x = 0; {call}; endfunc")


@pytest.mark.parametrize("call", [
    "rSet(1, 2)", "oSet(1, 2, 3)", "rTrail()", "rTurn(1, 2)", "rFeel()", "rXPosition(1)",
])
def test_argument_count(run_source, call):
    with pytest.raises(ArityError, match="incorrect number of arguments"):
        run_source(f"func main() rSet(10, 10, 0); {call}; endfunc")


@pytest.mark.parametrize("call,msg", [
    ('rSet("a", 1, 2)', "incorrect argument type"),
    ("rMove(true)", "incorrect argument type"),
    ("rFeel(1.0)", "Expecting integer number"),
    ("rTrail(1)", "Expecting Boolean expression"),
])
def test_argument_types(run_source, call, msg):
    with pytest.raises(TypeMismatchError, match=msg):
        run_source(f"func main() rSet(10, 10, 0); {call}; endfunc")


def test_void_builtin_used_as_value(run_source):
    with pytest.raises(TypeMismatchError, match="function expected to return a value"):
        run_source("func main() x = rSet(10, 10, 0); endfunc")


def test_builtins_take_precedence(run_source):
    src = """
    func rTurn(d)
      write "user";
    endfunc

    func main()
      rSet(10, 10, 0);
      rTurn(90);
      write rRotation();
    endfunc
    """
    _, out = run_source(src)
    assert out == "90.0"


def test_obstacle_errors(run_source):
    with pytest.raises(SimulationError, match="obstacle out of bounds"):
        run_source("func main() oSet(49, 49, 4, 4); endfunc")
    with pytest.raises(SimulationError, match="obstacle overlaps with robot"):
        run_source("func main() rSet(10, 10, 0); oSet(10.5, 10, 1, 1); endfunc")


def test_square_example(run_source, examples_dir):
    rt, out = run_source(examples_dir / "square.rl", config=FAST)
    assert out.startswith("back at ")
    assert rt.world.x_position() == pytest.approx(10.0, abs=0.05)
    assert rt.world.y_position() == pytest.approx(10.0, abs=0.05)
    assert rt.world.trail_enabled


def test_explore_example(run_source, examples_dir):
    rt, out = run_source(examples_dir / "explore.rl", config=FAST)
    assert out.startswith("turns: ")
    assert len(rt.world.obstacles) == 2
    for x, y in rt.world.path:
        assert not rt.world.collides(x, y)
