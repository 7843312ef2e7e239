"""Built-in robot and obstacle operations.

Every handler receives the runtime and the unevaluated argument nodes. Handlers
that need a placed robot check that first, then the argument count, then
evaluate and type-check the arguments.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Callable, Dict, List

from .ast import Node
from .errors import ArityError, TypeMismatchError
from .types import Value, ValueType, bool_val, float_val, format_float, to_f32, void_val

if TYPE_CHECKING:
    from .runtime import Runtime

Handler = Callable[["Runtime", List[Node]], Value]


def _check_count(args: List[Node], n: int) -> None:
    if len(args) != n:
        raise ArityError("incorrect number of arguments")


def _float_arg(rt: Runtime, node: Node) -> float:
    v = rt.evaluate(node)
    if not v.is_numeric:
        raise TypeMismatchError("incorrect argument type")
    return to_f32(float(v.data))


def _int_arg(rt: Runtime, node: Node) -> int:
    v = rt.evaluate(node)
    if v.type != ValueType.Integer:
        raise TypeMismatchError("Expecting integer number")
    return v.data


def _bool_arg(rt: Runtime, node: Node) -> bool:
    v = rt.evaluate(node)
    if v.type != ValueType.Boolean:
        raise TypeMismatchError("Expecting Boolean expression")
    return v.data


def r_set(rt: Runtime, args: List[Node]) -> Value:
    _check_count(args, 3)
    x, y, rot = (_float_arg(rt, a) for a in args)
    first = rt.world.set_pose(x, y, rot)
    if rt.text_trace:
        pose = rt.world.pose
        rt.log("Robot positioned:" if first else "Robot repositioned:")
        rt.log(f"X: {format_float(pose.x)}, Y: {format_float(pose.y)}, Rotation(Deg): {format_float(pose.heading)}")
    return void_val()


def r_move(rt: Runtime, args: List[Node]) -> Value:
    rt.world.require_positioned()
    _check_count(args, 1)
    rt.world.move(_float_arg(rt, args[0]))
    if rt.text_trace:
        rt.log("Robot moved:")
        rt.log(f"X: {format_float(rt.world.pose.x)}, Y: {format_float(rt.world.pose.y)}")
    return void_val()


def r_turn(rt: Runtime, args: List[Node]) -> Value:
    rt.world.require_positioned()
    _check_count(args, 1)
    rt.world.turn(_float_arg(rt, args[0]))
    if rt.text_trace:
        rt.log("Robot rotated:")
        rt.log(f"Rotation(Deg): {format_float(rt.world.pose.heading)}")
    return void_val()


def o_set(rt: Runtime, args: List[Node]) -> Value:
    _check_count(args, 4)
    x, y, sx, sy = (_float_arg(rt, a) for a in args)
    rt.world.add_obstacle(x, y, sx, sy)
    if rt.text_trace:
        rt.log("Obstacle set:")
        rt.log(f"X: {format_float(x)}, Y: {format_float(y)}, H. size: {format_float(sx)}, V. size: {format_float(sy)}")
    return void_val()


def r_trail(rt: Runtime, args: List[Node]) -> Value:
    _check_count(args, 1)
    enabled = _bool_arg(rt, args[0])
    rt.world.set_trail(enabled)
    if rt.text_trace:
        rt.log("Trailing enabled." if enabled else "Trailing disabled.")
    return void_val()


def r_feel(rt: Runtime, args: List[Node]) -> Value:
    rt.world.require_positioned()
    _check_count(args, 1)
    return bool_val(rt.world.feel(_int_arg(rt, args[0])))


def r_x_position(rt: Runtime, args: List[Node]) -> Value:
    rt.world.require_positioned()
    _check_count(args, 0)
    return float_val(rt.world.x_position())


def r_y_position(rt: Runtime, args: List[Node]) -> Value:
    rt.world.require_positioned()
    _check_count(args, 0)
    return float_val(rt.world.y_position())


def r_rotation(rt: Runtime, args: List[Node]) -> Value:
    rt.world.require_positioned()
    _check_count(args, 0)
    return float_val(rt.world.rotation())


BUILTINS: Dict[str, Handler] = {
    "rSet": r_set,
    "rMove": r_move,
    "rTurn": r_turn,
    "oSet": o_set,
    "rTrail": r_trail,
    "rFeel": r_feel,
    "rXPosition": r_x_position,
    "rYPosition": r_y_position,
    "rRotation": r_rotation,
}
