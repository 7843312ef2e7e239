import math
import struct
from enum import Enum
from dataclasses import dataclass
from typing import Any

from .errors import DivisionByZeroError, TypeMismatchError

_INT_MIN = -(2 ** 31)
_INT_RANGE = 2 ** 32


class ValueType(str, Enum):
    Void = "void"
    Boolean = "boolean"
    Integer = "integer"
    Float = "float"
    String = "string"


NUMERIC = (ValueType.Integer, ValueType.Float)


def wrap_int32(n: int) -> int:
    """Fold an arbitrary Python int into the signed 32-bit range."""
    return (n - _INT_MIN) % _INT_RANGE + _INT_MIN


def to_f32(x: float) -> float:
    """Round a host float to the nearest single-precision value."""
    try:
        return struct.unpack("f", struct.pack("f", x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


def format_float(x: float) -> str:
    """Shortest decimal that reads back as the same single-precision value."""
    if not math.isfinite(x):
        return repr(x)
    for digits in range(1, 10):
        text = f"{x:.{digits}g}"
        if to_f32(float(text)) == x:
            return repr(float(text))
    return repr(x)


def _int_div(a: int, b: int) -> int:
    # truncates toward zero
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


@dataclass
class Value:
    """A scalar with a fixed type tag.

    Arithmetic and the unary operators work in place on the receiver, so
    callers copy a value before mutating it whenever the source value is shared
    (literal constants, variable slots).
    """
    type: ValueType
    data: Any = None

    def copy(self) -> "Value":
        return Value(self.type, self.data)

    def assign(self, other: "Value") -> None:
        self.type = other.type
        self.data = other.data

    @property
    def is_void(self) -> bool:
        return self.type == ValueType.Void

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC

    def arithmetic(self, op: str, other: "Value") -> None:
        if self.type != other.type:
            raise TypeMismatchError(
                f"Incompatible types in arithmetic expression ({self.type.value} {op} {other.type.value})")
        match self.type:
            case ValueType.Integer:
                self.data = wrap_int32(self._int_op(op, self.data, other.data))
            case ValueType.Float:
                self.data = to_f32(self._float_op(op, self.data, other.data))
            case _:
                raise TypeMismatchError(f"Expecting numerical expression, got {self.type.value}")

    @staticmethod
    def _int_op(op: str, a: int, b: int) -> int:
        match op:
            case "+":
                return a + b
            case "-":
                return a - b
            case "*":
                return a * b
            case "/":
                if b == 0:
                    raise DivisionByZeroError("Division by zero")
                return _int_div(a, b)
            case "%":
                if b == 0:
                    raise DivisionByZeroError("Division by zero")
                return a - b * _int_div(a, b)
        raise TypeMismatchError(f"Unknown arithmetic operator {op}")

    @staticmethod
    def _float_op(op: str, a: float, b: float) -> float:
        match op:
            case "+":
                return a + b
            case "-":
                return a - b
            case "*":
                return a * b
            case "/":
                if b == 0.0:
                    raise DivisionByZeroError("Division by zero")
                return a / b
            case "%":
                raise TypeMismatchError("Expecting integer number")
        raise TypeMismatchError(f"Unknown arithmetic operator {op}")

    def relational(self, op: str, other: "Value") -> "Value":
        if self.type != other.type:
            raise TypeMismatchError("Incompatible types in relational expression")
        if self.type == ValueType.Void:
            raise TypeMismatchError("Cannot compare void values")
        match op:
            case "==":
                return bool_val(self.data == other.data)
            case "!=":
                return bool_val(self.data != other.data)
        if not self.is_numeric:
            raise TypeMismatchError(f"Operator {op} not supported for {self.type.value} values")
        match op:
            case "<":
                return bool_val(self.data < other.data)
            case "<=":
                return bool_val(self.data <= other.data)
            case ">":
                return bool_val(self.data > other.data)
            case ">=":
                return bool_val(self.data >= other.data)
        raise TypeMismatchError(f"Unknown relational operator {op}")

    def negate(self) -> None:
        match self.type:
            case ValueType.Integer:
                self.data = wrap_int32(-self.data)
            case ValueType.Float:
                self.data = to_f32(-self.data)
            case _:
                raise TypeMismatchError("Expecting numerical expression")

    def logical_not(self) -> None:
        if self.type != ValueType.Boolean:
            raise TypeMismatchError("Expecting Boolean expression")
        self.data = not self.data

    def render(self) -> str:
        match self.type:
            case ValueType.Boolean:
                return "true" if self.data else "false"
            case ValueType.String:
                return self.data
            case ValueType.Float:
                return format_float(self.data)
            case ValueType.Integer:
                return str(self.data)
        return ""

    def __str__(self) -> str:
        return self.render()


def void_val() -> Value:
    return Value(ValueType.Void)


def bool_val(b: bool) -> Value:
    return Value(ValueType.Boolean, bool(b))


def int_val(n: int) -> Value:
    return Value(ValueType.Integer, wrap_int32(int(n)))


def float_val(x: float) -> Value:
    return Value(ValueType.Float, to_f32(float(x)))


def string_val(s: str) -> Value:
    return Value(ValueType.String, str(s))
