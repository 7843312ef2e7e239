"""Activation records and the call stack.

Each variable lives in a ``Cell`` owned by the record that first assigned it.
A by-reference parameter is a second name bound to the caller's cell, so the
callee writes straight into the caller's storage.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import RobotRuntimeError, UndefinedError
from .types import Value


@dataclass
class Cell:
    value: Value


@dataclass
class ActivationRecord:
    name: str
    caller_line: int
    variables: Dict[str, Cell] = field(default_factory=dict)


class CallStack:
    def __init__(self):
        self._records: List[ActivationRecord] = []

    @property
    def depth(self) -> int:
        return len(self._records)

    @property
    def top(self) -> ActivationRecord:
        if not self._records:
            raise RobotRuntimeError("No active function")
        return self._records[-1]

    def push(self, name: str, caller_line: int) -> ActivationRecord:
        rec = ActivationRecord(name=name, caller_line=caller_line)
        self._records.append(rec)
        return rec

    def pop(self) -> ActivationRecord:
        if not self._records:
            raise RobotRuntimeError("Pop from an empty call stack")
        return self._records.pop()

    def define(self, name: str, value: Value) -> None:
        """Assign in the top record; the first assignment declares the variable."""
        variables = self.top.variables
        cell = variables.get(name)
        if cell is None:
            variables[name] = Cell(value.copy())
        else:
            cell.value.assign(value)

    def bind(self, name: str, cell: Cell) -> None:
        self.top.variables[name] = cell

    def cell(self, name: str) -> Cell:
        cell = self.top.variables.get(name)
        if cell is None:
            raise UndefinedError(f"Variable {name} not defined")
        return cell

    def get(self, name: str) -> Value:
        return self.cell(name).value.copy()

    def stack_trace(self, current_line: int, nitems: Optional[int] = None) -> List[str]:
        """Innermost-first ``name (line N)`` entries.

        The innermost frame reports the current line; each outer frame reports
        the line where it called the next one in.
        """
        lines: List[str] = []
        line = current_line
        for rec in reversed(self._records):
            lines.append(f"{rec.name} (line {line})")
            line = rec.caller_line
        if nitems is not None and len(lines) > 2 * nitems:
            skipped = len(lines) - 2 * nitems
            lines = lines[:nitems] + [f"... ({skipped} more)"] + lines[-nitems:]
        return lines
