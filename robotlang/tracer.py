from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional, TextIO

from opentelemetry import trace

from .types import Value


@dataclass
class Binding:
    name: str
    value: Value
    by_ref: bool = False


class CallTracer:
    """Observer of user-defined function calls. Has no effect on evaluation."""

    def on_call(self, name: str, bindings: List[Binding], line: int, depth: int, is_entry_point: bool) -> None:
        pass

    def on_return(self, name: str, result: Value, ref_bindings: List[Binding], line: int, depth: int) -> None:
        pass

    def close(self) -> None:
        pass


class FileCallTracer(CallTracer):
    """Indented call/return trace, one level of ``|   `` per nesting depth."""

    INDENT = "|   "

    def __init__(self, stream: TextIO, owns_stream: bool = False):
        self.stream = stream
        self.owns_stream = owns_stream

    def on_call(self, name, bindings, line, depth, is_entry_point):
        args = ", ".join(f"{'&' if b.by_ref else ''}{b.name}={b.value}" for b in bindings)
        where = "<entry point>" if is_entry_point else f"<line {line}>"
        self.stream.write(f"{self.INDENT * depth}{name}({args}) {where}\n")

    def on_return(self, name, result, ref_bindings, line, depth):
        text = "return"
        if not result.is_void:
            text += f" {result}"
        for b in ref_bindings:
            text += f", &{b.name}={b.value}"
        self.stream.write(f"{self.INDENT * depth}{text} <line {line}>\n")
        if depth == 0:
            self.stream.flush()

    def close(self):
        if self.owns_stream:
            self.stream.close()


class OTelCallTracer(CallTracer):
    """Opens one OpenTelemetry span per user function call."""

    def __init__(self, tracer: Optional[Any] = None):
        if tracer is None:
            tracer = trace.get_tracer(__name__)
        self.tracer = tracer
        self._spans: List[Any] = []

    def on_call(self, name, bindings, line, depth, is_entry_point):
        parent = trace.set_span_in_context(self._spans[-1]) if self._spans else None
        span = self.tracer.start_span(f"call:{name}", context=parent)
        span.set_attribute("robotlang.line", line)
        span.set_attribute("robotlang.depth", depth)
        span.set_attribute("robotlang.entry_point", is_entry_point)
        for b in bindings:
            span.set_attribute(f"robotlang.arg.{b.name}", str(b.value))
        self._spans.append(span)

    def on_return(self, name, result, ref_bindings, line, depth):
        if not self._spans:
            return
        span = self._spans.pop()
        if not result.is_void:
            span.set_attribute("robotlang.result", str(result))
        for b in ref_bindings:
            span.set_attribute(f"robotlang.ref.{b.name}", str(b.value))
        span.end()

    def close(self):
        while self._spans:
            self._spans.pop().end()
