#!/usr/bin/env python
import sys
import argparse
from pathlib import Path

from loguru import logger

from robotlang import Runtime, SimulationConfig
from robotlang.display import LogDisplay
from robotlang.errors import ParseError, LoadError, RobotRuntimeError
from robotlang.parser import parse_program
from robotlang.tracer import FileCallTracer, OTelCallTracer

# frames shown at each end of a long runtime error stack
STACK_TRACE_ITEMS = 5


def _find_program(target: str) -> Path | None:
    potential_paths = [Path(target), Path(f"{target}.rl"), Path("examples") / target, Path("examples") / f"{target}.rl"]
    for p in potential_paths:
        if p.exists() and p.is_file():
            return p
    return None


def _setup_otel():
    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    trace.set_tracer_provider(provider)
    return OTelCallTracer(trace.get_tracer("robotlang"))


def run_program(args) -> int:
    program = _find_program(args.name)
    if not program:
        print(f"Error: Could not find program file for '{args.name}'", file=sys.stderr)
        return 1

    tracer = None
    if args.trace:
        tracer = FileCallTracer(open(args.trace, "w", encoding="utf-8"), owns_stream=True)
    elif args.otel:
        tracer = _setup_otel()

    rt = Runtime(
        config=SimulationConfig.from_env(),
        display=LogDisplay() if args.show else None,
        tracer=tracer,
        text_trace=args.text_trace,
        trace_items=STACK_TRACE_ITEMS,
    )
    try:
        rt.load(program)
        rt.run()
    except (ParseError, LoadError) as e:
        print(f"[Error] {e}", file=sys.stderr)
        return 1
    except RobotRuntimeError as e:
        print(f"Runtime error (line {e.line}): {e.message}", file=sys.stderr)
        for frame in e.call_stack:
            print(f"  at {frame}", file=sys.stderr)
        return 1
    finally:
        sys.stdout.flush()
        if tracer:
            tracer.close()
        if args.dump_world:
            Path(args.dump_world).write_text(rt.world.snapshot().model_dump_json(indent=2), encoding="utf-8")
    return 0


def show_ast(args) -> int:
    program = _find_program(args.name)
    if not program:
        print(f"Error: Could not find program file for '{args.name}'", file=sys.stderr)
        return 1
    try:
        print(parse_program(program).pretty())
    except ParseError as e:
        print(f"[Error] {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Interpreter for the robot simulation language")
    parser.add_argument("--log-level", default="WARNING", help="loguru level for diagnostics on stderr")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run a robot program (entry point: main)")
    run_parser.add_argument("name", help="Name or path of the program file")
    run_parser.add_argument("--trace", metavar="FILE", help="Write the function call trace to FILE")
    run_parser.add_argument("--otel", action="store_true", help="Export one OpenTelemetry span per call")
    run_parser.add_argument("--text-trace", action="store_true", help="Print a line for every robot operation")
    run_parser.add_argument("--show", action="store_true", help="Log display events (position, obstacles, trail)")
    run_parser.add_argument("--dump-world", metavar="JSON", help="Write the final world state as JSON")

    ast_parser = subparsers.add_parser("ast", help="Print the parse tree of a program")
    ast_parser.add_argument("name", help="Name or path of the program file")

    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    if args.command == "run":
        sys.exit(run_program(args))
    elif args.command == "ast":
        sys.exit(show_ast(args))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
