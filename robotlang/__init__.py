from .runtime import Runtime
from .parser import parse, parse_program
from .config import SimulationConfig
from .simulation import World
from .errors import RobotLangError, ParseError, LoadError, RobotRuntimeError

__all__ = [
    "Runtime",
    "parse",
    "parse_program",
    "SimulationConfig",
    "World",
    "RobotLangError",
    "ParseError",
    "LoadError",
    "RobotRuntimeError",
]
