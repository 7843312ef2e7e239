from typing import List, Optional


class RobotLangError(Exception):
    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.call_stack: List[str] = []

    def __str__(self) -> str:
        if self.line is None or self.line < 0:
            return self.message
        return f"{self.message} (line {self.line})"

class ParseError(RobotLangError):
    pass

class LoadError(RobotLangError):
    """Raised while building the function table (duplicate names, bad literals)."""
    pass

class RobotRuntimeError(RobotLangError):
    pass

class UndefinedError(RobotRuntimeError):
    """Unknown variable or function name."""
    pass

class ArityError(RobotRuntimeError):
    """Wrong argument count or a non-variable passed by reference."""
    pass

class TypeMismatchError(RobotRuntimeError):
    pass

class DivisionByZeroError(RobotRuntimeError):
    pass

class SimulationError(RobotRuntimeError):
    """Robot/obstacle domain violation."""
    pass

class InputError(RobotRuntimeError):
    pass
