"""
Configuration for postlang compilation sessions.

Author: xwest
"""

import os
from enum import Enum
from dataclasses import dataclass
from typing import Mapping, Optional


class RedefinitionPolicy(Enum):
    """What happens when a function name that already has a body is defined again"""
    REPLACE = "replace"     # REPL-style: the new body wins for later callers
    ERROR = "error"         # Reject with RedefinitionError


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def _parse_flag(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {value!r}")


@dataclass
class SessionConfig:
    """Configuration parameters for an interactive session"""
    
    # Terminal surface
    prompt: str = "post> "
    banner: str = "\n==== done ===="
    filename: str = "<stdin>"
    
    # Compilation
    redefinition: RedefinitionPolicy = RedefinitionPolicy.REPLACE
    optimization_level: int = 2     # Target machine codegen level, 0-3
    
    # Debugging
    dump_ast: bool = False
    dump_ir: bool = False
    
    def __post_init__(self):
        if not isinstance(self.redefinition, RedefinitionPolicy):
            try:
                self.redefinition = RedefinitionPolicy(self.redefinition)
            except ValueError:
                choices = ", ".join(p.value for p in RedefinitionPolicy)
                raise ValueError(
                    f"redefinition must be one of {choices}, got {self.redefinition!r}"
                ) from None
        
        if not 0 <= self.optimization_level <= 3:
            raise ValueError(
                f"optimization_level must be between 0 and 3, got {self.optimization_level}"
            )
    
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> 'SessionConfig':
        """
        Build a configuration from ``POSTLANG_*`` environment variables.
        
        Recognized variables:
            POSTLANG_REDEFINITION: "replace" or "error"
            POSTLANG_OPT_LEVEL: 0-3
            POSTLANG_DUMP_AST, POSTLANG_DUMP_IR: boolean flags
        
        Keyword arguments take precedence over the environment.
        
        Raises:
            ValueError: If a variable holds an invalid value
        """
        if environ is None:
            environ = os.environ
        
        settings = {}
        if "POSTLANG_REDEFINITION" in environ:
            settings["redefinition"] = environ["POSTLANG_REDEFINITION"].strip().lower()
        
        if "POSTLANG_OPT_LEVEL" in environ:
            raw = environ["POSTLANG_OPT_LEVEL"]
            try:
                settings["optimization_level"] = int(raw)
            except ValueError:
                raise ValueError(f"POSTLANG_OPT_LEVEL must be an integer, got {raw!r}") from None
        
        if "POSTLANG_DUMP_AST" in environ:
            settings["dump_ast"] = _parse_flag("POSTLANG_DUMP_AST", environ["POSTLANG_DUMP_AST"])
        if "POSTLANG_DUMP_IR" in environ:
            settings["dump_ir"] = _parse_flag("POSTLANG_DUMP_IR", environ["POSTLANG_DUMP_IR"])
        
        settings.update(overrides)
        return cls(**settings)
