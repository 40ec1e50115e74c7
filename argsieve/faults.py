"""
Argsieve faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the parser
  can report. Codes are grouped by domain to keep logs/searches predictable.
- ParserException / ParserWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Failure as data
- Lookup misses and conversion failures are never raised by the accessors. They
  are attached to a failed Value (see argsieve.values) and only surface when the
  caller explicitly unwraps that value.
- Precondition faults (conflicting or unknown modes) are triggered immediately
  by the parser: they signal a programming error, not a data error.

Integration
- In non-shell mode, exceptions are raised and warnings go through warnings.warn;
  in shell mode, both are rendered via rich on stderr (errors then exit with 1).
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - preconditions (1110x)
      • MODE_CONFLICT, UNKNOWN_MODE
    - lookups (1111x)
      • MISSING_POSITIONAL, MISSING_PARAMETER
    - conversions (1112x)
      • CONVERSION_FAILED
    - warnings (121xx)
      • REPARSE, EMPTY_PARAMETER_NAME

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- precondition errors (11xxx) ---
    MODE_CONFLICT               = 11101
    UNKNOWN_MODE                = 11102

    # --- lookup errors (11xxx) ---
    MISSING_POSITIONAL          = 11111
    MISSING_PARAMETER           = 11112

    # --- conversion errors (11xxx) ---
    CONVERSION_FAILED           = 11121

    # --- warnings (12xxx) ---
    REPARSE                     = 12101
    EMPTY_PARAMETER_NAME        = 12102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class _Renderable:
    """
    shared rich rendering for errors and warnings.

    subclasses provide __palette__ (default styles) and __kind__ (style prefix).
    options read here: code, title, hint, fancy, colorful, ratio.
    """
    __palette__ = {}
    __kind__ = "error"

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, self.__palette__ | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "argsieve")), styler("prog-name"))

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else code, styler("code")),
            " | ",
            text(str(self.options.get("title", self.__kind__)).title(), styler(self.__kind__ + "-title")),
            " ]"
        )
        message = text(self.message, styler(self.__kind__ + "-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)


class ParserException(_Renderable, Exception):
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "error-title": "bold #FF4DA6",  # friendly pinky title

        # body
        "error-message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    }
    __kind__ = "error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        if self.options.get("deferred"):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ModeConflictError(ParserException, ValueError): ...
class UnknownModeError(ParserException, ValueError): ...
class MissingPositionalError(ParserException, IndexError): ...
class MissingParameterError(ParserException, LookupError): ...
class ConversionError(ParserException, ValueError): ...


class ParserWarning(_Renderable, Warning):
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #FFB400",  # amber fault code for warnings
        "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

        # body
        "warning-message": "#D6D6DE",  # slightly lighter gray body
        "hint-arrow": "#B8EFAF dim",  # softer green arrow
        "hint": "italic #B8EFAF",  # softer green hint text
    }
    __kind__ = "warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=5)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ReparseWarning(ParserWarning): ...
class EmptyParameterNameWarning(ParserWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings are emitted through the warnings module.

    typical options
    - shell, fancy, colorful, deferred, prog, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., key/index/text).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParserException",
    "ModeConflictError",
    "UnknownModeError",
    "MissingPositionalError",
    "MissingParameterError",
    "ConversionError",
    "ParserWarning",
    "ReparseWarning",
    "EmptyParameterNameWarning",
    "trigger",
    "getdoc",
)
