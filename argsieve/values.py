"""
Argsieve typed values: conversion results that carry failures as data.

What this module provides
- Value: the outcome of a typed lookup (positional-by-index or parameter-by-name).
  • bool(value) is the validity check, never the truthiness of the converted object:
    a valid Value holding 0 or "" is still True.
  • value.object holds the converted object (Unset when the value failed).
  • value.text holds the raw string the object came from (Unset when nothing was found).
  • value.fault holds the fault explaining the failure (None when valid).
- convert(text, type): the single text → object path used for both command line
  values and rendered defaults.
- render(default): the text form of a default value (str() of it).

Chaining
    threads = parser("threads", 4, type=int).get()
    ratio = parser(0).convert(float)
    if not ratio:
        ...  # ratio.fault explains why (missing positional or bad float)

Design notes
- Nothing in this module raises on bad data. The fault attached to a failed Value
  is only surfaced when the caller asks for it via unwrap().
"""
import logging

from rich.text import Text

from .faults import ConversionError, FaultCode, getdoc, trigger
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

# accepted spellings for bool conversion (case-insensitive)
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _to_bool(text):
    lowered = text.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError("invalid literal for bool(): %r" % text)


def _typename(type):
    return getattr(type, "__name__", None) or repr(type)


def render(default, /):
    """
    render a default value to its canonical text form.

    strings are kept as-is; everything else goes through str(), so a default is
    parsed back through the same conversion path as a command line value.
    """
    return default if isinstance(default, str) else str(default)


def convert(text, type=str, /):
    """
    convert raw text into an object of the requested type.

    rules
    - str  → the text itself.
    - bool → 1/0, true/false, yes/no, on/off (case-insensitive).
    - any other callable → type(text).

    raises
    - ValueError, TypeError or ArithmeticError from the converter (Value catches them).
    """
    if not callable(type):
        raise TypeError("convert() second argument must be callable")
    if type is str:
        return text
    if type is bool:
        return _to_bool(text)
    return type(text)


class Value:
    """
    Result of a typed lookup over the parser's collections.

    Construction
    - Value.resolve(key, text, type, **options): convert text (a conversion error gives a failed value).
    - Value.failed(key, fault, **options): an already failed value with the given fault.

    Accessors
    - bool(value): validity.
    - value.get(fallback=None): object or fallback.
    - value.unwrap(): object, or surface the fault (raises outside shell mode).
    - value.convert(type): re-convert the raw text to another type.
    - str(value): raw text ("" when absent), like reading a string stream.
    """
    __slots__ = ("_key", "_text", "_type", "_object", "_fault", "_options")

    def __init__(self, key, text=Unset, type=str, /, *, object=Unset, fault=None, options=None):
        self._key = key
        self._text = text
        self._type = type
        self._object = object
        self._fault = fault
        self._options = dict(options or {})

    @classmethod
    def failed(cls, key, fault, /, type=str, **options):
        return cls(key, Unset, type, fault=fault, options=options)

    @classmethod
    def resolve(cls, key, text, type=str, /, **options):
        """
        convert `text` into `type`; a conversion error becomes a failed Value.

        `text` must be a string here: absent sources are represented by
        Value.failed with a lookup fault instead.
        """
        try:
            object = convert(text, type)
        except (ValueError, TypeError, ArithmeticError) as error:
            logger.debug("conversion of %r for %r to %s failed: %s", text, key, _typename(type), error)
            fault = ConversionError(
                "cannot convert %r from %s to %s" % (text, _describe(key), _typename(type)),
                title="conversion failed",
                code=FaultCode.CONVERSION_FAILED,
                key=key,
                text=text,
                type=type,
                hint="pass a value that %s() accepts" % _typename(type),
                docs=getdoc(FaultCode.CONVERSION_FAILED),
            )
            return cls(key, text, type, fault=fault, options=options)
        return cls(key, text, type, object=object, options=options)

    @property
    def key(self):
        return self._key

    @property
    def text(self):
        return self._text

    @property
    def type(self):
        return self._type

    @property
    def object(self):
        return self._object

    @property
    def fault(self):
        return self._fault

    @property
    def valid(self):
        return self._fault is None

    def get(self, fallback=None, /):
        return self._object if self.valid else fallback

    def unwrap(self, **options):
        """
        return the converted object or surface the fault.

        outside shell mode the fault is raised (ConversionError, MissingParameterError,
        MissingPositionalError); in shell mode it is printed and the process exits.
        """
        if self.valid:
            return self._object
        trigger(self._fault, **{**self._options, **options})
        return None  # Reached only in deferred shell mode

    def convert(self, type, /):
        """
        re-convert the raw text to another type, returning a new Value.

        a value without text (lookup miss) stays failed with the same fault.
        """
        if self._text is Unset:
            return self.__class__.failed(self._key, self._fault, type, **self._options)
        return self.__class__.resolve(self._key, self._text, type, **self._options)

    def __bool__(self):
        return self.valid

    def __str__(self):
        return coalesce(self._text, "")

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return (self._key, self._text, self._type, self._object, self.valid) == (
            other._key, other._text, other._type, other._object, other.valid
        )

    def __hash__(self):
        return hash((self.__class__, self._key, self._text, self._type, self.valid))

    def __repr__(self):
        if self.valid:
            return "Value(%r, %r)" % (self._key, self._object)
        return "Value(%r, <%s>)" % (self._key, self._fault.__class__.__name__)

    def __rich_repr__(self):
        yield "key", self._key
        yield "text", self._text
        yield "object", self._object
        if self._fault is not None:
            yield "fault", Text(self._fault.__class__.__name__, style="red")


def _describe(key):
    if isinstance(key, int):
        return "positional #%d" % key
    if isinstance(key, str):
        return "parameter %r" % key
    return "parameters %s" % ", ".join(map(repr, key))


__all__ = (
    "Value",
    "convert",
    "render",
)
