r"""
Argsieve parser: schema-optional classification of an argument vector.

What this module provides
- Mode: independently combinable interpretation switches.
  • PREFER_FLAG_FOR_UNREG_OPTION (default): an unregistered option followed by a
    value is a flag; the value stays a positional.
  • PREFER_PARAM_FOR_UNREG_OPTION: an unregistered option followed by a value is a
    parameter and consumes it. Mutually exclusive with the above.
  • NO_SPLIT_ON_EQUALSIGN: '--key=value' is not split; 'key=value' is the option name.
  • SINGLE_DASH_IS_MULTIFLAG: '-abc' is the three flags 'a', 'b' and 'c'.

- Parser: one linear pass over the tokens (one token of lookahead) that partitions
  them into
  • positionals: ordered free-standing values,
  • flags: multiset of presence-only names (dashes stripped),
  • params: multi-map of name → values (dashes stripped, insertion order kept).
  plus a read-only query surface with typed conversion (see argsieve.values).

Classification (per token, left to right)
1. positional: the token does not start with '-', or it is a signed decimal number
   ('-3.5', '-1e3'). number sniffing wins over the option prefix.
2. otherwise strip every leading dash to get the option name.
3. 'key=value' is recorded as a parameter (unless NO_SPLIT_ON_EQUALSIGN).
4. single-dash multi-flags are decomposed (SINGLE_DASH_IS_MULTIFLAG, name not
   registered); a registered trailing letter is kept as the option name.
5. last token, or next token is an option → flag.
6. registered name (or PREFER_PARAM_FOR_UNREG_OPTION) → parameter consuming the next
   token; otherwise flag.

Quick start
    from argsieve import Parser, Mode

    parser = Parser(["prog", "-v", "--threads", "4", "input.txt"], params=["threads"])
    parser["v"]                          # True
    parser[1]                            # "input.txt"
    parser("threads", type=int).get()    # 4
    parser("missing", 42, type=int).get()  # 42 (default rendered and parsed back)

Failure model
- Lookups never raise: an out-of-range positional is Unset, a typed lookup that
  misses or fails to convert returns a failed Value that carries its fault.
- Setting both unregistered-option preferences is a precondition fault, triggered
  when parsing starts.
"""
import enum
import logging
import re
import shlex
import sys
from collections import Counter, defaultdict, deque
from collections.abc import Iterable

from .faults import *
from .utils import Unset, coalesce, mirror, ordinal
from .values import Value, render

logger = logging.getLogger(__name__)


class Mode(enum.IntFlag):
    """
    interpretation switches for Parser.parse (combine with |).
    """
    PREFER_FLAG_FOR_UNREG_OPTION = 1 << 0
    PREFER_PARAM_FOR_UNREG_OPTION = 1 << 1
    NO_SPLIT_ON_EQUALSIGN = 1 << 2
    SINGLE_DASH_IS_MULTIFLAG = 1 << 3


_MODES = (
    Mode.PREFER_FLAG_FOR_UNREG_OPTION |
    Mode.PREFER_PARAM_FOR_UNREG_OPTION |
    Mode.NO_SPLIT_ON_EQUALSIGN |
    Mode.SINGLE_DASH_IS_MULTIFLAG
)

# locale-independent signed decimal float: no inf/nan, no separators, no spaces
_NUMBER = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)


def _is_number(token):
    return _NUMBER.fullmatch(token) is not None


def _is_option(token):
    return token.startswith("-") and not _is_number(token)


def _strip_dashes(name):
    # a token made only of dashes keeps them all ('-' and '--' stay as-is)
    return name.lstrip("-") or name


def _tokenize(prompt):
    """
    normalize the parse() input into a list of tokens.

    - Unset: the full sys.argv (program name included).
    - str: shell-style string, split with shlex.split.
    - Iterable[str]: used as-is (tokens are data, nothing is trimmed or dropped).
    """
    if prompt is Unset:
        return list(sys.argv)
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


class Parser:
    """
    Classifier and accessor over one argument vector.

    Lifecycle
    - register parameter names (constructor `params`, add_param, add_params),
    - parse once (constructor `tokens` or parse()),
    - query (flag/positional/value, or the [] and () shorthands).

    Parsing again appends to the same collections (a ReparseWarning is surfaced);
    call clear() first to start over with the same registered names.

    Runtime options
    - shell, fancy, colorful: how faults are surfaced (see argsieve.faults.trigger).
      They are forwarded to every Value produced by this parser as well.
    """

    positionals = mirror("positionals")
    flags = mirror("flags")
    params = mirror("params")
    registered = mirror("registered")

    def __init__(
            self,
            tokens=Unset,
            /,
            mode=Mode.PREFER_FLAG_FOR_UNREG_OPTION,
            *,
            params=(),
            shell=False,
            fancy=False,
            colorful=True,
    ):
        self._positionals = []
        self._flags = Counter()
        self._params = defaultdict(list)
        self._registered = set()
        self._parsed = False
        self._mode = Mode.PREFER_FLAG_FOR_UNREG_OPTION

        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

        if isinstance(params, str):
            params = (params,)
        self.add_params(*params)

        if tokens is not Unset:
            self.parse(tokens, mode)
        else:
            self._mode = self._validate(mode)

    @property
    def mode(self):
        return self._mode

    def add_param(self, name, /):
        """
        register a parameter name (leading dashes are stripped).

        a registered name always consumes the following non-option token as its value.
        """
        if not isinstance(name, str):
            raise TypeError("add_param() argument must be a string")
        self._registered.add(_strip_dashes(name))

    def add_params(self, *names):
        for name in names:
            self.add_param(name)

    def clear(self):
        """
        drop every parse result (positionals, flags, params); registered names are kept.
        """
        self._positionals.clear()
        self._flags.clear()
        self._params.clear()
        self._parsed = False

    def trigger(self, fault, /, **options):
        trigger(fault, **{**self._options(), **options})

    def _options(self):
        return {"shell": self.shell, "fancy": self.fancy, "colorful": self.colorful}

    def _validate(self, mode):
        if isinstance(mode, bool) or not isinstance(mode, int):
            raise TypeError("mode must be an integer or a Mode")

        if unknown := int(mode) & ~int(_MODES):
            self.trigger(UnknownModeError(
                "unknown mode bits %#x" % unknown,
                title="unknown mode",
                code=FaultCode.UNKNOWN_MODE,
                mode=int(mode),
                hint="combine only Mode members (for example: Mode.NO_SPLIT_ON_EQUALSIGN | Mode.SINGLE_DASH_IS_MULTIFLAG)",
                docs=getdoc(FaultCode.UNKNOWN_MODE),
            ))

        if mode & Mode.PREFER_FLAG_FOR_UNREG_OPTION and mode & Mode.PREFER_PARAM_FOR_UNREG_OPTION:
            self.trigger(ModeConflictError(
                "PREFER_FLAG_FOR_UNREG_OPTION and PREFER_PARAM_FOR_UNREG_OPTION cannot be combined",
                title="conflicting modes",
                code=FaultCode.MODE_CONFLICT,
                mode=int(mode),
                hint="keep a single preference for unregistered options",
                docs=getdoc(FaultCode.MODE_CONFLICT),
            ))

        return Mode(int(mode) & int(_MODES))

    def parse(self, tokens=Unset, /, mode=Unset):
        """
        classify `tokens` into positionals, flags and params.

        parameters
        - tokens: Unset (full sys.argv) | str (shlex-split) | Iterable[str]
        - mode: Mode | int; defaults to the mode given at construction.

        returns
        - the parser itself, for chaining.
        """
        mode = self._validate(coalesce(mode, self._mode))
        tokens = _tokenize(tokens)

        if self._parsed:
            self.trigger(ReparseWarning(
                "parser was already used; results of this parse are appended to the previous ones",
                title="parser reused",
                code=FaultCode.REPARSE,
                hint="call clear() before parsing a new argument vector",
                docs=getdoc(FaultCode.REPARSE),
            ))

        self._mode = mode
        self._parsed = True
        self._classify(deque(tokens), mode)
        return self

    def _classify(self, tokens, mode):
        position = 0
        while tokens:
            token = tokens.popleft()
            position += 1

            if not _is_option(token):
                logger.debug("%s token %r is a positional", ordinal(position), token)
                self._positionals.append(token)
                continue

            name = _strip_dashes(token)

            if not mode & Mode.NO_SPLIT_ON_EQUALSIGN and "=" in name:
                key, _, value = name.partition("=")
                if not key:
                    self.trigger(EmptyParameterNameWarning(
                        "parameter at %s position has an empty name" % ordinal(position),
                        title="empty parameter name",
                        code=FaultCode.EMPTY_PARAMETER_NAME,
                        token=token,
                        index=position,
                        hint="write the name before '=' (for example: --name=%s)" % value,
                        docs=getdoc(FaultCode.EMPTY_PARAMETER_NAME),
                    ))
                logger.debug("%s token %r is the parameter %r=%r", ordinal(position), token, key, value)
                self._params[key].append(value)
                continue

            if (
                mode & Mode.SINGLE_DASH_IS_MULTIFLAG and
                len(token) - len(name) == 1 and
                name not in self._registered
            ):
                # a registered trailing letter is an option that may still take a value
                trailing = name[-1] if name[-1] in self._registered else ""
                if trailing:
                    name = name[:-1]
                for char in name:
                    self._flags[char] += 1
                logger.debug("%s token %r is the multi-flag %r", ordinal(position), token, name)
                if not trailing:
                    continue
                name = trailing

            if not tokens or _is_option(tokens[0]):
                logger.debug("%s token %r is the flag %r (no value follows)", ordinal(position), token, name)
                self._flags[name] += 1
                continue

            if name in self._registered or mode & Mode.PREFER_PARAM_FOR_UNREG_OPTION:
                value = tokens.popleft()
                logger.debug("%s token %r is the parameter %r=%r", ordinal(position), token, name, value)
                self._params[name].append(value)
                position += 1
                continue

            logger.debug("%s token %r is the unregistered flag %r", ordinal(position), token, name)
            self._flags[name] += 1

    def flag(self, *names):
        """
        True when any of the names (dashes stripped) was seen as a flag.
        """
        for name in names:
            if not isinstance(name, str):
                raise TypeError("flag() arguments must be strings")
            if _strip_dashes(name) in self._flags:
                return True
        return False

    def positional(self, index, /):
        """
        return the positional at `index` (original order) or Unset when out of range.
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError("positional() argument must be an integer")
        if 0 <= index < len(self._positionals):
            return self._positionals[index]
        return Unset

    def _lookup(self, names):
        for name in names:
            if values := self._params.get(_strip_dashes(name)):
                return values[0]
        return Unset

    def value(self, key, default=Unset, /, *, type=str):
        """
        typed lookup of a positional or a parameter.

        parameters
        - key: int (positional index) | str (parameter name) | Iterable[str]
          (alternative names; the first present one in the given order wins).
        - default: used when the key is absent. It is rendered to text and converted
          through the same path as a command line value.
        - type: converter (str, int, float, bool, or any callable taking a string).

        returns
        - Value: valid, or failed with a MissingPositionalError, MissingParameterError
          or ConversionError attached as data.
        """
        options = self._options()

        if isinstance(key, int) and not isinstance(key, bool):
            text = self.positional(key)
            fault = MissingPositionalError(
                "no positional argument at index %d" % key,
                title="missing positional",
                code=FaultCode.MISSING_POSITIONAL,
                index=key,
                hint="pass at least %d positional argument(s)" % (key + 1),
                docs=getdoc(FaultCode.MISSING_POSITIONAL),
            )
        elif isinstance(key, str | Iterable):
            names = (key,) if isinstance(key, str) else tuple(key)
            for name in names:
                if not isinstance(name, str):
                    raise TypeError("value() names must be strings")
            if not isinstance(key, str):
                key = names
            text = self._lookup(names)
            fault = MissingParameterError(
                "parameter %s was not provided" % " / ".join(map(repr, names)),
                title="missing parameter",
                code=FaultCode.MISSING_PARAMETER,
                names=names,
                hint="pass it as --%s <value> or --%s=<value>" % (_strip_dashes(names[0]), _strip_dashes(names[0]))
                if names else "pass at least one parameter name",
                docs=getdoc(FaultCode.MISSING_PARAMETER),
            )
        else:
            raise TypeError("value() key must be an integer, a string or an iterable of strings")

        if text is Unset and default is not Unset:
            text = render(default)

        if text is Unset:
            return Value.failed(key, fault, type, **options)
        return Value.resolve(key, text, type, **options)

    def __getitem__(self, key):
        """
        parser[int] → positional (or Unset); parser[str] → flag test;
        parser[iterable of str] → any-flag test.
        """
        if isinstance(key, int) and not isinstance(key, bool):
            return self.positional(key)
        if isinstance(key, str):
            return self.flag(key)
        if isinstance(key, Iterable):
            return self.flag(*key)
        raise TypeError("parser indices must be integers, strings or iterables of strings")

    def __call__(self, key, default=Unset, /, *, type=str):
        return self.value(key, default, type=type)

    def __len__(self):
        return len(self._positionals)

    def __iter__(self):
        return iter(tuple(self._positionals))

    def __repr__(self):
        return "%s(positionals=%r, flags=%r, params=%r, mode=%r)" % (
            type(self).__name__,
            self._positionals,
            dict(self._flags),
            dict(self._params),
            self._mode,
        )

    def __rich_repr__(self):
        yield "positionals", self.positionals
        yield "flags", dict(self._flags)
        yield "params", self.params
        yield "registered", sorted(self._registered)
        yield "mode", self._mode


__all__ = (
    "Mode",
    "Parser",
)
