r"""
Lino value model: immutable command-line components.

Overview
- Argument: one positional value, rendered through str() at render time.
- Flag: a bare switch token (e.g. -v), placed at one anchor.
- Option: a named value with a separator, optional quoting, and a placement.
- EnvironmentVariable: NAME=value pair; always quoted in string form, raw otherwise.
- Subcommand: a name followed by its own options (never regrouped by placement).
- CommandLine: the root aggregate; renders to argv (array) or a display string
  and delegates execution to its executor.

Rendering contract
- array() returns a list of tokens and never quotes anything.
- string() returns a single string and always applies quoting where the type has it.
- Quoting is literal character wrapping with backslash escaping of the quoting
  character; it is not POSIX shell quoting and must not be trusted with untrusted
  input. Executors always use array().

Equality
- Values compare equal when they have the same class and the same constructor
  fields (the names in __introspectable__), compared together with their types
  so that Argument(0) and Argument(False) differ. Hashes follow the same fields.

Quick example:
    >>> from lino.model import CommandLine, Option, Flag, Argument
    >>> line = CommandLine("ls", options=[Flag("-l"), Option("--color", "auto", separator="=")],
    ...                    arguments=[Argument("/tmp")])
    >>> line.array()
    ['ls', '-l', '--color=auto', '/tmp']
    >>> line.string()
    'ls -l --color=auto /tmp'
"""
import functools
import itertools
import operator
import re

from . import placement as placements
from .config import configuration
from .placement import Placement
from .utils import *


def quote(value, quoting, /):
    """
    Wrap str(value) in the quoting character, escaping that character inside it.

    No quoting character (None or "") returns str(value) unchanged.

    Examples
    - quote("a b", '"')     -> '"a b"'
    - quote('say "hi"', '"') -> '"say \\"hi\\""'
    - quote("a b", None)    -> 'a b'
    """
    if not quoting:
        return str(value)
    return quoting + str(value).replace(quoting, "\\" + quoting) + quoting


class ValueType(type):
    """
    Metaclass for immutable command-line values.

    Responsibilities
    - Expose every name in __introspectable__ as a read-only property over "_{name}".
    - Derive __eq__/__hash__ from the class and the introspectable fields.
    - Provide stable __repr__/__rich_repr__ for diagnostics and __str__ as string().
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__state__")
        def __state__(self):
            # typed so that 0 and False stay distinct
            return tuple(
                (type(value), value)
                for value in (getattr(self, "_" + name) for name in type(self).__introspectable__)
            )
        self.__state__ = __state__

        @rename("__eq__")
        def __eq__(self, other):
            if type(self) is not type(other):
                return NotImplemented
            return self.__state__() == other.__state__()
        self.__eq__ = __eq__

        @rename("__hash__")
        def __hash__(self):
            return hash((type(self), self.__state__()))
        self.__hash__ = __hash__

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__str__")
        def __str__(self):
            return self.string()
        self.__str__ = __str__

        return self


class Argument(metaclass=ValueType):
    """
    Positional argument wrapping a single value.

    The value is stored as given (numbers, paths, booleans...) and stringified
    only when rendered.
    """

    __introspectable__ = ("argument",)

    def __new__(cls, argument, /):
        self = super().__new__(cls)
        self._argument = argument
        return self

    def string(self):
        return str(self._argument)

    def array(self):
        return [self.string()]


class Flag(metaclass=ValueType):
    """
    Presence-only switch such as -v or --force.
    """

    __introspectable__ = ("flag", "placement")

    def __new__(cls, flag, /, placement=Placement.AFTER_COMMAND):
        self = super().__new__(cls)
        self._flag = flag
        self._placement = placements.resolve(placement)
        return self

    def string(self):
        return str(self._flag)

    def array(self):
        return [self.string()]


class Option(metaclass=ValueType):
    """
    Named, value-bearing option.

    Fields
    - option: the switch token, e.g. "--output".
    - value: the payload; stringified when rendered.
    - separator: joins option and value. A single space yields two argv tokens;
      anything else yields one "option<separator>value" token. Defaults to " ".
    - quoting: optional character wrapped around the value in string form only.
    - placement: anchor the option renders at. Defaults to AFTER_COMMAND.
    """

    __introspectable__ = ("option", "value", "separator", "quoting", "placement")

    def __new__(cls, option, value, /, separator=" ", quoting=None, placement=Placement.AFTER_COMMAND):
        self = super().__new__(cls)
        self._option = option
        self._value = value
        self._separator = prefer(separator, default=" ")
        self._quoting = quoting
        self._placement = placements.resolve(placement)
        return self

    def string(self):
        return f"{self._option}{self._separator}{quote(self._value, self._quoting)}"

    def array(self):
        if self._separator == " ":
            return [str(self._option), str(self._value)]
        return [f"{self._option}{self._separator}{self._value}"]


class EnvironmentVariable(metaclass=ValueType):
    """
    Environment variable assignment.

    string() always quotes (NAME="value"); array() returns the raw [name, value]
    pair that executors turn into the child's environment.
    """

    __introspectable__ = ("name", "value", "quoting")

    def __new__(cls, name, value, /, quoting='"'):
        self = super().__new__(cls)
        self._name = name
        self._value = value
        self._quoting = prefer(quoting, default='"')
        return self

    def string(self):
        return f"{self._name}={quote(self._value, self._quoting)}"

    def array(self):
        return [str(self._name), str(self._value)]


class Subcommand(metaclass=ValueType):
    """
    Subcommand name followed by its own options, in insertion order.
    """

    __introspectable__ = ("subcommand", "options")

    def __new__(cls, subcommand, /, options=()):
        self = super().__new__(cls)
        self._subcommand = subcommand
        self._options = freeze(options)
        return self

    def string(self):
        return " ".join(filter(None, (str(self._subcommand), *(option.string() for option in self._options))))

    def array(self):
        return [str(self._subcommand), *itertools.chain.from_iterable(option.array() for option in self._options)]


class CommandLine(metaclass=ValueType):
    """
    Root aggregate describing one external command invocation.

    Anchors (rendering order)
        [environment variables] command [options after command] subcommands
        [options after subcommands] arguments [options after arguments]

    - array() skips the environment anchor; the environment reaches the executor
      through env() instead.
    - Anchors that render nothing are dropped, so there are never stray spaces.
    - When no executor is given, the process-wide configuration's executor is used.
    """

    __introspectable__ = (
        "command",
        "subcommands",
        "options",
        "arguments",
        "environment_variables",
        "executor",
        "working_directory",
    )

    def __new__(
            cls,
            command,
            /,
            subcommands=(),
            options=(),
            arguments=(),
            environment_variables=(),
            executor=Unset,
            working_directory=None
    ):
        self = super().__new__(cls)
        self._command = command
        self._subcommands = freeze(subcommands)
        self._options = freeze(options)
        self._arguments = freeze(arguments)
        self._environment_variables = freeze(environment_variables)
        self._executor = prefer(executor, configuration().executor)
        self._working_directory = working_directory
        return self

    def _anchors(self):
        groups = placements.group(self._options)
        return (
            self._environment_variables,
            (Argument(self._command),) if not missing(str(self._command)) else (),
            groups[Placement.AFTER_COMMAND],
            self._subcommands,
            groups[Placement.AFTER_SUBCOMMANDS],
            self._arguments,
            groups[Placement.AFTER_ARGUMENTS],
        )

    def array(self):
        # environment variables never become argv tokens
        _, *anchors = self._anchors()
        return [token for anchor in anchors for component in anchor for token in component.array()]

    def string(self):
        rendered = (" ".join(filter(None, map(operator.methodcaller("string"), anchor))) for anchor in self._anchors())
        return " ".join(filter(None, rendered))

    def env(self):
        """
        Raw (unquoted) name → value mapping of the environment variables, later
        declarations winning on duplicate names.
        """
        return dict(variable.array() for variable in self._environment_variables)

    def execute(self, **options):
        """
        Hand this command line to its executor.

        Recognized options are stdin, stdout, and stderr; see the executor in use.
        Raises ExecutionError when the process fails.
        """
        return self._executor.execute(self, **options)


__all__ = (
    "quote",
    "Argument",
    "Flag",
    "Option",
    "EnvironmentVariable",
    "Subcommand",
    "CommandLine",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ValueType
