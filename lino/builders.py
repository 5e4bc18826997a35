"""
Lino builders: immutable, chainable accumulators for command lines.

What this module provides
- CommandLineBuilder: accumulates a command, its subcommands, options, flags,
  arguments, environment variables, option formatting defaults, executor, and
  working directory, then produces a CommandLine through build().
- SubcommandBuilder: the nested builder handed to with_subcommand(...) callbacks;
  it carries only options/flags and their formatting defaults.
- builder_for_command(command): the public entry point.

Core ideas
- Every with_* operation returns a new builder through copy.replace(); the
  receiver is never mutated, so builders can be shared and branched freely.
- Absent input (None, "", empty collections) is absorbed as a no-op, so optional
  values can be chained without guards.
- Formatting precedence is resolved once, at build() time:
    per-item separator/quoting/placement > builder default > " " / None / AFTER_COMMAND
- Subcommands are built with the enclosing command's defaults as their fallback
  scope, unless they set their own.
- Appliables (objects exposing apply(builder) -> builder) package reusable
  transformations without the builder knowing their shape.

Quick start
    from lino import builder_for_command

    command_line = (
        builder_for_command("git")
        .with_subcommand("commit", lambda sub: sub.with_option("--message", "fix: typo", quoting='"'))
        .with_flag("--no-pager")
        .build()
    )
    command_line.string()  # 'git --no-pager commit --message "fix: typo"'
    command_line.array()   # ['git', '--no-pager', 'commit', '--message', 'fix: typo']
"""
import copy
import functools
import operator
import re
from collections import namedtuple
from collections.abc import Mapping

from . import config
from . import placement as placements
from .model import *
from .placement import Placement
from .utils import *


class _OptionDraft(namedtuple("OptionDraft", ("option", "value", "separator", "quoting", "placement"))):
    """
    An option as declared on a builder, before defaults are applied.
    """
    __slots__ = ()

    def resolve(self, separator, quoting, placement, /):
        return Option(
            self.option,
            self.value,
            separator=prefer(self.separator, separator, default=" "),
            quoting=prefer(self.quoting, quoting),
            placement=placements.resolve(self.placement, placement),
        )


class _FlagDraft(namedtuple("FlagDraft", ("flag", "placement"))):
    """
    A flag as declared on a builder, before defaults are applied.
    """
    __slots__ = ()

    def resolve(self, separator, quoting, placement, /):
        return Flag(self.flag, placement=placements.resolve(self.placement, placement))


def _placement(placement, /):
    # None passes through so that resolution can fall back to the defaults
    return None if placement is None else Placement(placement)


class BuilderType(type):
    """
    Metaclass for immutable builders.

    Responsibilities
    - Expose every name in __introspectable__ as a read-only property over "_{name}".
    - Generate __replace__ so copy.replace(builder, **changes) returns a new builder
      constructed from the current state with the given fields overridden.
    - Provide stable __repr__/__rich_repr__ for diagnostics.
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

        @rename("__replace__")
        def __replace__(self, **changes):
            fields = type(self).__introspectable__
            if unknown := changes.keys() - set(fields):
                raise TypeError(f"{type(self).__typename__} got unexpected fields: {", ".join(sorted(unknown))}")
            state = {name: getattr(self, "_" + name) for name in fields} | changes
            # the leading field is the positional-only subject (command or subcommand)
            return type(self)(state.pop(fields[0]), **state)
        self.__replace__ = __replace__

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

        return self


class Builder(metaclass=BuilderType):
    """
    Option-bearing behavior shared by command line and subcommand builders.

    Subclasses declare _options, _option_separator, _option_quoting, and
    _option_placement in their state.
    """

    def with_option(self, option, value, separator=None, quoting=None, placement=None):
        """
        Append an option. No-op when the option name or the value is None or empty.

        separator/quoting/placement override the builder defaults for this option only.
        """
        if missing(option) or missing(value):
            return self
        draft = _OptionDraft(option, value, separator, quoting, _placement(placement))
        return copy.replace(self, options=(*self._options, draft))

    def with_options(self, options):
        """
        Append several options.

        Accepts a mapping of option → value, or an iterable whose entries are
        (option, value) pairs or mappings with "option" and "value" keys (and
        optionally "separator", "quoting", "placement").
        """
        if missing(options):
            return self
        if isinstance(options, Mapping):
            options = options.items()

        builder = self
        for entry in options:
            match entry:
                case Mapping():
                    builder = builder.with_option(
                        entry.get("option"),
                        entry.get("value"),
                        separator=entry.get("separator"),
                        quoting=entry.get("quoting"),
                        placement=entry.get("placement"),
                    )
                case (option, value):
                    builder = builder.with_option(option, value)
                case _:
                    raise TypeError(f"{type(self).__typename__} options must be pairs or mappings")
        return builder

    def with_repeated_option(self, option, values, separator=None, quoting=None, placement=None):
        """
        Append the same option once per value, skipping None/empty values.
        """
        if missing(values):
            return self
        return functools.reduce(
            lambda builder, value: builder.with_option(
                option, value, separator=separator, quoting=quoting, placement=placement
            ),
            values,
            self,
        )

    def with_flag(self, flag, placement=None):
        """
        Append a flag. No-op when the flag is None or empty.
        """
        if missing(flag):
            return self
        return copy.replace(self, options=(*self._options, _FlagDraft(flag, _placement(placement))))

    def with_flags(self, flags):
        if missing(flags):
            return self
        return functools.reduce(lambda builder, flag: builder.with_flag(flag), flags, self)

    def with_option_separator(self, separator):
        """
        Default separator between option names and values (hard-coded default: " ").
        """
        if missing(separator):
            return self
        return copy.replace(self, option_separator=separator)

    def with_option_quoting(self, quoting):
        """
        Default quoting character wrapped around option values in string form.
        """
        if missing(quoting):
            return self
        return copy.replace(self, option_quoting=quoting)

    def with_option_placement(self, placement):
        """
        Default anchor for options and flags; accepts a Placement or its value.
        """
        if missing(placement):
            return self
        return copy.replace(self, option_placement=Placement(placement))

    def with_options_after_command(self):
        return self.with_option_placement(Placement.AFTER_COMMAND)

    def with_options_after_subcommands(self):
        return self.with_option_placement(Placement.AFTER_SUBCOMMANDS)

    def with_options_after_arguments(self):
        return self.with_option_placement(Placement.AFTER_ARGUMENTS)

    def with_appliable(self, appliable):
        """
        Let an external object transform this builder through appliable.apply(builder).
        """
        if appliable is None:
            return self
        return appliable.apply(self)

    def with_appliables(self, appliables):
        if missing(appliables):
            return self
        return functools.reduce(lambda builder, appliable: builder.with_appliable(appliable), appliables, self)

    def _build_options(self, separator=None, quoting=None, placement=None):
        # builder defaults shadow the enclosing scope's; per-item values shadow both
        separator = prefer(self._option_separator, separator)
        quoting = prefer(self._option_quoting, quoting)
        placement = prefer(self._option_placement, placement)
        return tuple(draft.resolve(separator, quoting, placement) for draft in self._options)


class SubcommandBuilder(Builder):
    """
    Builder for one subcommand and its own options.

    Instances are created by CommandLineBuilder.with_subcommand(...) and passed to
    the optional configuration callback. Options declared here always render right
    after the subcommand name, whatever their placement.
    """

    __introspectable__ = (
        "subcommand",
        "options",
        "option_separator",
        "option_quoting",
        "option_placement",
    )

    def __new__(
            cls,
            subcommand,
            /,
            *,
            options=(),
            option_separator=None,
            option_quoting=None,
            option_placement=None
    ):
        self = super().__new__(cls)
        self._subcommand = subcommand
        self._options = freeze(options)
        self._option_separator = option_separator
        self._option_quoting = option_quoting
        self._option_placement = _placement(option_placement)
        return self

    @classmethod
    def for_subcommand(cls, subcommand, /):
        return cls(subcommand)

    def build(self, separator=None, quoting=None, placement=None):
        """
        Build the Subcommand, falling back to the given (enclosing) defaults for
        anything neither the options nor this builder specify.
        """
        return Subcommand(self._subcommand, options=self._build_options(separator, quoting, placement))


class CommandLineBuilder(Builder):
    """
    Immutable builder for a CommandLine.

    Construct through builder_for_command(command) or CommandLineBuilder.for_command(command).
    Pass configuration=Configuration(...) to pick the executor without touching the
    process-wide default.
    """

    __introspectable__ = (
        "command",
        "subcommands",
        "options",
        "arguments",
        "environment_variables",
        "option_separator",
        "option_quoting",
        "option_placement",
        "executor",
        "working_directory",
    )

    def __new__(
            cls,
            command,
            /,
            *,
            configuration=Unset,
            subcommands=(),
            options=(),
            arguments=(),
            environment_variables=(),
            option_separator=None,
            option_quoting=None,
            option_placement=None,
            executor=Unset,
            working_directory=None
    ):
        self = super().__new__(cls)
        self._command = command
        self._subcommands = freeze(subcommands)
        self._options = freeze(options)
        self._arguments = freeze(arguments)
        self._environment_variables = freeze(environment_variables)
        self._option_separator = option_separator
        self._option_quoting = option_quoting
        self._option_placement = _placement(option_placement)
        self._executor = prefer(executor) or (configuration or config.configuration()).executor
        self._working_directory = working_directory
        return self

    @classmethod
    def for_command(cls, command, /, configuration=Unset):
        return cls(command, configuration=configuration)

    def with_argument(self, argument):
        """
        Append a positional argument. No-op when it is None, empty, or renders empty.

        Any object is accepted; it is stringified when the command line renders.
        """
        if missing(argument) or missing(str(argument)):
            return self
        return copy.replace(self, arguments=(*self._arguments, Argument(argument)))

    def with_arguments(self, arguments):
        if missing(arguments):
            return self
        return functools.reduce(lambda builder, argument: builder.with_argument(argument), arguments, self)

    def with_subcommand(self, subcommand, configure=None):
        """
        Append a subcommand.

        configure, when given, receives a fresh SubcommandBuilder and must return
        the (transformed) builder to use:

            builder.with_subcommand("run", lambda sub: sub.with_flag("--rm"))
        """
        if missing(subcommand):
            return self
        builder = SubcommandBuilder.for_subcommand(subcommand)
        if configure is not None:
            builder = configure(builder)
        return copy.replace(self, subcommands=(*self._subcommands, builder))

    def with_subcommands(self, subcommands, configure=None):
        """
        Append several subcommands in order.

        configure is applied to the last subcommand only; earlier ones are added bare.
        """
        if isinstance(subcommands, str):
            subcommands = (subcommands,)
        elif subcommands is not None:
            subcommands = tuple(subcommands)
        if missing(subcommands):
            return self
        *leading, last = subcommands
        builder = functools.reduce(lambda builder, subcommand: builder.with_subcommand(subcommand), leading, self)
        return builder.with_subcommand(last, configure)

    def with_environment_variable(self, name, value, quoting=None):
        """
        Append an environment variable. No-op when the name or value is None or empty.
        """
        if missing(name) or missing(value):
            return self
        variable = EnvironmentVariable(name, value, quoting=quoting)
        return copy.replace(self, environment_variables=(*self._environment_variables, variable))

    def with_environment_variables(self, environment_variables):
        """
        Append several environment variables.

        Accepts a mapping of name → value, or an iterable whose entries are
        (name, value) pairs or mappings with "name" and "value" keys.
        """
        if missing(environment_variables):
            return self
        if isinstance(environment_variables, Mapping):
            environment_variables = environment_variables.items()

        builder = self
        for entry in environment_variables:
            match entry:
                case Mapping():
                    builder = builder.with_environment_variable(
                        entry.get("name"), entry.get("value"), quoting=entry.get("quoting")
                    )
                case (name, value):
                    builder = builder.with_environment_variable(name, value)
                case _:
                    raise TypeError(f"{type(self).__typename__} environment variables must be pairs or mappings")
        return builder

    def with_executor(self, executor):
        if executor is None:
            return self
        return copy.replace(self, executor=executor)

    def with_working_directory(self, working_directory):
        if missing(working_directory):
            return self
        return copy.replace(self, working_directory=working_directory)

    def build(self):
        """
        Resolve the accumulated state into an immutable CommandLine.

        Pure: building twice yields equal command lines.
        """
        separator, quoting, placement = self._option_separator, self._option_quoting, self._option_placement
        return CommandLine(
            self._command,
            subcommands=(subcommand.build(separator, quoting, placement) for subcommand in self._subcommands),
            options=self._build_options(),
            arguments=self._arguments,
            environment_variables=self._environment_variables,
            executor=self._executor,
            working_directory=self._working_directory,
        )


def builder_for_command(command, /, configuration=Unset):
    """
    Create a CommandLineBuilder for the given command.

    configuration: optional Configuration providing the default executor; when
    omitted, the process-wide configuration is used.
    """
    return CommandLineBuilder.for_command(command, configuration=configuration)


__all__ = (
    "Builder",
    "SubcommandBuilder",
    "CommandLineBuilder",
    "builder_for_command",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del BuilderType
