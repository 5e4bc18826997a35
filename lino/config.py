"""
Lino configuration.

Configuration is an immutable value holding the execution defaults that builders
pick up when they are created (today: the default executor). It is meant to be
passed explicitly:

    >>> from lino import Configuration, MockExecutor, builder_for_command
    >>> config = Configuration(executor=MockExecutor())
    >>> builder_for_command("ls", configuration=config).build().executor
    mock-executor(exit_code=0, stdout=Unset, stderr=Unset)

For convenience at the composition root there is a single process-wide default,
managed through configuration(), configure(**changes), and reset(). The slot is
not lock-protected; do not reconfigure it while other threads are building.
"""
import copy

from .executors import ProcessExecutor
from .utils import *


class Configuration:
    """
    Immutable execution defaults.

    Fields
    - executor: the executor handed to built command lines. Defaults to a
      ProcessExecutor.

    Use copy.replace(config, executor=...) to derive a modified configuration.
    """

    __introspectable__ = ("executor",)

    executor = mirror("executor")

    def __new__(cls, executor=Unset):
        self = super().__new__(cls)
        self._executor = prefer(executor) or ProcessExecutor()
        return self

    def __replace__(self, **changes):
        if unknown := changes.keys() - set(type(self).__introspectable__):
            raise TypeError(f"configuration got unexpected fields: {", ".join(sorted(unknown))}")
        return type(self)(**{"executor": self._executor} | changes)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._executor == other._executor

    def __hash__(self):
        return hash((type(self), self._executor))

    def __repr__(self):
        return f"configuration(executor={self._executor!r})"

    def __rich_repr__(self):
        yield "executor", self._executor


_configuration = Unset


def configuration():
    """
    Return the process-wide default configuration, creating it on first use.
    """
    global _configuration
    if _configuration is Unset:
        _configuration = Configuration()
    return _configuration


def configure(**changes):
    """
    Replace fields of the process-wide default configuration.

    Example
        configure(executor=MockExecutor())

    Returns the new default configuration.
    """
    global _configuration
    _configuration = copy.replace(configuration(), **changes)
    return _configuration


def reset():
    """
    Drop the process-wide default configuration; the next configuration() call
    recreates it with stock defaults.
    """
    global _configuration
    _configuration = Unset


__all__ = (
    "Configuration",
    "configuration",
    "configure",
    "reset",
)
