"""
Lino executors: turning a CommandLine into a process (or a recorded call).

Contract
- execute(command_line, /, **options) -> None
- recognized options: stdin, stdout, stderr (all optional).
- raise ExecutionError(command_line.string(), exit_code) when the process exits
  with a non-zero status.

Variants
- ProcessExecutor: spawns the argv from command_line.array() with subprocess,
  layering command_line.env() over the inherited environment and running in
  command_line.working_directory. Blocks until the process exits.
- MockExecutor: records every call for assertions, optionally writes canned
  stdout/stderr content to the given streams, and can be told to fail. Never
  spawns anything.

Equality
- Executors carry no identity beyond their class: two executors of the same
  class compare equal and hash alike.
"""
import io
import os
import re
import subprocess
from abc import ABC, abstractmethod
from collections import namedtuple

from .faults import ExecutionError
from .utils import *

Call = namedtuple("Call", ("command_line", "options", "exit_code"))


class Executor(ABC):
    """
    Base for executors. Subclasses implement execute().
    """

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        cls.__typename__ = re.sub(r"(?<!^)(?=[A-Z])", r"-", cls.__name__).lower()

    @abstractmethod
    def execute(self, command_line, /, **options):
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, Executor):
            return NotImplemented
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __rich_repr__(self):
        yield from ()

    def __repr__(self):
        return f"{type(self).__typename__}({", ".join(f"{name}={object!r}" for name, object in self.__rich_repr__())})"


def _redirect(stream, /):
    """
    Decide how a caller-supplied output stream reaches the child.

    Returns (target, sink): target is handed to Popen, sink receives captured
    bytes after the process exits (None when the child writes directly).
    """
    if stream is None:
        return None, None
    try:
        stream.fileno()
    except (AttributeError, io.UnsupportedOperation):
        # in-memory streams (StringIO, BytesIO, capture buffers) have no descriptor
        return subprocess.PIPE, stream
    if callable(flush := getattr(stream, "flush", None)):
        flush()
    return stream, None


def _drain(sink, data, /):
    if sink is None or data is None:
        return
    if isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
        sink.write(data)
    else:
        sink.write(data.decode(getattr(sink, "encoding", None) or "utf-8", errors="replace"))


def _feed(stdin, /):
    """
    Normalize the stdin option into (target, payload) for Popen/communicate.
    """
    if stdin is None:
        return subprocess.DEVNULL, None
    if isinstance(stdin, str):
        return subprocess.PIPE, stdin.encode()
    if isinstance(stdin, (bytes, bytearray, memoryview)):
        return subprocess.PIPE, bytes(stdin)
    try:
        stdin.fileno()
    except (AttributeError, io.UnsupportedOperation):
        return _feed(stdin.read())
    return stdin, None


class ProcessExecutor(Executor):
    """
    Executor spawning a real child process through subprocess.Popen.

    Options
    - stdin: str/bytes payload written to the child and then closed, or a
      readable stream. Defaults to an empty stdin.
    - stdout / stderr: streams to receive output. Streams with a file descriptor
      are handed to the child directly; in-memory streams get the captured
      output after the process exits. Defaults to inheriting the parent's.

    Launch failures (missing executable, bad working directory) are raised as
    ExecutionError with exit_code None and the OSError as cause.
    """

    def execute(self, command_line, /, *, stdin=None, stdout=None, stderr=None):
        input, payload = _feed(stdin)
        output, output_sink = _redirect(stdout)
        errors, errors_sink = _redirect(stderr)

        try:
            process = subprocess.Popen(
                command_line.array(),
                stdin=input,
                stdout=output,
                stderr=errors,
                cwd=command_line.working_directory,
                env=os.environ | command_line.env(),
            )
        except OSError as error:
            raise ExecutionError(command_line.string(), None, error) from error

        with process:
            captured = process.communicate(payload)

        _drain(output_sink, captured[0])
        _drain(errors_sink, captured[1])

        if process.returncode != 0:
            raise ExecutionError(command_line.string(), process.returncode)


class MockExecutor(Executor):
    """
    Recording executor for tests.

    Fields
    - exit_code: exit code every call resolves to; non-zero raises ExecutionError
      after the call is recorded.
    - stdout / stderr: canned content written to the stdout/stderr streams passed
      to execute(), when configured.
    - calls: list of Call(command_line, options, exit_code), oldest first.

    Example
        >>> executor = MockExecutor(stdout="hello\\n")
        >>> buffer = io.StringIO()
        >>> executor.execute(command_line, stdout=buffer)
        >>> buffer.getvalue(), len(executor.calls)
        ('hello\\n', 1)
    """

    def __init__(self, exit_code=0, stdout=Unset, stderr=Unset):
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.calls = []

    def execute(self, command_line, /, **options):
        self.calls.append(Call(command_line, dict(options), self.exit_code))

        for name, contents in (("stdout", self.stdout), ("stderr", self.stderr)):
            if contents is not Unset and (stream := options.get(name)) is not None:
                stream.write(contents)

        if self.exit_code != 0:
            raise ExecutionError(command_line.string(), self.exit_code)

    def reset(self):
        """
        Forget recorded calls and go back to succeeding with exit code 0.
        """
        self.calls = []
        self.exit_code = 0

    def __rich_repr__(self):
        yield "exit_code", self.exit_code
        yield "stdout", self.stdout
        yield "stderr", self.stderr


__all__ = (
    "Call",
    "Executor",
    "ProcessExecutor",
    "MockExecutor",
)
