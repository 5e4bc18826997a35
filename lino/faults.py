"""
Lino faults and their rendering.

Scope
- ExecutionError: the single error type the core defines. Executors raise it when a
  spawned process exits with a non-zero status or cannot be launched at all.
- report(): print a fault on the shared stderr console using its rich rendering.

Builders and value objects never raise for absent input; they degrade to no-ops.
Only the executor boundary fails, and handling that failure is left to the caller.

Rendering
- Faults know how to render themselves through __rich__: a one-line header, the
  rendered command line as the message, and a single hint.
- Options (colorful, fancy) are carried on the fault and can be changed with
  copy.replace(fault, colorful=False).
- Host applications may override styles with a __styles__ mapping in __main__.
"""
import copy
from collections import defaultdict
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class ExecutionError(Exception):
    """
    failure while executing a command line.

    attributes
    - command_line: the rendered string form of the command line (for display only).
    - exit_code: the non-zero exit status, or None when the process never started.
    - cause: the underlying exception for launch failures, otherwise None.
    - options: read-only rendering options (colorful, fancy).
    """

    def __init__(self, command_line=None, exit_code=None, cause=None, /, **options):
        super().__init__("Failed while executing command line.")
        self.command_line = command_line
        self.exit_code = exit_code
        self.cause = cause
        self.options = MappingProxyType({"colorful": True, "fancy": False} | options)

    @property
    def message(self):
        return self.args[0]

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan exit code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray command line
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if self.options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.options["colorful"]:
                return Text(str(fragment))
            return Text(str(fragment), style)

        code = "launch" if self.exit_code is None else f"exit {self.exit_code}"
        if self.cause is not None:
            hint = f"the process could not be started: {self.cause}"
        else:
            hint = f"the process exited with status {self.exit_code}"

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", "lino"), styler("prog-name")),
            " — ",
            text(code, styler("code")),
            " | ",
            text("execution failed".title(), styler("error-title")),
            " ]"
        )
        message = text(self.command_line or self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint")))

        if self.options["fancy"]:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {
            "command_line": self.command_line,
            "exit_code": self.exit_code,
            "cause": self.cause,
        }
        for name in fields.keys() & overrides.keys():
            fields[name] = overrides.pop(name)
        return type(self)(*fields.values(), **{**self.options, **overrides})

    def __reduce__(self):
        return type(self), (self.command_line, self.exit_code, self.cause), {"options": dict(self.options)}

    def __setstate__(self, state):
        self.options = MappingProxyType(dict(state["options"]))


def report(fault, /, **options):
    """
    print a fault on the stderr console.

    options are merged into the fault via copy.replace before rendering, e.g.
    report(error, colorful=False, fancy=True).
    """
    if not hasattr(fault, "__rich__") or not hasattr(fault, "__replace__"):
        raise TypeError("report() argument must have __rich__ and __replace__ methods")
    console.print(copy.replace(fault, **options) if options else fault)


__all__ = (
    "ExecutionError",
    "report",
)
