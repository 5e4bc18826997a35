"""
Lino option placement (anchors and grouping).

A command line has three anchor points where command-level options may render:

    command [AFTER_COMMAND] subcommands [AFTER_SUBCOMMANDS] arguments [AFTER_ARGUMENTS]

Each Option/Flag carries exactly one resolved placement. Resolution follows the
usual precedence: a per-item placement wins over the builder-level default, which
wins over AFTER_COMMAND.

Subcommand options are not grouped here; they always render right after their
subcommand name.
"""
from enum import StrEnum

from .utils import prefer


class Placement(StrEnum):
    """
    anchor an option renders at.

    members compare equal to their string values, so builders accept either
    Placement.AFTER_ARGUMENTS or "after_arguments".
    """
    AFTER_COMMAND = "after_command"
    AFTER_SUBCOMMANDS = "after_subcommands"
    AFTER_ARGUMENTS = "after_arguments"


def resolve(*candidates):
    """
    Resolve the effective placement from ordered candidates (most specific first).

    None/Unset candidates are skipped; when none is provided, AFTER_COMMAND is used.
    String values are coerced through Placement and raise ValueError when they
    name no anchor.
    """
    return Placement(prefer(*candidates, default=Placement.AFTER_COMMAND))


def group(options, /):
    """
    Group options by their resolved placement.

    Returns a dict with every anchor as a key (in rendering order) mapped to a
    tuple of the options placed there, preserving insertion order.
    """
    groups = {placement: [] for placement in Placement}
    for option in options:
        groups[Placement(option.placement)].append(option)
    return {placement: tuple(members) for placement, members in groups.items()}


__all__ = (
    "Placement",
    "resolve",
    "group",
)
