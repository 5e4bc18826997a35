"""
Lino utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the model, builders, and executors so that
  "not provided", "missing", and "read-only" mean the same thing everywhere.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- prefer(*candidates, default=None)
  • First candidate that is neither None nor Unset; the precedence primitive used
    for per-item > builder-level > hard-coded defaults.

- missing(value)
  • True for None, Unset, and empty sized values ("" / () / {}). Numbers and
    booleans are never missing.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- freeze(object) / mirror("attr")
  • Shallow freezing of containers (tuple / MappingProxyType / frozenset) and a
    read-only property factory over a private backing field.

Quick examples
    >>> prefer(None, "=", " ")
    '='
    >>> missing(""), missing(0)
    (True, False)
"""
import builtins
import functools
from collections.abc import Mapping, Set, Sized, Iterable
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def prefer(*candidates, default=None):
    """
    Return the first candidate that was actually provided.

    A candidate counts as provided when it is neither None nor Unset. This is the
    precedence rule for option formatting: the per-item value is passed first,
    then the builder-level default, then the hard-coded default.

    Examples
    - prefer(None, "=", " ")    -> "="
    - prefer(":", "=", " ")     -> ":"
    - prefer(None, Unset)       -> None
    """
    for candidate in candidates:
        if candidate is not None and candidate is not Unset:
            return candidate
    return default


def missing(object, /):
    """
    Whether a builder input should be treated as absent.

    None, Unset, and any sized value of length zero ("" / () / [] / {}) are
    missing. Everything else is present, including 0 and False.
    """
    if object is None or object is Unset:
        return True
    return isinstance(object, Sized) and len(object) == 0


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def freeze(object, /):
    """
    Shallow-freeze a container so it can be stored on an immutable value.

    Freezing rules
    - Mapping → MappingProxyType(dict(mapping))
    - Set → frozenset(setlike)
    - Other non-string iterables → tuple(iterable)
    - Anything else → returned as-is
    """
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    elif isinstance(object, Set):
        return frozenset(object)
    elif isinstance(object, Iterable) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" from the instance. Values stored by
    the model and builders are already frozen, so no copy is made on access.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return getattr(self, "_" + name)

    return property(getter)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "prefer",
    "missing",
    "rename",
    "freeze",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
