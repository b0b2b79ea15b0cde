"""Constructor bindings used to build (possibly immutable) beans."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, MutableMapping
from typing import Any, TypeVar

import msgspec

from . import errors, logs

log = logs.get(__name__)

F = TypeVar('F')

CONSTRUCTOR_ATTR = '__constructor_properties__'

_NAMED_KINDS = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)


class ConstructorBinding(msgspec.Struct, frozen=True):
    """A constructor candidate and the property names it consumes.

    `names` are required and passed positionally in order, or by keyword
    when `keywords` is set. `optional` names are only consumed when present
    and are always passed as keywords. `factory` names an
    alternate-constructor classmethod; `None` calls the class.
    """

    names: tuple[str, ...]
    factory: str | None = None
    optional: tuple[str, ...] = ()
    keywords: bool = False

    @property
    def arity(self) -> int:
        return len(self.names)

    def matches(self, values: MutableMapping[str, Any]) -> bool:
        return all(name in values for name in self.names)

    def build(self, cls: type, values: MutableMapping[str, Any]) -> Any:
        """Remove the consumed names from `values` and create the instance."""
        args = [values.pop(name) for name in self.names]
        kwargs = {name: values.pop(name) for name in self.optional if name in values}
        if self.keywords:
            kwargs.update(zip(self.names, args))
            args = []
        factory = cls if self.factory is None else getattr(cls, self.factory)
        return factory(*args, **kwargs)


def constructor(*names: str) -> Callable[[F], F]:
    """Mark `__init__` or an alternate-constructor classmethod as a binding.

    The decorated callable receives the values of the named properties as
    positional arguments, in the given order::

        class Point:
            @constructor('x', 'y')
            def __init__(self, x, y): ...

            @classmethod
            @constructor('name', 'x', 'y')
            def named(cls, name, x, y): ...
    """
    for name in names:
        if not isinstance(name, str) or not name:
            raise errors.RegistrationError(f'invalid constructor property name: {name!r}')
    if len(set(names)) != len(names):
        raise errors.RegistrationError(f'duplicate constructor property names: {names}')

    def decorator(func: F) -> F:
        target = getattr(func, '__func__', func)
        setattr(target, CONSTRUCTOR_ATTR, tuple(names))
        return func

    return decorator


def explicit_bindings(cls: type) -> list[ConstructorBinding]:
    """Collect the `@constructor` candidates of `cls` across its MRO."""
    seen: set[str] = set()
    bindings = []
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            func = getattr(attr, '__func__', attr)
            names = getattr(func, CONSTRUCTOR_ATTR, None)
            if names is None:
                continue
            if name == '__init__':
                bindings.append(ConstructorBinding(names))
            elif isinstance(attr, (classmethod, staticmethod)):
                bindings.append(ConstructorBinding(names, factory=name))
            else:
                raise errors.RegistrationError(
                    f'{cls.__qualname__}.{name}: @constructor requires __init__ or a classmethod'
                )
    return bindings


def implicit_binding(cls: type) -> ConstructorBinding | None:
    """Derive a binding from the signature of `cls`, if it takes named parameters."""
    if cls.__init__ is object.__init__ and '__signature__' not in vars(cls):
        return None
    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        return None

    required = []
    optional = []
    for param in sig.parameters.values():
        if param.kind == inspect.Parameter.POSITIONAL_ONLY:
            if param.default is param.empty:
                # cannot be bound by property name
                return None
            continue
        if param.kind not in _NAMED_KINDS:
            continue
        if param.default is param.empty:
            required.append(param.name)
        else:
            optional.append(param.name)

    if not required and not optional:
        return None
    return ConstructorBinding(tuple(required), optional=tuple(optional), keywords=True)


def rank(cls: type, bindings: Iterable[ConstructorBinding]) -> tuple[ConstructorBinding, ...]:
    """Order bindings by descending arity, rejecting equal-arity candidates."""
    ranked = sorted(bindings, key=lambda binding: binding.arity, reverse=True)
    for first, second in zip(ranked, ranked[1:]):
        if first.arity == second.arity:
            raise errors.RegistrationError(
                f'{cls.__qualname__}: ambiguous constructors {first.names} and {second.names}'
            )
    return tuple(ranked)


def bindings_of(cls: type) -> tuple[ConstructorBinding, ...]:
    """Compute the ranked constructor candidates of `cls`."""
    bindings = explicit_bindings(cls)
    if not bindings:
        implicit = implicit_binding(cls)
        if implicit is not None:
            bindings.append(implicit)
    ranked = rank(cls, bindings)
    log.debug('constructors of %s: %s', cls.__qualname__, [b.names for b in ranked])
    return ranked
