from __future__ import annotations

import importlib
from types import ModuleType
from typing import Any

from .. import logs

log = logs.get(__name__)


def import_module(modname: str, pkgname: str | None = None) -> ModuleType:
    """Import a module, optionally relative to *pkgname*."""
    log.debug('loading: %s', '.'.join(filter(None, [pkgname, modname])))
    if pkgname:
        return importlib.import_module(f'.{modname}', pkgname)
    return importlib.import_module(modname)


def import_object(name: str) -> Any:
    """Import an object by its dotted `module.qualname` path.

    The longest importable module prefix is used, the rest of the path is
    looked up as attributes, so nested classes resolve as well.
    """
    parts = name.split('.')
    if not all(parts):
        raise ValueError(f'invalid object path: {name!r}')

    for index in range(len(parts) - 1, 0, -1):
        modname = '.'.join(parts[:index])
        try:
            obj: Any = import_module(modname)
        except ModuleNotFoundError as exc:
            # only a missing prefix is fine, a missing dependency is not
            if exc.name and not f'{modname}.'.startswith(f'{exc.name}.'):
                raise
            continue
        for attr in parts[index:]:
            obj = getattr(obj, attr)
        return obj

    raise ImportError(f'no module found for {name!r}')


def import_class(name: str) -> type:
    """Import a class by its dotted path."""
    obj = import_object(name)
    if not isinstance(obj, type):
        raise TypeError(f'{name} is not a class')
    return obj
