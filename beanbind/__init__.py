"""Polymorphic mapping between object graphs and JSON-like documents."""

from __future__ import annotations

from . import errors, logs
from .adapters import AdapterRegistry, ScalarAdapter
from .binding import ConstructorBinding, constructor
from .catalog import CATALOG, Catalog, PropertyDescriptor, excluded, transient
from .codec import Codec
from .decoder import TAG_KEY, BeanDecoder
from .encoder import NOTHING, BeanEncoder, Expected, ignore
from .errors import BeanBindError
from .mapper import Mapper
from .resolver import TypeResolver, canonical_name

__all__ = [
    'CATALOG',
    'NOTHING',
    'TAG_KEY',
    'AdapterRegistry',
    'BeanBindError',
    'BeanDecoder',
    'BeanEncoder',
    'Catalog',
    'Codec',
    'ConstructorBinding',
    'Expected',
    'Mapper',
    'PropertyDescriptor',
    'ScalarAdapter',
    'TypeResolver',
    'canonical_name',
    'constructor',
    'errors',
    'excluded',
    'ignore',
    'logs',
    'transient',
]
