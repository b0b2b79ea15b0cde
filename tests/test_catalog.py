import threading
from typing import Any

import pytest

from beanbind import ConstructorBinding, PropertyDescriptor, errors

from .models import (
    Account,
    Ambiguous,
    Broken,
    Circle,
    Frozen,
    ImmutablePoint,
    Person,
    PhoneNumber,
    RoBean,
    Selector,
    SpecialNumber,
)


def names(props):
    return [prop.name for prop in props]


def test_properties_sorted_by_name(catalog):
    assert names(catalog.properties_of(Person)) == ['age', 'name', 'numbers']


def test_properties_declared_types(catalog):
    props = catalog.lookup(Person)
    assert props['age'].type is int
    assert props['numbers'].type == list[PhoneNumber]


def test_properties_inherited(catalog):
    assert names(catalog.properties_of(SpecialNumber)) == ['name', 'number']


def test_properties_cached(catalog):
    assert catalog.properties_of(Person) is catalog.properties_of(Person)
    assert catalog.lookup(Person) is catalog.lookup(Person)


def test_properties_cached_across_threads(catalog):
    results = []

    def lookup():
        results.append(catalog.properties_of(Account))

    threads = [threading.Thread(target=lookup) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert all(result is results[0] for result in results)


def test_read_only_property(catalog):
    prop = catalog.lookup(RoBean)['value']
    assert prop.type is int
    assert prop.read(RoBean(3)) == 3
    assert prop.write is None


def test_attribute_reads_missing_as_none(catalog):
    prop = catalog.lookup(Person)['name']
    assert prop.read(Person()) is None


def test_excluded_private_and_classvar(catalog):
    props = catalog.lookup(Account)
    assert sorted(props) == ['display', 'note', 'owner', 'shadow']
    assert props['note'].transient
    assert props['shadow'].transient
    assert props['shadow'].write is not None
    assert not props['owner'].transient
    assert props['display'].write is None


def test_dataclass_and_struct(catalog):
    assert names(catalog.properties_of(Circle)) == ['name', 'radius']
    assert names(catalog.properties_of(Frozen)) == ['count', 'key']


def test_uncatalogable(catalog):
    with pytest.raises(errors.UncatalogableType):
        catalog.properties_of(Broken)
    # the failure is cached as well
    with pytest.raises(errors.UncatalogableType):
        catalog.lookup(Broken)


def test_register_explicit_table(catalog):
    class Opaque:
        def __init__(self, token):
            self._token = token

    catalog.register(
        Opaque,
        [PropertyDescriptor('token', str, read=lambda obj: obj._token)],
        [ConstructorBinding(('token',))],
    )

    assert names(catalog.properties_of(Opaque)) == ['token']
    assert catalog.constructors_of(Opaque) == (ConstructorBinding(('token',)),)

    with pytest.raises(errors.RegistrationError):
        catalog.register(Opaque, [])


def test_register_duplicate_names(catalog):
    class Opaque:
        pass

    with pytest.raises(errors.RegistrationError):
        catalog.register(
            Opaque, [PropertyDescriptor.attribute('a'), PropertyDescriptor.attribute('a', Any)]
        )


def test_clear_keeps_registrations(catalog):
    class Opaque:
        def __init__(self, a):
            self.a = a

    class Plain:
        def __init__(self, b):
            self.b = b

    explicit = ConstructorBinding(('a',))
    catalog.register(Opaque, [PropertyDescriptor.attribute('a', int)], [explicit])
    catalog.register(Plain, [PropertyDescriptor.attribute('b', int)])
    before = catalog.properties_of(Person)
    before_plain = catalog.constructors_of(Plain)
    catalog.clear()

    assert catalog.properties_of(Person) is not before
    assert names(catalog.properties_of(Opaque)) == ['a']
    assert catalog.constructors_of(Opaque) == (explicit,)
    assert not catalog.constructors_of(Opaque)[0].keywords
    # discovered bindings are recomputed
    assert catalog.constructors_of(Plain) is not before_plain
    assert catalog.constructors_of(Plain) == before_plain


##
## constructor bindings
##


def test_explicit_constructors_ranked(catalog):
    bindings = catalog.constructors_of(ImmutablePoint)
    assert [b.names for b in bindings] == [('name', 'x', 'y'), ('x', 'y')]
    assert bindings[0].factory == 'named'
    assert bindings[1].factory is None


def test_explicit_classmethod_constructors(catalog):
    bindings = catalog.constructors_of(Selector)
    assert [(b.names, b.factory) for b in bindings] == [
        (('a', 'b', 'c'), 'abc'),
        (('a', 'b'), 'ab'),
    ]


def test_implicit_constructor(catalog):
    (binding,) = catalog.constructors_of(SpecialNumber)
    assert binding.names == ('name', 'number')
    assert binding.keywords


def test_implicit_constructor_optional(catalog):
    (binding,) = catalog.constructors_of(Circle)
    assert binding.names == ('name',)
    assert binding.optional == ('radius',)

    (binding,) = catalog.constructors_of(RoBean)
    assert binding.names == ()
    assert binding.optional == ('value',)


def test_no_constructor_for_default_init(catalog):
    assert catalog.constructors_of(Person) == ()


def test_ambiguous_constructors(catalog):
    with pytest.raises(errors.RegistrationError):
        catalog.constructors_of(Ambiguous)


def test_binding_build_consumes_values():
    values = {'a': 1, 'b': 2, 'c': 3, 'd': 4}
    binding = ConstructorBinding(('a', 'b', 'c'), factory='abc')

    assert binding.matches(values)
    obj = binding.build(Selector, values)

    assert obj.created_by == 'abc'
    assert values == {'d': 4}
    assert not binding.matches(values)
