import datetime
import decimal
import pathlib
import uuid

import pytest

from beanbind import AdapterRegistry

from .models import Person, Version


@pytest.fixture
def adapters():
    return AdapterRegistry()


@pytest.mark.parametrize(
    'value, text',
    [
        (datetime.datetime(2024, 5, 1, 12, 30), '2024-05-01T12:30:00'),
        (datetime.date(2024, 5, 1), '2024-05-01'),
        (datetime.time(12, 30, 15), '12:30:15'),
        (uuid.UUID(int=1), '00000000-0000-0000-0000-000000000001'),
        (decimal.Decimal('1.10'), '1.10'),
        (pathlib.PurePosixPath('/tmp/x'), '/tmp/x'),
    ],
)
def test_default_adapters(adapters, value, text):
    adapter = adapters.adapter_for(type(value))
    assert adapter.encode(value) == text
    assert adapter.decode(text) == value
    assert type(adapter.decode(text)) is type(value)


def test_no_adapter(adapters):
    assert adapters.adapter_for(Person) is None
    assert adapters.adapter_for(list[int]) is None


def test_no_defaults():
    assert AdapterRegistry(defaults=False).adapter_for(uuid.UUID) is None


def test_class_protocol(adapters):
    adapter = adapters.adapter_for(Version)
    assert adapter.encode(Version(1, 2)) == '1.2'
    assert adapter.decode('3.4') == Version(3, 4)


def test_register_invalidates_cache(adapters):
    assert adapters.adapter_for(Person) is None

    adapters.register(Person, decode=lambda text: Person(), encode=lambda person: 'person')

    adapter = adapters.adapter_for(Person)
    assert adapter is not None
    assert adapter.encode(Person()) == 'person'


def test_registered_adapter_beats_class_protocol(adapters):
    adapters.register(
        Version, decode=lambda text: Version(int(text)), encode=lambda v: str(v.major)
    )
    adapter = adapters.adapter_for(Version)
    assert adapter.encode(Version(7, 1)) == '7'


def test_adapter_inherited_by_subclass(adapters):
    class Base:
        def __init__(self, text):
            self.text = text

        def __str__(self):
            return self.text

    class Derived(Base):
        pass

    adapters.register(Base)
    adapter = adapters.adapter_for(Derived)

    value = adapter.decode('abc')
    assert type(value) is Derived
    assert adapter.encode(value) == 'abc'


def test_adapter_cached(adapters):
    assert adapters.adapter_for(uuid.UUID) is adapters.adapter_for(uuid.UUID)
