import datetime
import enum
from concurrent.futures import ThreadPoolExecutor

import pytest

from beanbind import NOTHING, Mapper, errors

from .models import (
    SAMPLE,
    Account,
    Animal,
    Broken,
    Card,
    Cat,
    Circle,
    Dog,
    Drawing,
    Empty,
    Frozen,
    Grid,
    Holder,
    PhoneNumber,
    Release,
    SpecialNumber,
    SpecialNumber2,
    SpecialNumber3,
    Version,
    Zoo,
    tom,
)

UNTAGGED = (
    b'{"age":42,"name":"Tom Test","numbers":['
    b'{"name":"Mobile","number":"123"},'
    b'{"name":"Emergency","number":"911"}]}'
)


class Color(enum.Enum):
    RED = 'red'


def test_write_bean(mapper):
    assert mapper.encode(tom()) == SAMPLE


def test_write_canonical_tag(catalog):
    doc = Mapper(catalog=catalog).to_builtins(tom())
    assert doc['numbers'][1]['@class'] == 'tests.models.SpecialNumber'


def test_ignored_decorator(mapper):
    person = tom()
    person.numbers[1] = SpecialNumber2('Emergency', '911')
    assert mapper.encode(person) == UNTAGGED


def test_ignored_registration(mapper):
    person = tom()
    person.numbers[1] = SpecialNumber3('Emergency', '911')
    mapper.add_ignored(SpecialNumber3)
    assert mapper.encode(person) == UNTAGGED


def test_ignored_not_inherited(mapper):
    class Subclass(SpecialNumber2):
        pass

    doc = mapper.to_builtins([Subclass('a', 'b')], list[PhoneNumber])
    assert doc[0]['@class'].endswith('Subclass')


def test_omit_tag(mapper):
    mapper.omit_tag = True
    assert mapper.encode(tom()) == UNTAGGED


def test_expected_seed(mapper):
    number = SpecialNumber('a', 'b')
    assert '@class' not in mapper.to_builtins(number)
    assert mapper.to_builtins(number, PhoneNumber) == {
        '@class': 'SpecialNumber',
        'name': 'a',
        'number': 'b',
    }
    assert mapper.to_builtins(number, SpecialNumber) == {'name': 'a', 'number': 'b'}


def test_expected_default(catalog):
    mapper = Mapper(catalog=catalog, expected=PhoneNumber)
    doc = mapper.to_builtins(SpecialNumber('a', 'b'))
    assert next(iter(doc)) == '@class'


def test_tag_is_first_key(mapper):
    cat = Cat()
    cat.name = 'tom'
    cat.lives = 9
    assert list(mapper.to_builtins(cat, Animal)) == ['@class', 'lives', 'name']


def test_excluded_and_transient(mapper):
    account = Account()
    account.owner = 'tom'
    account.password = 'secret'
    account.note = 'note'
    account._secret = 'secret'

    assert mapper.to_builtins(account) == {'display': '<tom>', 'owner': 'tom'}


def test_property_read_error(mapper):
    with pytest.raises(errors.PropertyReadError) as info:
        mapper.to_builtins(Account())
    assert info.value.location == '$.display'
    assert isinstance(info.value.__cause__, AttributeError)


def test_nothing(mapper):
    assert mapper.encoder.encode(mapper, Empty(), None) is NOTHING
    assert mapper.to_builtins(Empty()) is None
    assert mapper.to_builtins([Empty(), 1]) == [None, 1]
    assert mapper.to_builtins({'a': Empty(), 'b': 1}) == {'b': 1}


def test_nothing_property_omitted(mapper):
    holder = Holder()
    holder.label = 'label'
    holder.content = Empty()
    assert mapper.to_builtins(holder) == {'label': 'label'}


def test_untyped_property_tagged(mapper):
    dog = Dog()
    dog.name = 'rex'
    dog.good = True
    holder = Holder()
    holder.label = 'label'
    holder.content = dog

    assert mapper.to_builtins(holder) == {
        'content': {'@class': 'tests.models.Dog', 'good': True, 'name': 'rex'},
        'label': 'label',
    }


def test_untyped_container_not_tagged(mapper):
    holder = Holder()
    holder.label = 'label'
    holder.content = [SpecialNumber('a', 'b')]

    assert mapper.to_builtins(holder)['content'] == [{'name': 'a', 'number': 'b'}]


def test_containers(mapper):
    dog = Dog()
    dog.name = 'rex'
    dog.good = True
    cat = Cat()
    cat.name = 'tom'
    cat.lives = 9
    zoo = Zoo()
    zoo.animals = {'rex': dog}
    zoo.favorite = cat
    zoo.tags = {'x'}
    zoo.pair = (1, 'a')

    assert mapper.to_builtins(zoo) == {
        'animals': {'rex': {'@class': 'tests.models.Dog', 'good': True, 'name': 'rex'}},
        'favorite': {'@class': 'tests.models.Cat', 'lives': 9, 'name': 'tom'},
        'pair': [1, 'a'],
        'tags': ['x'],
    }


def test_scalar_adapters(mapper):
    release = Release()
    release.version = Version(1, 2)
    release.released = datetime.date(2024, 5, 1)

    assert mapper.to_builtins(release) == {'released': '2024-05-01', 'version': '1.2'}


def test_dataclasses(mapper):
    drawing = Drawing([Circle('b')])
    assert mapper.to_builtins(drawing) == {
        'shapes': [{'@class': 'tests.models.Circle', 'name': 'b', 'radius': 1.0}],
        'title': 'untitled',
    }


def test_struct(mapper):
    assert mapper.to_builtins(Frozen('k')) == {'count': 0, 'key': 'k'}


def test_fallback_values(mapper):
    assert mapper.to_builtins(Color.RED) == 'red'
    assert mapper.to_builtins((1, 2.5, None, True)) == [1, 2.5, None, True]
    assert mapper.to_builtins({'a': {'b': ['c']}}) == {'a': {'b': ['c']}}


def test_uncatalogable(mapper):
    with pytest.raises(errors.UncatalogableType) as info:
        mapper.to_builtins([Broken()])
    assert info.value.location == '$[0]'


def test_concurrent_encode(mapper):
    with ThreadPoolExecutor(8) as pool:
        results = list(pool.map(lambda _: mapper.encode(tom()), range(64)))
    assert all(result == SAMPLE for result in results)


def test_concurrent_expected_seeds(mapper):
    def encode(index):
        number = SpecialNumber(f'n{index}', str(index))
        expected = PhoneNumber if index % 2 else SpecialNumber
        return index, mapper.to_builtins(number, expected)

    with ThreadPoolExecutor(8) as pool:
        results = list(pool.map(encode, range(200)))

    for index, doc in results:
        assert doc['name'] == f'n{index}'
        if index % 2:
            assert next(iter(doc)) == '@class'
        else:
            assert '@class' not in doc


def test_nested_containers_tagged(mapper):
    grid = Grid()
    grid.rows = [[PhoneNumber('a', '1'), SpecialNumber('b', '2')]]
    grid.index = {'x': [PhoneNumber('c', '3'), SpecialNumber('d', '4')]}

    doc = mapper.to_builtins(grid)
    assert doc['rows'][0][0] == {'name': 'a', 'number': '1'}
    assert doc['rows'][0][1]['@class'] == 'SpecialNumber'
    assert '@class' not in doc['index']['x'][0]
    assert doc['index']['x'][1]['@class'] == 'SpecialNumber'


def test_nested_seed(mapper):
    doc = mapper.to_builtins([[SpecialNumber('a', 'b')]], list[list[PhoneNumber]])
    assert doc[0][0]['@class'] == 'SpecialNumber'


def test_null_property(mapper):
    card = Card()
    card.owner = 'tom'
    card.backup = None
    assert mapper.to_builtins(card) == {'backup': None, 'owner': 'tom'}
