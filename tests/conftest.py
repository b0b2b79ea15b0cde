import pytest

from beanbind import Catalog, Mapper

from .models import SpecialNumber


@pytest.fixture(params=['json', 'msgpack'])
def codec(request):
    return request.param


@pytest.fixture
def catalog():
    return Catalog()


@pytest.fixture
def mapper(catalog):
    return Mapper(catalog=catalog, aliases={SpecialNumber: 'SpecialNumber'})
