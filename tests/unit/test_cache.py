"""
Unit tests for catalog metadata caching.
"""
import pytest
from vertica_adapter.cache import MetadataCache, _create_cache_key, cacheable


class Catalog:

    def __init__(self):
        self.metadata_cache = MetadataCache(maxsize=10, ttl=60)
        self.lookups = 0

    @cacheable('columns')
    def columns(self, table):
        self.lookups += 1
        return [f'{table}_col']


@pytest.fixture
def catalog():
    return Catalog()


def test_get_cache_returns_same_instance():
    cache = MetadataCache()
    assert cache.get_cache('columns') is cache.get_cache('columns')
    assert cache.get_cache('columns') is not cache.get_cache('tables')


def test_cache_hit(catalog):
    assert catalog.columns('orders') == ['orders_col']
    assert catalog.columns('orders') == ['orders_col']
    assert catalog.lookups == 1


def test_keys_are_case_sensitive(catalog):
    catalog.columns('orders')
    catalog.columns('Orders')
    assert catalog.lookups == 2


def test_bypass_cache_refreshes(catalog):
    catalog.columns('orders')
    catalog.columns('orders', bypass_cache=True)
    assert catalog.lookups == 2
    catalog.columns('orders')
    assert catalog.lookups == 2


def test_clear_all(catalog):
    catalog.columns('orders')
    catalog.metadata_cache.clear_all()
    catalog.columns('orders')
    assert catalog.lookups == 2


def test_clear_for_table(catalog):
    catalog.columns('orders')
    catalog.columns('customers')
    catalog.metadata_cache.clear_for_table('orders')
    catalog.columns('orders')
    catalog.columns('customers')
    assert catalog.lookups == 3


def test_clear_cache_by_name(catalog):
    catalog.columns('orders')
    catalog.metadata_cache.clear_cache('columns')
    catalog.metadata_cache.clear_cache('missing')
    catalog.columns('orders')
    assert catalog.lookups == 2


def test_create_cache_key():
    assert _create_cache_key(('orders',), {}) == "'orders':"
    assert _create_cache_key((), {'b': 1, 'a': 2}) == ':a=2:b=1'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
