"""
Tests for VerticaAdapter and connect() against a mock driver connection.
"""
import sys
import types

import pandas as pd
import pytest
from vertica_adapter import connect, list_columns, list_tables, table_exists
from vertica_adapter.connection import VerticaAdapter, load_driver
from vertica_adapter.exceptions import ConfigurationError, DriverUnavailableError
from vertica_adapter.introspection import ColumnDescriptor
from vertica_adapter.options import VerticaOptions, pandas_data_loader

from tests.fixtures.mocks import MockConnection, MockDriverError


class TestDefaultSchema:

    def test_public_when_unset(self, adapter):
        assert adapter.schema_name == 'public'

    def test_from_options(self, vertica_connection):
        adapter = VerticaAdapter(vertica_connection, VerticaOptions(database='testdb', schema='sales'))
        assert adapter.schema_name == 'sales'

    def test_from_connection_options(self):
        connection = MockConnection(options={'schema': 'analytics'})
        adapter = VerticaAdapter(connection, VerticaOptions(database='testdb'))
        assert adapter.schema_name == 'analytics'

    def test_read_only(self, adapter):
        with pytest.raises(AttributeError):
            adapter.schema_name = 'other'


class TestExecute:

    def test_returns_rows(self, adapter, vertica_connection):
        vertica_connection.on('from items', ['id', 'name'], [(1, 'a'), (2, 'b')])
        rows = adapter.execute('select id, name from items')
        assert rows == [{'id': 1, 'name': 'a'}, {'id': 2, 'name': 'b'}]

    def test_callback_per_row(self, adapter, vertica_connection):
        vertica_connection.on('from items', ['id'], [(1,), (2,), (3,)])
        seen = []
        assert adapter.execute('select id from items', seen.append) is None
        assert seen == [{'id': 1}, {'id': 2}, {'id': 3}]

    def test_statement_without_result_set(self, adapter):
        assert adapter.execute('create table t (id int)') is None

    def test_tracks_calls_and_closes_cursor(self, adapter, vertica_connection):
        adapter.execute('select 1')
        adapter.execute('select 2')
        assert adapter.calls == 2
        assert all(cursor.closed for cursor in vertica_connection.cursors)

    def test_driver_error_propagates(self, adapter, vertica_connection):
        error = MockDriverError('Syntax error at or near "selec"')
        vertica_connection.fail_on('selec ', error)
        with pytest.raises(MockDriverError) as exc_info:
            adapter.execute('selec 1')
        assert exc_info.value is error
        assert vertica_connection.cursors[-1].closed

    def test_logs_statement(self, adapter, caplog):
        with caplog.at_level('DEBUG', logger='vertica_adapter.connection'):
            adapter.execute('select 42')
        assert 'select 42' in caplog.text


class TestSelect:

    def test_dict_rows(self, adapter, vertica_connection):
        vertica_connection.on('from items', ['id', 'name'], [(1, 'a')])
        assert adapter.select('select id, name from items') == [{'id': 1, 'name': 'a'}]

    def test_select_rows(self, adapter, vertica_connection):
        vertica_connection.on('from items', ['id', 'name'], [(1, 'a'), (2, 'b')])
        assert adapter.select_rows('select id, name from items') == [[1, 'a'], [2, 'b']]

    def test_select_rows_keeps_data_loader(self, vertica_connection):
        options = VerticaOptions(database='testdb', data_loader=pandas_data_loader)
        adapter = VerticaAdapter(vertica_connection, options)
        vertica_connection.on('from items', ['id'], [(1,)])
        assert adapter.select_rows('select id from items') == [[1]]
        assert options.data_loader is pandas_data_loader

    def test_pandas_loader(self, vertica_connection):
        adapter = VerticaAdapter(vertica_connection,
                                 VerticaOptions(database='testdb', data_loader=pandas_data_loader))
        vertica_connection.on('from items', ['id', 'name'], [])
        df = adapter.select('select id, name from items')
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ['id', 'name']


class TestCatalog:

    def test_list_columns(self, adapter, orders_columns):
        columns = adapter.list_columns('orders')
        assert [c.name for c in columns] == ['id', 'status', 'amount', 'is_paid', 'created']
        assert columns[0] == ColumnDescriptor('id', 'int', False, None)
        assert columns[1].default == 'new'
        assert columns[2].default == '-1'
        assert columns[3].default is False
        assert columns[3].nullable is True
        assert columns[4].default is None
        assert columns[4].nullable is False

    def test_list_columns_unknown_table(self, adapter):
        assert adapter.list_columns('missing') == []

    def test_list_columns_is_cached(self, adapter, vertica_connection, orders_columns):
        adapter.list_columns('orders')
        adapter.list_columns('orders')
        assert len(vertica_connection.executed) == 1
        adapter.list_columns('orders', bypass_cache=True)
        assert len(vertica_connection.executed) == 2

    def test_list_columns_returns_copies(self, adapter, orders_columns):
        adapter.list_columns('orders').clear()
        assert len(adapter.list_columns('orders')) == 5

    def test_list_tables(self, adapter, vertica_connection):
        vertica_connection.on('v_catalog.tables', ['table_name'], [('orders',), ('customers',)])
        assert adapter.list_tables() == ['orders', 'customers']
        assert "table_schema = 'public'" in vertica_connection.executed[-1]

    def test_table_exists(self, adapter, vertica_connection):
        vertica_connection.on('COUNT(*)', ['COUNT'], [(1,)])
        assert adapter.table_exists('sales.orders') is True

    def test_table_missing(self, adapter, vertica_connection):
        vertica_connection.on('COUNT(*)', ['COUNT'], [(0,)])
        assert adapter.table_exists('orders') is False

    def test_module_functions(self, adapter, vertica_connection, orders_columns):
        vertica_connection.on('COUNT(*)', ['COUNT'], [(1,)])
        vertica_connection.on('v_catalog.tables', ['table_name'], [('orders',)])
        assert len(list_columns(adapter, 'orders')) == 5
        assert list_tables(adapter) == ['orders']
        assert table_exists(adapter, 'orders') is True

    def test_ddl_refreshes_cached_metadata(self, adapter, vertica_connection):
        assert adapter.list_tables() == []
        assert adapter.list_columns('orders') == []

        adapter.execute('CREATE TABLE orders (id int)')
        vertica_connection.on('v_catalog.tables', ['table_name'], [('orders',)])
        vertica_connection.on('v_catalog.columns',
                              ['column_name', 'data_type', 'column_default', 'is_nullable'],
                              [('id', 'int', None, 't')])

        assert adapter.list_tables() == ['orders']
        assert [c.name for c in adapter.list_columns('orders')] == ['id']

    def test_ddl_keeps_other_tables_cached(self, adapter, vertica_connection, orders_columns):
        adapter.list_columns('orders')
        adapter.list_columns('customers')
        adapter.execute('alter table public.customers add column note varchar(10)')
        executed = len(vertica_connection.executed)

        adapter.list_columns('orders')
        assert len(vertica_connection.executed) == executed
        adapter.list_columns('customers')
        assert len(vertica_connection.executed) == executed + 1

    def test_ddl_without_table_name_clears_everything(self, adapter, vertica_connection,
                                                      orders_columns):
        adapter.list_columns('orders')
        adapter.execute('DROP SCHEMA staging CASCADE')
        adapter.list_columns('orders')
        assert len(vertica_connection.executed) == 3

    def test_query_keeps_cache(self, adapter, vertica_connection, orders_columns):
        adapter.list_columns('orders')
        adapter.execute('select * from orders')
        adapter.list_columns('orders')
        assert len(vertica_connection.executed) == 2

    def test_primary_key(self, adapter):
        assert adapter.primary_key('orders') is None

    def test_index_operations_are_noops(self, adapter, vertica_connection):
        assert adapter.add_index('orders', 'status') is None
        assert adapter.remove_index('orders', column='status') is None
        assert adapter.remove_index_by_name('orders', 'orders_status_idx') is None
        assert adapter.rename_index('orders', 'a', 'b') is None
        assert vertica_connection.executed == []


class TestQuotingAndTypes:

    def test_quote_table_name(self, adapter):
        assert adapter.quote_table_name('orders') == 'public.orders'

    def test_quote_column_name(self, adapter):
        assert adapter.quote_column_name('status') == "'status'"

    def test_native_type_mapping(self, adapter):
        assert adapter.native_type_mapping()['string'].render() == 'varchar(255)'
        assert adapter.native_database_types()['text'].render() == 'varchar(15000)'

    def test_adapter_name(self, adapter):
        assert adapter.adapter_name == 'Vertica'


class TestLifecycle:

    def test_is_active(self, adapter):
        assert adapter.is_active() is True
        adapter.disconnect()
        assert adapter.is_active() is False

    def test_disconnect_twice(self, adapter):
        adapter.disconnect()
        adapter.disconnect()

    def test_disconnect_clears_cache(self, adapter, vertica_connection, orders_columns):
        adapter.list_columns('orders')
        adapter.disconnect()
        vertica_connection.reset_connection()
        adapter.list_columns('orders')
        assert len(vertica_connection.executed) == 2

    def test_reconnect(self, adapter, vertica_connection, orders_columns):
        adapter.list_columns('orders')
        adapter.reconnect()
        assert vertica_connection.resets == 1
        adapter.list_columns('orders')
        assert len(vertica_connection.executed) == 2

    def test_reset_is_reconnect(self, adapter, vertica_connection):
        adapter.reset()
        assert vertica_connection.resets == 1

    def test_reconnect_reapplies_search_path(self, vertica_connection):
        adapter = VerticaAdapter(vertica_connection, VerticaOptions(database='testdb', schema='sales'))
        adapter.reconnect()
        assert vertica_connection.executed == ['SET SEARCH_PATH TO "sales", public']

    def test_context_manager(self, adapter):
        with adapter as cn:
            assert cn.is_active()
        assert adapter.is_active() is False


class TestConnect:

    def test_with_driver(self, mocker):
        connection = MockConnection()
        driver = mocker.Mock(return_value=connection)
        options = VerticaOptions(host='vertica', username='dbadmin', password='secret',
                                 database='testdb', appname='tests', driver=driver)

        adapter = connect(options)

        driver.assert_called_once_with(host='vertica', port=5433, user='dbadmin',
                                       password='secret', database='testdb',
                                       session_label='tests', autocommit=True)
        assert isinstance(adapter, VerticaAdapter)
        assert adapter.connection is connection
        assert connection.executed == []

    def test_sets_search_path(self, mocker):
        connection = MockConnection()
        options = VerticaOptions(database='testdb', schema='sales',
                                 driver=mocker.Mock(return_value=connection))
        adapter = connect(options)
        assert adapter.schema_name == 'sales'
        assert connection.executed == ['SET SEARCH_PATH TO "sales", public']

    def test_missing_database(self):
        with pytest.raises(ConfigurationError):
            connect(VerticaOptions(host='vertica'))

    def test_missing_database_in_dict(self, mocker):
        driver = mocker.Mock()
        with pytest.raises(ConfigurationError):
            connect({'host': 'vertica', 'driver': driver})
        driver.assert_not_called()

    def test_missing_database_in_keywords(self, mocker):
        driver = mocker.Mock()
        with pytest.raises(ConfigurationError):
            connect(host='vertica', driver=driver)
        driver.assert_not_called()

    def test_options_from_dict(self, mocker):
        connection = MockConnection()
        driver = mocker.Mock(return_value=connection)
        adapter = connect({'database': 'testdb', 'port': '5444', 'driver': driver})
        assert adapter.connection is connection
        assert driver.call_args.kwargs['port'] == 5444

    def test_driver_unavailable(self, mocker):
        mocker.patch.dict(sys.modules, {'vertica_python': None})
        with pytest.raises(DriverUnavailableError):
            connect(VerticaOptions(database='testdb'))

    def test_load_driver(self, mocker):
        fake = types.SimpleNamespace(connect=object())
        mocker.patch.dict(sys.modules, {'vertica_python': fake})
        assert load_driver() is fake.connect


if __name__ == '__main__':
    __import__('pytest').main([__file__])
