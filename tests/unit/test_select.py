"""
Unit tests for SELECT generation.
"""
import pytest
from sqlgen import select_query
from sqlgen.exceptions import DescriptorError
from sqlgen.options import QueryOptions
from sqlgen.types import Or, TableReference, col, fn


class TestSelectQuery:

    @pytest.mark.parametrize(('table', 'options', 'expected'), [
        ('myTable', {}, 'SELECT * FROM "myTable";'),
        ('myTable', {'attributes': ['id', 'name']}, 'SELECT "id", "name" FROM "myTable";'),
        ('myTable', {'where': {'id': 2}}, 'SELECT * FROM "myTable" WHERE "myTable"."id" = 2;'),
        ('myTable', {'where': {'name': "foo';DROP TABLE myTable;"}},
         'SELECT * FROM "myTable" WHERE "myTable"."name" = \'foo\'\';DROP TABLE myTable;\';'),
        ('myTable', {'order': ['id', 'DESC']}, 'SELECT * FROM "myTable" ORDER BY "id", "DESC";'),
        ('myTable', {'order': 'myTable.id'}, 'SELECT * FROM "myTable" ORDER BY "myTable"."id";'),
        ('myTable', {'order': [['myTable.id', 'DESC']]},
         'SELECT * FROM "myTable" ORDER BY "myTable"."id" DESC;'),
        ('myTable', {'order': [['id', 'DESC'], 'name'], 'alias': 'myTable'},
         'SELECT * FROM "myTable" AS "myTable" ORDER BY "myTable"."id" DESC, "myTable"."name";'),
        ('myTable', {'group': 'name'}, 'SELECT * FROM "myTable" GROUP BY "name";'),
        ('myTable', {'group': [fn('YEAR', col('createdAt')), 'title']},
         'SELECT * FROM "myTable" GROUP BY YEAR("createdAt"), "title";'),
        ('myTable', {'group': ['name', 'title']}, 'SELECT * FROM "myTable" GROUP BY "name", "title";'),
        (('mySchema', 'myTable'), {}, 'SELECT * FROM "mySchema"."myTable";'),
        (TableReference('myTable', 'mySchema'), {}, 'SELECT * FROM "mySchema"."myTable";'),
        ('myTable', {'where': {'aliases': {'contains': ["Queen's"]}}},
         'SELECT * FROM "myTable" WHERE "myTable"."aliases" @> ARRAY[\'Queen\'\'s\']::VARCHAR(255)[];'),
        ('myTable', {'limit': 10, 'offset': 20}, 'SELECT * FROM "myTable" LIMIT 10 OFFSET 20;'),
        ('myTable', {'offset': 5}, 'SELECT * FROM "myTable" OFFSET 5;'),
        ('myTable', {'attributes': [['name', 'title']]}, 'SELECT "name" AS "title" FROM "myTable";'),
    ], ids=['all', 'attributes', 'where', 'where_injection', 'order_pair_is_two_keys',
            'order_dotted', 'order_direction', 'order_alias', 'group_string', 'group_function',
            'group_list', 'schema', 'schema_reference', 'contains', 'limit_offset', 'offset',
            'attribute_alias'])
    def test_select(self, generator, table, options, expected):
        assert generator.select_query(table, options) == expected

    def test_clause_order(self, generator):
        sql = generator.select_query('myTable', attributes=['name'], where={'id': {'gt': 1}},
                                     group='name', order=[['name', 'ASC']], limit=1)
        assert sql == ('SELECT "name" FROM "myTable" WHERE "myTable"."id" > 1 '
                       'GROUP BY "name" ORDER BY "name" ASC LIMIT 1;')

    def test_where_qualified_by_alias(self, generator):
        sql = generator.select_query('myTable', alias='t', where={'id': 2})
        assert sql == 'SELECT * FROM "myTable" AS "t" WHERE "t"."id" = 2;'

    def test_where_tree(self, generator):
        sql = generator.select_query('myTable', where=Or({'id': 1}, {'id': 2}))
        assert sql == 'SELECT * FROM "myTable" WHERE "myTable"."id" = 1 OR "myTable"."id" = 2;'

    def test_query_options_instance(self, generator):
        options = QueryOptions(attributes=['id'])
        assert generator.select_query('myTable', options) == 'SELECT "id" FROM "myTable";'

    def test_module_function(self):
        assert select_query('myTable', where={'id': 2}) == \
            'SELECT * FROM "myTable" WHERE "myTable"."id" = 2;'

    @pytest.mark.parametrize(('limit', 'offset'), [(-1, None), ('10', None), (True, None), (None, 1.5)])
    def test_invalid_window(self, generator, limit, offset):
        with pytest.raises(DescriptorError):
            generator.select_query('myTable', limit=limit, offset=offset)


class TestSelectUnquoted:

    @pytest.mark.parametrize(('table', 'options', 'expected'), [
        ('myTable', {'attributes': ['id', 'name']}, 'SELECT id, name FROM myTable;'),
        (('mySchema', 'myTable'), {}, 'SELECT * FROM mySchema.myTable;'),
        ('myTable', {'order': 'id DESC'}, 'SELECT * FROM myTable ORDER BY id DESC;'),
        ('myTable', {'where': {'id': 2}}, 'SELECT * FROM myTable WHERE myTable.id = 2;'),
        ('myTable', {'group': 'myTable.name'}, 'SELECT * FROM myTable GROUP BY myTable.name;'),
    ])
    def test_select(self, unquoted_generator, table, options, expected):
        assert unquoted_generator.select_query(table, options) == expected
