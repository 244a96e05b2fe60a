# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import unittest

from dataverse_query_designer.data.mapper import build_columns, formatted_value_key, map_rows
from dataverse_query_designer.models.query import QueryDefinition, QueryField, QueryJoin

FV = "@OData.Community.Display.V1.FormattedValue"


def _definition(fields, joins=None, alias=None):
    return QueryDefinition(
        environment_id="env-1",
        primary_entity="account",
        primary_entity_alias=alias,
        fields=fields,
        joins=joins,
    )


class TestPrimaryFields(unittest.TestCase):
    def test_formatted_value_wins(self):
        q = _definition([QueryField("main", "foo")])
        rows = map_rows([{"foo": "raw", "foo" + FV: "Pretty"}], q)
        self.assertEqual(rows, [{"main.foo": "Pretty"}])

    def test_raw_value_when_no_annotation(self):
        q = _definition([QueryField("main", "revenue")])
        self.assertEqual(map_rows([{"revenue": 1200}], q), [{"main.revenue": 1200}])

    def test_falsy_raw_values_are_kept(self):
        q = _definition([QueryField("main", "count"), QueryField("main", "flag")])
        self.assertEqual(map_rows([{"count": 0, "flag": False}], q), [{"main.count": 0, "main.flag": False}])

    def test_custom_alias(self):
        q = _definition([QueryField("acc", "name")], alias="acc")
        self.assertEqual(map_rows([{"name": "Contoso"}], q), [{"acc.name": "Contoso"}])


class TestJoinFields(unittest.TestCase):
    def setUp(self):
        self.join = QueryJoin("main", "primarycontactid", "contact", "contact_1", "contactid")

    def test_value_from_alias_keyed_expansion(self):
        q = _definition([QueryField("contact_1", "name")], joins=[self.join])
        self.assertEqual(map_rows([{"contact_1": {"name": "Jane"}}], q), [{"contact_1.name": "Jane"}])

    def test_value_from_navigation_property_expansion(self):
        q = _definition([QueryField("contact_1", "fullname")], joins=[self.join])
        record = {"primarycontact": {"fullname": "Jane Doe"}}
        self.assertEqual(map_rows([record], q), [{"contact_1.fullname": "Jane Doe"}])

    def test_falls_back_to_top_level_formatted_value_then_raw(self):
        q = _definition([QueryField("contact_1", "fullname")], joins=[self.join])
        self.assertEqual(
            map_rows([{"fullname" + FV: "Formatted", "fullname": "raw"}], q),
            [{"contact_1.fullname": "Formatted"}],
        )
        self.assertEqual(map_rows([{"fullname": "raw"}], q), [{"contact_1.fullname": "raw"}])

    def test_expanded_value_beats_top_level(self):
        q = _definition([QueryField("contact_1", "name")], joins=[self.join])
        record = {"contact_1": {"name": "Nested"}, "name": "Top", "name" + FV: "TopFormatted"}
        self.assertEqual(map_rows([record], q), [{"contact_1.name": "Nested"}])

    def test_null_expansion_is_ignored(self):
        q = _definition([QueryField("contact_1", "name")], joins=[self.join])
        self.assertEqual(map_rows([{"primarycontact": None}], q), [{"contact_1.name": None}])


class TestRowShape(unittest.TestCase):
    def test_one_key_per_field_even_when_missing(self):
        fields = [QueryField("main", "name"), QueryField("main", "revenue"), QueryField("c", "fullname")]
        rows = map_rows([{}, {"name": "A"}], _definition(fields))
        self.assertEqual(len(rows), 2)
        for row in rows:
            self.assertEqual(set(row), {"main.name", "main.revenue", "c.fullname"})
        self.assertEqual(rows[0], {"main.name": None, "main.revenue": None, "c.fullname": None})

    def test_non_mapping_record_does_not_raise(self):
        rows = map_rows([None, "junk"], _definition([QueryField("main", "name")]))
        self.assertEqual(rows, [{"main.name": None}, {"main.name": None}])

    def test_empty_records(self):
        self.assertEqual(map_rows([], _definition([QueryField("main", "name")])), [])


class TestColumns(unittest.TestCase):
    def test_columns_follow_fields(self):
        q = _definition([QueryField("main", "name", display_name="Account Name"), QueryField("c", "fullname")])
        cols = build_columns(q)
        self.assertEqual([c.key for c in cols], ["main.name", "c.fullname"])
        self.assertEqual([c.display_name for c in cols], ["Account Name", "fullname"])
        self.assertTrue(all(c.type == "string" for c in cols))
        self.assertEqual(cols[1].to_dict(), {"name": "fullname", "displayName": "fullname", "type": "string", "entityAlias": "c"})

    def test_formatted_value_key(self):
        self.assertEqual(formatted_value_key("statecode"), "statecode" + FV)
