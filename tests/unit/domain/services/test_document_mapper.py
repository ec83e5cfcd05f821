import uuid
from datetime import datetime

from pgdocstore.domain.services import DocumentMapper


def fixed_id():
    return "11111111-1111-1111-1111-111111111111"


class TestToInsertValues:
    def test_declared_fields_in_document_order_with_id_last(self, book_schema):
        mapper = DocumentMapper(book_schema, id_factory=fixed_id)

        values = mapper.to_insert_values({"edition": 2, "title": "Dune"})

        assert list(values) == ["edition", "title", "_id"]
        assert values["_id"] == fixed_id()

    def test_supplied_id_is_kept(self, book_schema):
        mapper = DocumentMapper(book_schema, id_factory=fixed_id)
        supplied = uuid.uuid4()

        values = mapper.to_insert_values({"_id": supplied, "title": "Dune"})

        assert values["_id"] == str(supplied)

    def test_reference_keys_dropped(self, book_schema):
        mapper = DocumentMapper(book_schema, id_factory=fixed_id)

        values = mapper.to_insert_values({"title": "Dune", "_refAuthor": {"name": "Frank"}})

        assert "_refAuthor" not in values

    def test_undeclared_keys_dropped(self, book_schema):
        mapper = DocumentMapper(book_schema, id_factory=fixed_id)

        values = mapper.to_insert_values({"title": "Dune", "colour": "red"})

        assert "colour" not in values

    def test_none_values_left_to_column_default(self, book_schema):
        mapper = DocumentMapper(book_schema, id_factory=fixed_id)

        values = mapper.to_insert_values({"title": "Dune", "edition": None})

        assert "edition" not in values

    def test_internal_fields_coerced(self, book_schema):
        mapper = DocumentMapper(book_schema, id_factory=fixed_id)

        values = mapper.to_insert_values({
            "_createdAt": 0,
            "_history": [{"changed": True}],
            "_createdBy": "editor",
            "title": "Dune",
        })

        assert values["_createdAt"] == datetime(1970, 1, 1)
        assert values["_history"] == []
        assert values["_createdBy"] == "editor"


class TestToDocument:
    def test_uuid_id_becomes_string(self, book_schema):
        mapper = DocumentMapper(book_schema)
        row_id = uuid.uuid4()

        document = mapper.to_document({"_id": row_id, "title": "Dune"})

        assert document == {"_id": str(row_id), "title": "Dune"}

    def test_json_columns_decoded(self, book_schema):
        mapper = DocumentMapper(book_schema)

        document = mapper.to_document({"details": '{"pages": 412}', "_history": "[]"})

        assert document["details"] == {"pages": 412}
        assert document["_history"] == []

    def test_to_documents(self, book_schema):
        mapper = DocumentMapper(book_schema)
        assert mapper.to_documents([{"title": "A"}, {"title": "B"}]) == [{"title": "A"}, {"title": "B"}]
