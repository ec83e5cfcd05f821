from pgdocstore.domain.entities import FieldSchema, FieldType, is_reference_key


def test_from_mapping_keeps_declaration_order(book_schema):
    schema = FieldSchema.from_mapping(book_schema)

    assert schema.names() == ["title", "datePublished", "authorId", "edition", "reviews", "details"]
    assert schema.get("title").required is True
    assert schema.get("edition").field_type is FieldType.NUMBER


def test_from_mapping_unwraps_collection_file(book_schema):
    schema = FieldSchema.from_mapping({"fields": book_schema, "settings": {}})
    assert "title" in schema
    assert len(schema) == 6


def test_from_mapping_none_is_empty():
    assert len(FieldSchema.from_mapping(None)) == 0


def test_unknown_type_has_no_field_type():
    schema = FieldSchema.from_mapping({"tags": {"type": "Array"}})
    assert schema.get("tags").field_type is None


def test_user_fields_exclude_internal():
    schema = FieldSchema.from_mapping({
        "_createdAt": {"type": "DateTime"},
        "title": {"type": "String"},
    })
    assert [f.name for f in schema.user_fields()] == ["title"]


def test_is_reference_key():
    assert is_reference_key("_refAuthor")
    assert not is_reference_key("authorId")
