"""Field schema validation.

Checks field names and types before any DDL is generated from a schema.
"""

from dataclasses import dataclass

from pgdocstore.core.exceptions import InvalidSchemaError, SchemaTypeError
from pgdocstore.domain.entities import FieldSchema


@dataclass
class SchemaValidationError:
    """A single schema validation error."""

    field: str
    message: str
    code: str


class SchemaValidator:
    """Validator for caller-supplied field schemas."""

    # PostgreSQL truncates identifiers beyond 63 bytes
    MAX_FIELD_NAME_LENGTH = 63

    @classmethod
    def validate_field_name(cls, name: str, field_index: int) -> list[SchemaValidationError]:
        """Validate a field name.

        Args:
            name: The field name to validate.
            field_index: Index of the field in the schema (for error messages).

        Returns:
            List of validation errors (empty if valid).
        """
        field_path = f"fields[{field_index}].name"

        if not name or not name.strip():
            return [
                SchemaValidationError(
                    field=field_path,
                    message="Field name is required",
                    code="field_name_required",
                )
            ]

        errors = []
        if len(name.encode("utf-8")) > cls.MAX_FIELD_NAME_LENGTH:
            errors.append(
                SchemaValidationError(
                    field=field_path,
                    message=f"Field name must be at most {cls.MAX_FIELD_NAME_LENGTH} bytes",
                    code="field_name_too_long",
                )
            )
        if "\x00" in name:
            errors.append(
                SchemaValidationError(
                    field=field_path,
                    message="Field name must not contain NUL characters",
                    code="field_name_invalid_format",
                )
            )
        return errors

    @classmethod
    def validate(cls, schema: FieldSchema) -> list[SchemaValidationError]:
        """Validate every field of a schema.

        Returns:
            List of validation errors (empty if valid).
        """
        errors: list[SchemaValidationError] = []
        for index, definition in enumerate(schema):
            errors.extend(cls.validate_field_name(definition.name, index))
            if definition.field_type is None:
                errors.append(
                    SchemaValidationError(
                        field=f"fields[{index}].type",
                        message=f"Unsupported field type '{definition.type}'",
                        code="field_type_invalid",
                    )
                )
        return errors

    @classmethod
    def ensure_valid(cls, schema: FieldSchema) -> None:
        """Raise on the first problem found in a schema.

        Raises:
            SchemaTypeError: If a field names an unmapped type.
            InvalidSchemaError: If a field name is unusable.
        """
        for index, definition in enumerate(schema):
            name_errors = cls.validate_field_name(definition.name, index)
            if name_errors:
                raise InvalidSchemaError(f"{name_errors[0].field}: {name_errors[0].message}")
            if definition.field_type is None:
                raise SchemaTypeError(definition.name, definition.type)
