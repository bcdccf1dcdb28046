"""Field lookups against a loaded dictionary."""

from __future__ import annotations

from pdcm_validator.dictionary.models import Dictionary, FieldDefinition
from pdcm_validator.exceptions import ConfigurationException


def get_field_definition(dictionary: Dictionary, schema_name: str, field_name: str) -> FieldDefinition:
    """Resolve the definition of ``field_name`` in ``schema_name``.

    Args:
        dictionary: Loaded dictionary
        schema_name: Schema (sheet) name
        field_name: Field (column) name

    Returns:
        The field definition

    Raises:
        ConfigurationException: If the schema or the field is not in the dictionary
    """
    schema = dictionary.get_schema(schema_name)
    if schema is None:
        raise ConfigurationException(
            f"Schema [{schema_name}] not found in dictionary {dictionary.name} {dictionary.version}."
        )

    field = schema.get_field(field_name)
    if field is None:
        raise ConfigurationException(
            f"Field [{field_name}] not found in schema [{schema_name}] "
            f"of dictionary {dictionary.name} {dictionary.version}."
        )
    return field
