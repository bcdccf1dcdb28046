"""Data dictionary model, lookups and the service that holds the active dictionary."""

from pdcm_validator.dictionary.lookup import get_field_definition
from pdcm_validator.dictionary.models import (
    Dictionary,
    FieldDefinition,
    FieldRestrictions,
    SchemaDefinition,
    SchemaRestrictions,
    ValueType,
)
from pdcm_validator.dictionary.service import (
    DictionaryProvider,
    DictionaryService,
    DictionarySnapshot,
    FileDictionaryProvider,
)

__all__ = [
    "Dictionary",
    "DictionaryProvider",
    "DictionaryService",
    "DictionarySnapshot",
    "FieldDefinition",
    "FieldRestrictions",
    "FileDictionaryProvider",
    "SchemaDefinition",
    "SchemaRestrictions",
    "ValueType",
    "get_field_definition",
]
