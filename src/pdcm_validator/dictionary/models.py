"""Dictionary data model.

A dictionary is the JSON document served by Lectern: a named, versioned list
of schemas, each schema a list of field definitions with optional
restrictions and free-form ``meta`` data. Only the parts the validator uses
are modelled; unknown keys are ignored.

Example document::

    {
      "name": "CancerModels_Dictionary",
      "version": "1.0",
      "schemas": [
        {
          "name": "patient",
          "fields": [
            {
              "name": "patient_id",
              "valueType": "string",
              "meta": {"format": "ALPHANUMERIC", "field_weight": 10, "weight_for_model_type": "both"},
              "restrictions": {"required": true, "regex": "^[a-zA-Z0-9_.-]+$"}
            }
          ],
          "restrictions": {"uniqueKey": ["patient_id"]}
        }
      ]
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MODEL_TYPE_WEIGHTS = ("pdx", "invitro", "both")


class ValueType(str, Enum):
    """Value types a field can declare."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class FieldRestrictions(_FrozenModel):
    """Restrictions declared on a single field."""

    required: bool = False
    regex: str | None = None
    code_list: list[Any] | None = Field(default=None, alias="codeList")
    unique: bool = False
    range: dict[str, float] | None = None


class FieldDefinition(_FrozenModel):
    """A field declared in a schema."""

    name: str
    value_type: ValueType = Field(default=ValueType.STRING, alias="valueType")
    description: str | None = None
    is_array: bool = Field(default=False, alias="isArray")
    meta: dict[str, Any] = Field(default_factory=dict)
    restrictions: FieldRestrictions = Field(default_factory=FieldRestrictions)

    @property
    def format(self) -> Any:
        """Declared display format (``meta.format``), if any."""
        return self.meta.get("format")

    @property
    def field_weight(self) -> float | None:
        """Completeness weight of this field, or None if it has no usable weight."""
        weight = self.meta.get("field_weight")
        if isinstance(weight, bool) or not isinstance(weight, int | float):
            return None
        return weight if weight > 0 else None

    @property
    def weight_for_model_type(self) -> str | None:
        """Model type the weight applies to: ``pdx``, ``invitro`` or ``both``, else None."""
        model_type = self.meta.get("weight_for_model_type")
        return model_type if model_type in MODEL_TYPE_WEIGHTS else None


class SchemaRestrictions(_FrozenModel):
    """Restrictions declared at schema level."""

    unique_key: list[str] = Field(default_factory=list, alias="uniqueKey")
    foreign_key: list[dict[str, Any]] = Field(default_factory=list, alias="foreignKey")


class SchemaDefinition(_FrozenModel):
    """A schema: the expected shape of one sheet."""

    name: str
    description: str | None = None
    fields: list[FieldDefinition] = Field(default_factory=list)
    restrictions: SchemaRestrictions = Field(default_factory=SchemaRestrictions)

    @field_validator("fields")
    @classmethod
    def _unique_field_names(cls, fields: list[FieldDefinition]) -> list[FieldDefinition]:
        seen: set[str] = set()
        for field in fields:
            if field.name in seen:
                raise ValueError(f"Duplicate field name: {field.name}")
            seen.add(field.name)
        return fields

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldDefinition | None:
        """Return the field called ``name``, or None."""
        for field in self.fields:
            if field.name == name:
                return field
        return None


class Dictionary(_FrozenModel):
    """A named, versioned collection of schemas."""

    name: str
    version: str
    schemas: list[SchemaDefinition] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_string(cls, value: Any) -> Any:
        # Lectern versions look like "1.0" but may arrive as JSON numbers
        return str(value) if isinstance(value, int | float) else value

    @field_validator("schemas")
    @classmethod
    def _unique_schema_names(cls, schemas: list[SchemaDefinition]) -> list[SchemaDefinition]:
        seen: set[str] = set()
        for schema in schemas:
            if schema.name in seen:
                raise ValueError(f"Duplicate schema name: {schema.name}")
            seen.add(schema.name)
        return schemas

    @property
    def schema_names(self) -> list[str]:
        return [s.name for s in self.schemas]

    def get_schema(self, name: str) -> SchemaDefinition | None:
        """Return the schema called ``name``, or None."""
        for schema in self.schemas:
            if schema.name == name:
                return schema
        return None
