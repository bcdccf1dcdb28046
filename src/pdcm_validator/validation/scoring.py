"""Completeness score per model.

Every weighted field of the dictionary (``meta.field_weight`` together with
``meta.weight_for_model_type``) contributes its weight when it holds real
data. Rows of all sheets are joined per ``model_id`` and per ``patient_id``;
each model is then completed with its patient's fields and scored against
the maximum attainable for its model type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pdcm_validator.dictionary.models import Dictionary
from pdcm_validator.validation.base import ProcessedFile, ValidationReport

logger = logging.getLogger(__name__)

MODEL_ID = "model_id"
PATIENT_ID = "patient_id"
PDX = "pdx"
INVITRO = "invitro"
BOTH = "both"

# A merged key containing this marks an in vitro model
INVITRO_MARKER = "cell_model"

PLACEHOLDER_VALUES = {"not provided", "not collected"}


@dataclass(frozen=True)
class FieldWeight:
    """Weight of one ``schema.field`` key."""

    weight: float
    model_type: str


def build_weights(dictionary: Dictionary) -> dict[str, FieldWeight]:
    """Weights keyed by ``"{schema}.{field}"``; the first entry seen for a key wins."""
    weights: dict[str, FieldWeight] = {}
    for schema in dictionary.schemas:
        for field in schema.fields:
            weight = field.field_weight
            model_type = field.weight_for_model_type
            if weight is None or model_type is None:
                continue
            key = f"{schema.name}.{field.name}"
            if key not in weights:
                weights[key] = FieldWeight(weight=weight, model_type=model_type)
    return weights


def max_scores(weights: dict[str, FieldWeight]) -> dict[str, float]:
    """Maximum attainable score for each model type."""
    scores = {PDX: 0.0, INVITRO: 0.0}
    for entry in weights.values():
        if entry.model_type in (PDX, BOTH):
            scores[PDX] += entry.weight
        if entry.model_type in (INVITRO, BOTH):
            scores[INVITRO] += entry.weight
    return scores


def join_rows(processed_file: ProcessedFile) -> tuple[dict[str, dict[str, Any]], dict[str, dict[str, Any]]]:
    """Merge all rows into per-model and per-patient records.

    Columns are prefixed with their sheet name. Later rows for the same id
    overwrite earlier values.

    Returns:
        Tuple of (records by model_id, records by patient_id)
    """
    models: dict[str, dict[str, Any]] = {}
    patients: dict[str, dict[str, Any]] = {}

    for sheet_name, sheet in processed_file.sheets.items():
        for row in sheet.rows:
            prefixed = {f"{sheet_name}.{column}": value for column, value in row.items()}
            model_id = row.get(MODEL_ID)
            if model_id is not None and str(model_id).strip():
                models.setdefault(str(model_id), {}).update(prefixed)
            patient_id = row.get(PATIENT_ID)
            if patient_id is not None and str(patient_id).strip():
                patients.setdefault(str(patient_id), {}).update(prefixed)

    return models, patients


def merge_model_record(model: dict[str, Any], patients: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Complete a model record with the fields of its patient.

    The patient's fields go in first and the model's own fields are assigned
    over them, so the model wins when a key exists in both.
    """
    merged: dict[str, Any] = {}
    for key, value in model.items():
        if key.endswith(f".{PATIENT_ID}") and value is not None:
            merged.update(patients.get(str(value), {}))
    merged.update(model)
    return merged


def classify_model(record: dict[str, Any]) -> str:
    """``invitro`` if any key mentions ``cell_model``, otherwise ``pdx``."""
    if any(INVITRO_MARKER in key for key in record):
        return INVITRO
    return PDX


def has_data(value: Any) -> bool:
    """Return True for non-empty values that are not placeholders."""
    if value is None:
        return False
    text = value.strip() if isinstance(value, str) else str(value)
    return text != "" and text.lower() not in PLACEHOLDER_VALUES


def score_record(record: dict[str, Any], weights: dict[str, FieldWeight]) -> float:
    """Sum of the weights of weighted keys holding data."""
    return sum(entry.weight for key, entry in weights.items() if key in record and has_data(record[key]))


def compute_model_scores(dictionary: Dictionary, processed_file: ProcessedFile) -> dict[str, float]:
    """Completeness percentage (0-100, two decimals) per model id.

    A model type with no weighted fields scores 0.0.
    """
    weights = build_weights(dictionary)
    maximum = max_scores(weights)
    models, patients = join_rows(processed_file)

    scores: dict[str, float] = {}
    for model_id, model in models.items():
        record = merge_model_record(model, patients)
        model_type = classify_model(record)
        attainable = maximum[model_type]
        if attainable <= 0:
            logger.warning(f"No weighted fields for {model_type} models; {model_id} scores 0")
            scores[model_id] = 0.0
            continue
        scores[model_id] = round(score_record(record, weights) / attainable * 100, 2)

    logger.info(f"Computed completeness for {len(scores)} models")
    return scores


def score_report(report: ValidationReport, dictionary: Dictionary, processed_file: ProcessedFile) -> dict[str, float]:
    """Scores for a validated workbook; empty when the report is invalid."""
    if not report.is_valid:
        return {}
    return compute_model_scores(dictionary, processed_file)
