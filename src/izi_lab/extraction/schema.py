"""Raw extraction schema: the shape the model is asked to return.

These models are validated after parsing; the JSON schema sent with the
request is derived from them so the data contract has a single source.
Field names on the wire are camelCase.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RawLabResult(_WireModel):
    """One analyte as returned by the model."""

    abbreviation: str = Field(description="Standardized medical abbreviation.")
    value: str = Field(description="The numeric value.")
    reference_range: Optional[str] = Field(
        default=None,
        alias="referenceRange",
        description="The reference range extracted from the document. Empty if not requested.",
    )
    abnormality: Literal["HIGH", "LOW", "NORMAL"] = "NORMAL"

    @field_validator("value", "abbreviation", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("abnormality", mode="before")
    @classmethod
    def _upper_abnormality(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or "NORMAL"
        if v is None:
            return "NORMAL"
        return v


class RawNonLabData(_WireModel):
    """Narrative report fields."""

    exam_title: str = Field(
        default="",
        alias="examTitle",
        description="The title of the exam (e.g., 'Ressonância Magnética de Crânio', 'Ultrassom Abdominal').",
    )
    main_findings: Optional[list[str]] = Field(
        default=None,
        alias="mainFindings",
        description="A list of the most important findings summarized.",
    )
    impression: Optional[str] = Field(
        default=None,
        description="The final conclusion, impression, or diagnosis summary.",
    )


class RawExtraction(_WireModel):
    """One patient record as returned by the model."""

    patient_initials: Optional[str] = Field(
        default=None,
        alias="patientInitials",
        description="The initials of the patient's name (e.g., MJR).",
    )
    patient_age: Optional[str] = Field(
        default=None,
        alias="patientAge",
        description="The age of the patient (e.g., '45 anos', '3 meses').",
    )
    collection_date: Optional[str] = Field(
        default=None,
        alias="collectionDate",
        description="The date(s) of the exam.",
    )
    category: Optional[str] = Field(
        default=None,
        json_schema_extra={"enum": ["LAB", "NON_LAB"]},
        description=(
            "LAB for blood/urine tests with values. NON_LAB for Imaging (MRI, CT, USG), "
            "Pathology, or Medical Reports."
        ),
    )
    lab_results: Optional[list[RawLabResult]] = Field(default=None, alias="labResults")
    non_lab_data: Optional[RawNonLabData] = Field(default=None, alias="nonLabData")

    @field_validator("patient_age", "collection_date", "patient_initials", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().upper().replace("-", "_")
            return v or None
        return v


RAW_BATCH_ADAPTER: TypeAdapter[list[RawExtraction]] = TypeAdapter(list[RawExtraction])


def response_json_schema() -> dict[str, Any]:
    """JSON schema of the expected response: an array of patient records.

    ``patientInitials`` and ``category`` are required on the wire even though
    validation tolerates their absence and applies defaults.
    """
    schema = RAW_BATCH_ADAPTER.json_schema(by_alias=True)
    defs = schema.get("$defs", {})
    record = defs.get("RawExtraction")
    if record is not None:
        record["required"] = ["patientInitials", "category"]
    lab = defs.get("RawLabResult")
    if lab is not None:
        lab["required"] = ["abbreviation", "value", "abnormality"]
    return schema


def response_format() -> dict[str, Any]:
    """``response_format`` payload for schema-constrained output."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "exam_records",
            "schema": response_json_schema(),
        },
    }
