"""Pydantic models for the title deed pipeline."""

from app.models.title_deed_models import (
    DistrictMatch,
    IdCardExtraction,
    ManualInputType,
    ProvinceMatch,
    ReferenceCode,
    ResolutionDecision,
    ResolutionState,
    StorageReference,
    TitleDeedAnalysis,
    TitleDeedExtraction,
    ValuationResult,
)

__all__ = [
    "DistrictMatch",
    "IdCardExtraction",
    "ManualInputType",
    "ProvinceMatch",
    "ReferenceCode",
    "ResolutionDecision",
    "ResolutionState",
    "StorageReference",
    "TitleDeedAnalysis",
    "TitleDeedExtraction",
    "ValuationResult",
]
