"""Centralized dependency injection for FastAPI application.

This module provides factory functions for creating service instances from
settings. Tests replace any of them through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from app.core.config import settings
from app.core.models.gemini_client import GeminiClient
from app.services.extraction.document_extraction_service import DocumentExtractionService
from app.services.notification.line_notifier import LineNotifier
from app.services.registry.landsmaps_client import LandsMapsClient
from app.services.resolution.code_resolver import CodeResolver
from app.services.resolution.reference_data import ReferenceData, load_reference_data
from app.services.storage_service import StorageService
from app.services.title_deed_service import TitleDeedService
from app.services.valuation_service import PropertyValuationService


def get_llm_client() -> GeminiClient:
    """Get Gemini client instance.

    Returns:
        GeminiClient: Client for extraction, matching and valuation calls
    """
    return GeminiClient(
        api_key=settings.llm.gemini_api_key,
        model=settings.llm.gemini_vision_model,
        timeout=settings.llm.timeout,
        max_retries=settings.llm.max_retries,
    )


def get_reference_data() -> ReferenceData:
    """Get the cached province/district reference tables."""
    return load_reference_data(
        str(settings.reference.province_path),
        str(settings.reference.district_path),
    )


def get_storage_service() -> StorageService:
    return StorageService(settings.storage)


def get_registry_client() -> LandsMapsClient:
    """Get a registry client. Each request gets its own instance."""
    return LandsMapsClient(settings.registry)


async def get_extraction_service(
    llm_client: Annotated[GeminiClient, Depends(get_llm_client)]
) -> DocumentExtractionService:
    """Get document extraction service instance.

    Args:
        llm_client: Gemini client from dependency injection

    Returns:
        DocumentExtractionService: Title deed and ID card field extraction
    """
    return DocumentExtractionService(llm_client)


async def get_code_resolver(
    llm_client: Annotated[GeminiClient, Depends(get_llm_client)],
    reference_data: Annotated[ReferenceData, Depends(get_reference_data)],
) -> CodeResolver:
    return CodeResolver(llm_client, reference_data)


async def get_title_deed_service(
    storage: Annotated[StorageService, Depends(get_storage_service)],
    extractor: Annotated[DocumentExtractionService, Depends(get_extraction_service)],
    resolver: Annotated[CodeResolver, Depends(get_code_resolver)],
    registry_client: Annotated[LandsMapsClient, Depends(get_registry_client)],
) -> TitleDeedService:
    """Get title deed service instance.

    Returns:
        TitleDeedService: Deed analysis and manual lookup pipeline
    """
    return TitleDeedService(
        storage=storage,
        extractor=extractor,
        resolver=resolver,
        registry_client=registry_client,
        manual_lookup_timeout=settings.registry.manual_lookup_timeout,
    )


async def get_valuation_service(
    llm_client: Annotated[GeminiClient, Depends(get_llm_client)]
) -> PropertyValuationService:
    return PropertyValuationService(llm_client, timeout=settings.http_timeout)


def get_line_notifier() -> LineNotifier:
    return LineNotifier(settings.notification)
