"""Dependency injection container for the resume pipeline."""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from dependency_injector import containers, providers

from .evaluation import EvaluatorAdapter, GeminiConfig, GeminiEvaluatorService, PromptBudget
from .extraction import (
    CloudExtractionBackend,
    CloudExtractionConfig,
    ExtractionConfig,
    ExtractionStrategySelector,
    LocalPdfBackend,
    LocalPdfConfig,
)
from .normalizer import NormalizerConfig
from .pipeline import BatchOrchestrator, PipelineConfig
from .sinks import JsonlFailureLog, JsonRecordStore, LocalObjectStorage, StorageConfig


class PipelineContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    pipeline_config = providers.Singleton(PipelineConfig)
    extraction_config = providers.Singleton(ExtractionConfig)
    local_config = providers.Singleton(LocalPdfConfig)
    cloud_config = providers.Singleton(CloudExtractionConfig)
    gemini_config = providers.Singleton(GeminiConfig)
    prompt_budget = providers.Singleton(PromptBudget)
    normalizer_config = providers.Singleton(NormalizerConfig)
    storage_config = providers.Singleton(StorageConfig)

    failure_log = providers.Singleton(
        JsonlFailureLog,
        path=storage_config.provided.failure_log,
    )
    object_storage = providers.Singleton(LocalObjectStorage, config=storage_config)
    record_store = providers.Singleton(JsonRecordStore, config=storage_config)

    primary_backend = providers.Singleton(LocalPdfBackend, config=local_config)
    fallback_backend = providers.Singleton(CloudExtractionBackend, config=cloud_config)

    selector = providers.Singleton(
        ExtractionStrategySelector,
        primary=primary_backend,
        fallback=fallback_backend,
        failure_log=failure_log,
        config=extraction_config,
    )

    evaluator_service = providers.Singleton(
        GeminiEvaluatorService,
        api_key=config.gemini_api_key,
        config=gemini_config,
    )
    evaluator = providers.Singleton(
        EvaluatorAdapter,
        service=evaluator_service,
        budget=prompt_budget,
    )

    pipeline = providers.Factory(
        BatchOrchestrator,
        selector=selector,
        evaluator=evaluator,
        storage=object_storage,
        store=record_store,
        failure_log=failure_log,
        config=pipeline_config,
        normalizer_config=normalizer_config,
    )


def create_container(
    *,
    settings: dict | None = None,
    api_key: str | None = None,
) -> PipelineContainer:
    """Instantiate container with optional overrides."""

    container = PipelineContainer()
    container.config.gemini_api_key.from_value(api_key)

    if not settings or not isinstance(settings, dict):
        return container

    if "pipeline" in settings:
        container.pipeline_config.override(
            providers.Object(PipelineConfig(**settings["pipeline"]))
        )

    extraction = dict(settings.get("extraction") or {})
    cloud = extraction.pop("cloud", None)
    _reject_unknown(extraction, ExtractionConfig, LocalPdfConfig)
    if extraction:
        container.extraction_config.override(
            providers.Object(ExtractionConfig(**_pick(extraction, ExtractionConfig)))
        )
        container.local_config.override(
            providers.Object(LocalPdfConfig(**_pick(extraction, LocalPdfConfig)))
        )
    if cloud:
        container.cloud_config.override(providers.Object(CloudExtractionConfig(**cloud)))

    evaluator = settings.get("evaluator") or {}
    _reject_unknown(evaluator, GeminiConfig, PromptBudget)
    if evaluator:
        container.gemini_config.override(
            providers.Object(GeminiConfig(**_pick(evaluator, GeminiConfig)))
        )
        container.prompt_budget.override(
            providers.Object(PromptBudget(**_pick(evaluator, PromptBudget)))
        )

    if "normalizer" in settings:
        container.normalizer_config.override(
            providers.Object(NormalizerConfig(**settings["normalizer"]))
        )

    if "storage" in settings:
        container.storage_config.override(
            providers.Object(StorageConfig(**settings["storage"]))
        )

    return container


def _pick(values: dict[str, Any], config_cls: type) -> dict[str, Any]:
    names = {item.name for item in fields(config_cls)}
    return {key: value for key, value in values.items() if key in names}


def _reject_unknown(values: dict[str, Any], *config_classes: type) -> None:
    known = {item.name for config_cls in config_classes for item in fields(config_cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise TypeError(f"Unknown configuration keys: {', '.join(unknown)}")
