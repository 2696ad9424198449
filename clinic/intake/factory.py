"""
Factory: source name -> Adapter
Register new sources here, the services need no change
"""
from typing import Dict, Type

from clinic_dashboard.exceptions import ValidationError

from .adapters import BaseIntakeAdapter, WebFormAdapter, LegacyFormAdapter

_ADAPTER_REGISTRY: Dict[str, Type[BaseIntakeAdapter]] = {
    "webform": WebFormAdapter,
    "legacy": LegacyFormAdapter,
    "legacy_sheet": LegacyFormAdapter,  # alias
}


def get_adapter(source: str) -> BaseIntakeAdapter:
    adapter_cls = _ADAPTER_REGISTRY.get(source.lower())
    if adapter_cls is None:
        raise ValidationError(
            message=f"Unknown intake source: {source}",
            code="UNKNOWN_SOURCE",
            detail={"known": sorted(_ADAPTER_REGISTRY)},
        )
    return adapter_cls()


def register_adapter(source: str, adapter_cls: Type[BaseIntakeAdapter]) -> None:
    _ADAPTER_REGISTRY[source.lower()] = adapter_cls
