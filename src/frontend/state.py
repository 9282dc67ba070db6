"""Row model for the catalog inspector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from core.models import Catalog, Malformed, MessageMetadata
from core.validator import build_message


@dataclass
class CatalogRow:
    message_id: str
    surface: str
    priority: Optional[int]
    status: str
    impressions: int
    dismissals: int
    is_control: bool = False


def build_catalog_rows(
    catalog: Catalog,
    metadata_lookup: Callable[[str], MessageMetadata],
) -> list[CatalogRow]:
    """Describe every catalog entry in catalog order, malformed ones included."""

    rows: list[CatalogRow] = []
    for message_id, data in catalog.messages.items():
        result = build_message(message_id, data, catalog, metadata_lookup)
        if isinstance(result, Malformed):
            metadata = metadata_lookup(message_id)
            rows.append(
                CatalogRow(
                    message_id=message_id,
                    surface=data.surface,
                    priority=None,
                    status=f"malformed: {result.reason}",
                    impressions=metadata.impressions,
                    dismissals=metadata.dismissals,
                    is_control=data.is_control,
                )
            )
            continue
        rows.append(
            CatalogRow(
                message_id=message_id,
                surface=data.surface,
                priority=result.style.priority,
                status="expired" if result.is_expired else "ok",
                impressions=result.metadata.impressions,
                dismissals=result.metadata.dismissals,
                is_control=data.is_control,
            )
        )
    return rows


def surfaces(catalog: Catalog) -> list[str]:
    """Distinct surfaces in catalog order."""

    return list(dict.fromkeys(data.surface for data in catalog.messages.values() if data.surface))
