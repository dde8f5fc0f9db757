"""
Resolução e conversão de valores a propagar.

Para cada FieldMapping o valor de origem é lido do snapshot pós-alteração
(ou, na falta dele, do pré) e adaptado ao tipo do campo destino:

    - destino de texto limitado (string/memo):
        * referência → nome; senão rótulo formatado; senão id em texto
        * option set → rótulo formatado; senão código em texto
        * money      → rótulo formatado; senão o valor em texto
        * demais     → str(valor)
      e truncamento para `max_length - 1` caracteres + "…" quando excede
    - qualquer outro destino, ou metadado indisponível → valor bruto

Metadados de campo são consultados no record store e mantidos em um
cache por serviço (`AttributeMetadataCache`).
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from cascade_fields.core.config.model import FieldMapping, RelatedEntityConfig
from cascade_fields.core.records.store import AttributeMetadata, RecordStore
from cascade_fields.core.records.types import EntityReference, Money, OptionSetValue, Record
from cascade_fields.core.runtime.context import DiagnosticsSink, NullDiagnostics

ELLIPSIS = "…"


class AttributeMetadataCache:
    """
    Cache de metadados de campo, chaveado por `entidade:campo` (case-insensitive).

    Invariantes:
        - Apenas consultas bem-sucedidas são armazenadas
        - Cada chave é escrita no máximo uma vez (insert-if-absent sob lock)
        - Seguro para uso concorrente por invocações do mesmo serviço
    """

    def __init__(self, store: RecordStore):
        self._store = store
        self._entries: Dict[str, AttributeMetadata] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(entity_name: str, attribute_name: str) -> str:
        return f"{entity_name}:{attribute_name}".lower()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(
        self,
        entity_name: str,
        attribute_name: str,
        ctx: Optional[DiagnosticsSink] = None,
    ) -> Optional[AttributeMetadata]:
        ctx = ctx or NullDiagnostics()
        if not entity_name or not attribute_name:
            return None

        k = self.key(entity_name, attribute_name)
        with self._lock:
            cached = self._entries.get(k)
        if cached is not None:
            return cached

        try:
            metadata = self._store.get_attribute_metadata(entity_name, attribute_name)
        except Exception as e:  # noqa: BLE001
            ctx.warning(
                f"Unable to retrieve attribute metadata for {entity_name}.{attribute_name}: {e}",
                entity_name=entity_name,
                attribute=attribute_name,
            )
            return None

        if metadata is None:
            return None

        with self._lock:
            return self._entries.setdefault(k, metadata)


def convert_to_text(raw: Any, formatted: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, EntityReference):
        if raw.name and raw.name.strip():
            return raw.name
        return formatted if formatted is not None else str(raw.id)
    if isinstance(raw, OptionSetValue):
        return formatted if formatted is not None else str(raw.value)
    if isinstance(raw, Money):
        return formatted if formatted is not None else str(raw.value)
    return str(raw)


def apply_truncation(
    text: Optional[str],
    metadata: Optional[AttributeMetadata],
    target_field: str,
    ctx: Optional[DiagnosticsSink] = None,
) -> Optional[str]:
    ctx = ctx or NullDiagnostics()
    if not text or metadata is None:
        return text

    max_length = metadata.max_length
    if max_length is None or max_length <= 0 or len(text) <= max_length:
        return text

    keep = max(0, max_length - 1)
    ctx.warning(
        f"Value for {target_field} truncated to {max_length} characters with ellipsis.",
        field=target_field,
        max_length=max_length,
        original_length=len(text),
    )
    return text[:keep] + ELLIPSIS


def resolve_value(
    source: Record,
    mapping: FieldMapping,
    target_entity: str,
    *,
    metadata: AttributeMetadataCache,
    ctx: Optional[DiagnosticsSink] = None,
) -> Any:
    """Valor do campo de origem adaptado ao campo destino."""
    ctx = ctx or NullDiagnostics()
    raw = source.get(mapping.source_field)
    target_meta = metadata.get(target_entity, mapping.target_field, ctx)

    if target_meta is not None and target_meta.is_text:
        text = convert_to_text(raw, source.formatted(mapping.source_field))
        if text is None:
            return None
        return apply_truncation(text, target_meta, mapping.target_field, ctx)

    return raw


def resolve_all(
    target: Record,
    pre_image: Optional[Record],
    related: RelatedEntityConfig,
    *,
    metadata: AttributeMetadataCache,
    ctx: Optional[DiagnosticsSink] = None,
) -> Dict[str, Any]:
    """
    ValueSet de uma RelatedEntityConfig (campo destino → valor).

    O snapshot pós-alteração tem prioridade; o pré é usado como fallback.
    Mapeamentos cujo campo de origem não existe em nenhum dos dois são omitidos.
    """
    ctx = ctx or NullDiagnostics()
    values: Dict[str, Any] = {}

    for mapping in related.field_mappings:
        if target.contains(mapping.source_field):
            source, origin = target, "target"
        elif pre_image is not None and pre_image.contains(mapping.source_field):
            source, origin = pre_image, "pre_image"
        else:
            continue

        value = resolve_value(source, mapping, related.entity_name, metadata=metadata, ctx=ctx)
        values[mapping.target_field] = value
        ctx.debug(
            f"Mapping: {mapping.source_field} -> {mapping.target_field}",
            source=origin,
            value=repr(value),
        )

    return values
