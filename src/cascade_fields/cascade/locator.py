"""
Localização de registros relacionados.

Dois sentidos de busca:
    - pai → filhos (`find_children`): igualdade no campo de lookup do filho,
      critérios de filtro em AND, limite de resultado e projeção apenas do id
    - filho → pai (`find_parent`): apenas quando o lookup foi informado na
      criação ou alterado na atualização; lê do pai somente os campos de
      origem dos mapeamentos

O campo de lookup vem de `lookup_field_name`. No modo por relacionamento
nomeado sem lookup explícito, usa-se a convenção `parent<entidade>id`,
com warning (heurística de melhor esforço).
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from cascade_fields.core.config.model import RelatedEntityConfig, RelationshipMode
from cascade_fields.core.exceptions import CascadeConfigurationError
from cascade_fields.core.records.store import Condition, ConditionOperator, RecordQuery, RecordStore
from cascade_fields.core.records.types import EntityReference, Record, primary_key_field
from cascade_fields.core.runtime.context import DiagnosticsSink, NullDiagnostics
from cascade_fields.core.runtime.types import Operation

from .filters import parse_filter
from .triggers import values_equal

MAX_RELATED_RECORDS = 5000

_EMPTY_ID = UUID(int=0)


def resolve_lookup_field(
    related: RelatedEntityConfig,
    parent_entity: str,
    ctx: Optional[DiagnosticsSink] = None,
) -> str:
    ctx = ctx or NullDiagnostics()
    if related.lookup_field_name:
        return related.lookup_field_name

    if related.relationship_mode is RelationshipMode.BY_NAMED_RELATIONSHIP and parent_entity:
        lookup = f"parent{parent_entity}id"
        ctx.warning(
            f"Using relationship-based lookup for '{related.relationship_name}' "
            f"(derived field '{lookup}'). Prefer an explicit lookupFieldName.",
            entity_name=related.entity_name,
            relationship_name=related.relationship_name,
            lookup_field=lookup,
        )
        return lookup

    raise CascadeConfigurationError(
        f"Unable to determine lookup field for child entity '{related.entity_name}'.",
        details={"entity_name": related.entity_name, "relationship_name": related.relationship_name},
        hint="Set 'lookupFieldName' in configuration.",
    )


def find_children(
    store: RecordStore,
    parent_id: UUID,
    related: RelatedEntityConfig,
    parent_entity: str,
    ctx: Optional[DiagnosticsSink] = None,
) -> List[Record]:
    """
    Filhos do pai `parent_id` para uma RelatedEntityConfig.

    Raises:
        FilterFormatError: se `filter_criteria` for inválido.
    """
    ctx = ctx or NullDiagnostics()
    lookup = resolve_lookup_field(related, parent_entity, ctx)
    criteria = parse_filter(related.filter_criteria)

    conditions = [Condition(field=lookup, operator=ConditionOperator.EQ, value=parent_id)]
    conditions.extend(c.to_condition() for c in criteria)

    query = RecordQuery(
        entity_name=related.entity_name,
        conditions=conditions,
        columns=[],
        top_count=MAX_RELATED_RECORDS,
    )
    ctx.debug(
        f"Querying {related.entity_name} by {lookup}",
        lookup_field=lookup,
        filters=len(criteria),
    )
    records = store.retrieve_multiple(query)

    if len(records) >= MAX_RELATED_RECORDS:
        ctx.warning(
            f"Related record limit of {MAX_RELATED_RECORDS} reached for {related.entity_name}; "
            "remaining records were not updated.",
            entity_name=related.entity_name,
        )
    return records


def child_matches_filter(
    store: RecordStore,
    child: Record,
    related: RelatedEntityConfig,
    ctx: Optional[DiagnosticsSink] = None,
) -> bool:
    """Verifica se um único filho atende ao filtro; permissivo em caso de falha."""
    ctx = ctx or NullDiagnostics()
    if not related.filter_criteria or child.id is None:
        return True

    try:
        conditions = [
            Condition(
                field=primary_key_field(child.logical_name),
                operator=ConditionOperator.EQ,
                value=child.id,
            )
        ]
        conditions.extend(c.to_condition() for c in parse_filter(related.filter_criteria))
        query = RecordQuery(entity_name=child.logical_name, conditions=conditions, columns=[], top_count=1)
        return len(store.retrieve_multiple(query)) > 0
    except Exception as e:  # noqa: BLE001
        ctx.warning(
            f"Error evaluating child filter criteria: {e}. Proceeding without filter check.",
            entity_name=related.entity_name,
        )
        return True


def has_lookup_changed(target: Record, pre_image: Optional[Record], lookup_field: str) -> bool:
    if not target.contains(lookup_field):
        return False
    old = pre_image.get(lookup_field) if pre_image is not None else None
    return not values_equal(target.get(lookup_field), old)


def parent_reference(
    target: Record,
    pre_image: Optional[Record],
    related: RelatedEntityConfig,
    parent_entity: str,
    operation: Operation,
    ctx: Optional[DiagnosticsSink] = None,
) -> Optional[EntityReference]:
    """Referência ao pai quando o filho foi criado com lookup ou re-vinculado."""
    ctx = ctx or NullDiagnostics()
    lookup = resolve_lookup_field(related, parent_entity, ctx)

    if operation is Operation.CREATE:
        if not target.contains(lookup):
            ctx.info(f"Create did not include '{lookup}' on child; skipping this mapping set.")
            return None
    elif operation is Operation.UPDATE:
        if not has_lookup_changed(target, pre_image, lookup):
            ctx.info(f"Update did not change '{lookup}'; skipping mapping set for this lookup.")
            return None
    else:
        ctx.info(f"Unsupported operation '{operation}' for child attach handling.")
        return None

    ref = target.get(lookup)
    if not isinstance(ref, EntityReference) or ref.id is None or ref.id == _EMPTY_ID:
        ctx.info(f"Lookup '{lookup}' has no parent reference; skipping this mapping set.")
        return None

    if parent_entity and ref.logical_name.lower() != parent_entity.lower():
        ctx.info(
            f"Lookup '{lookup}' points to '{ref.logical_name}', not configured parent "
            f"'{parent_entity}'. Skipping this mapping set."
        )
        return None

    return ref


def find_parent(
    store: RecordStore,
    target: Record,
    pre_image: Optional[Record],
    related: RelatedEntityConfig,
    parent_entity: str,
    operation: Operation,
    ctx: Optional[DiagnosticsSink] = None,
) -> Optional[Record]:
    """
    Pai do filho `target`, com apenas os campos de origem dos mapeamentos.

    Retorna None quando não há vínculo novo, o vínculo é nulo, aponta para
    outro tipo de entidade, o filho não atende ao filtro ou não há mapeamentos.
    """
    ctx = ctx or NullDiagnostics()
    ref = parent_reference(target, pre_image, related, parent_entity, operation, ctx)
    if ref is None:
        return None

    if not child_matches_filter(store, target, related, ctx):
        ctx.info("Child does not meet filter criteria; skipping this mapping set.")
        return None

    source_fields = list(related.source_fields)
    if not source_fields:
        ctx.info("No field mappings defined for child; skipping this mapping set.")
        return None

    return store.retrieve(parent_entity, ref.id, source_fields)
