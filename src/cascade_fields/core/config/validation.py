"""
Validação estrutural de `CascadeConfiguration` (v1).

A validação percorre a configuração em profundidade e falha na primeira
violação encontrada, com mensagem que identifica a entidade ou o mapping
ofensor. Não há efeitos colaterais; o engine chama esta função antes de
qualquer resolução de campo ou acesso ao record store.

Ordem das verificações:
    1. parentEntity presente
    2. ao menos uma entidade relacionada (configurações ativas)
    3. por entidade relacionada: entityName, identificador compatível com o
       modo de relacionamento, ao menos um field mapping
    4. por mapping: sourceField e targetField presentes
"""

from __future__ import annotations

from typing import Any

from cascade_fields.core.exceptions import CascadeConfigurationError

from .model import CascadeConfiguration, FieldMapping, RelatedEntityConfig, RelationshipMode


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str, **details: Any) -> None:
    if not cond:
        raise CascadeConfigurationError(msg, details=dict(details))


def validate_field_mapping(mapping: FieldMapping, *, entity_name: str, index: int) -> None:
    _expect(
        _is_non_empty_str(mapping.source_field),
        f"SourceField is required in field mapping #{index} of related entity '{entity_name}'.",
        entity_name=entity_name,
        mapping_index=index,
    )
    _expect(
        _is_non_empty_str(mapping.target_field),
        f"TargetField is required in field mapping #{index} "
        f"('{mapping.source_field}') of related entity '{entity_name}'.",
        entity_name=entity_name,
        mapping_index=index,
        source_field=mapping.source_field,
    )


def validate_related_entity(related: RelatedEntityConfig, *, index: int) -> None:
    _expect(
        _is_non_empty_str(related.entity_name),
        f"EntityName is required in related entity configuration #{index}.",
        related_index=index,
    )
    name = related.entity_name

    if related.relationship_mode is RelationshipMode.BY_NAMED_RELATIONSHIP:
        _expect(
            _is_non_empty_str(related.relationship_name),
            f"RelationshipName is required for related entity '{name}' in byNamedRelationship mode.",
            entity_name=name,
            relationship_mode=related.relationship_mode.value,
        )
    else:
        _expect(
            _is_non_empty_str(related.lookup_field_name),
            f"LookupFieldName is required for related entity '{name}' in byLookupField mode.",
            entity_name=name,
            relationship_mode=related.relationship_mode.value,
        )

    _expect(
        len(related.field_mappings) > 0,
        f"At least one field mapping is required for related entity '{name}'.",
        entity_name=name,
    )

    for i, mapping in enumerate(related.field_mappings):
        validate_field_mapping(mapping, entity_name=name, index=i)


def validate_configuration(config: CascadeConfiguration) -> None:
    """Valida a configuração; levanta `CascadeConfigurationError` na primeira violação."""
    _expect(
        isinstance(config, CascadeConfiguration),
        f"Cascade configuration must be a CascadeConfiguration, got {type(config).__name__}.",
    )
    _expect(
        _is_non_empty_str(config.parent_entity),
        "ParentEntity is required in cascade configuration.",
        configuration_id=config.id,
    )
    if config.is_active:
        _expect(
            len(config.related_entities) > 0,
            "At least one related entity configuration is required.",
            configuration_id=config.id,
            parent_entity=config.parent_entity,
        )

    for i, related in enumerate(config.related_entities):
        validate_related_entity(related, index=i)
