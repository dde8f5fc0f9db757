"""
Modelo canônico de configuração de cascade (v1).

Uma `CascadeConfiguration` descreve, para um tipo de entidade pai, quais
entidades filhas recebem quais campos e quais campos do pai disparam a
propagação. O modelo é imutável depois de carregado: todos os componentes
do engine apenas o leem.

Formato de serialização (chaves camelCase, compatível com o configurador):

    {
      "id": "...", "name": "...", "parentEntity": "account",
      "isActive": true, "enableTracing": true,
      "relatedEntities": [{
        "entityName": "contact",
        "relationshipMode": "byLookupField",
        "relationshipName": "...", "lookupFieldName": "parentcustomerid",
        "filterCriteria": "statecode|eq|0",
        "fieldMappings": [
          {"sourceField": "...", "targetField": "...", "isTriggerField": true}
        ]
      }]
    }

A chave legada `useRelationship` (bool, default true) é aceita quando
`relationshipMode` não é informado.

Esta implementação evita dependências externas (ex.: Pydantic); a validação
estrutural vive em `validation.py`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from cascade_fields.core.exceptions import CascadeConfigurationError


class RelationshipMode(str, Enum):
    """Como a entidade filha referencia o pai."""

    BY_NAMED_RELATIONSHIP = "byNamedRelationship"
    BY_LOOKUP_FIELD = "byLookupField"


def _str_or_none(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return default
    if isinstance(v, str):
        return v.strip().lower() == "true"
    return bool(v)


@dataclass(frozen=True)
class FieldMapping:
    """Regra de propagação de um campo do pai para um campo do filho."""

    source_field: str
    target_field: str
    is_trigger_field: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldMapping":
        return cls(
            source_field=_str_or_none(data.get("sourceField")) or "",
            target_field=_str_or_none(data.get("targetField")) or "",
            is_trigger_field=_as_bool(data.get("isTriggerField"), False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceField": self.source_field,
            "targetField": self.target_field,
            "isTriggerField": self.is_trigger_field,
        }


@dataclass(frozen=True)
class RelatedEntityConfig:
    """Configuração de uma entidade filha que recebe valores do pai."""

    entity_name: str
    relationship_mode: RelationshipMode = RelationshipMode.BY_NAMED_RELATIONSHIP
    relationship_name: Optional[str] = None
    lookup_field_name: Optional[str] = None
    filter_criteria: Optional[str] = None
    field_mappings: Tuple[FieldMapping, ...] = field(default_factory=tuple)

    @property
    def trigger_fields(self) -> Tuple[str, ...]:
        """Campos de origem marcados como gatilho, sem duplicatas e em ordem."""
        seen: Dict[str, None] = {}
        for m in self.field_mappings:
            if m.is_trigger_field and m.source_field not in seen:
                seen[m.source_field] = None
        return tuple(seen)

    @property
    def source_fields(self) -> Tuple[str, ...]:
        seen: Dict[str, str] = {}
        for m in self.field_mappings:
            key = m.source_field.lower()
            if key not in seen:
                seen[key] = m.source_field
        return tuple(seen.values())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelatedEntityConfig":
        raw_mode = data.get("relationshipMode")
        if raw_mode is not None:
            try:
                mode = RelationshipMode(str(raw_mode))
            except ValueError as e:
                raise CascadeConfigurationError(
                    f"Unknown relationshipMode '{raw_mode}' for related entity '{data.get('entityName')}'.",
                    details={"entity_name": data.get("entityName"), "relationship_mode": raw_mode},
                    hint="Use 'byNamedRelationship' ou 'byLookupField'.",
                ) from e
        else:
            use_relationship = _as_bool(data.get("useRelationship"), True)
            mode = (
                RelationshipMode.BY_NAMED_RELATIONSHIP
                if use_relationship
                else RelationshipMode.BY_LOOKUP_FIELD
            )

        mappings = data.get("fieldMappings") or []
        return cls(
            entity_name=_str_or_none(data.get("entityName")) or "",
            relationship_mode=mode,
            relationship_name=_str_or_none(data.get("relationshipName")),
            lookup_field_name=_str_or_none(data.get("lookupFieldName")),
            filter_criteria=_str_or_none(data.get("filterCriteria")),
            field_mappings=tuple(
                FieldMapping.from_dict(m) for m in mappings if isinstance(m, dict)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entityName": self.entity_name,
            "relationshipMode": self.relationship_mode.value,
            "relationshipName": self.relationship_name,
            "lookupFieldName": self.lookup_field_name,
            "filterCriteria": self.filter_criteria,
            "fieldMappings": [m.to_dict() for m in self.field_mappings],
        }


@dataclass(frozen=True)
class CascadeConfiguration:
    """
    Configuração completa de cascade para um tipo de entidade pai.

    Campos:
        - id / name: identidade e nome amigável (usados apenas em diagnóstico)
        - parent_entity: nome lógico da entidade monitorada
        - is_active: configurações inativas nunca executam
        - enable_tracing: verbosidade de diagnóstico (erros são sempre registrados)
        - related_entities: configurações filhas, processadas nesta ordem
    """

    parent_entity: str
    related_entities: Tuple[RelatedEntityConfig, ...] = field(default_factory=tuple)
    id: Optional[str] = None
    name: Optional[str] = None
    is_active: bool = True
    enable_tracing: bool = True

    def related_for(self, entity_name: str) -> Tuple[RelatedEntityConfig, ...]:
        """Configurações filhas cujo tipo de entidade corresponde (case-insensitive)."""
        wanted = (entity_name or "").lower()
        return tuple(r for r in self.related_entities if r.entity_name.lower() == wanted)

    def is_parent(self, entity_name: str) -> bool:
        return (entity_name or "").lower() == (self.parent_entity or "").lower()

    def is_child(self, entity_name: str) -> bool:
        return bool(self.related_for(entity_name))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CascadeConfiguration":
        related = data.get("relatedEntities") or []
        return cls(
            id=_str_or_none(data.get("id")),
            name=_str_or_none(data.get("name")),
            parent_entity=_str_or_none(data.get("parentEntity")) or "",
            is_active=_as_bool(data.get("isActive"), True),
            enable_tracing=_as_bool(data.get("enableTracing"), True),
            related_entities=tuple(
                RelatedEntityConfig.from_dict(r) for r in related if isinstance(r, dict)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parentEntity": self.parent_entity,
            "isActive": self.is_active,
            "enableTracing": self.enable_tracing,
            "relatedEntities": [r.to_dict() for r in self.related_entities],
        }
