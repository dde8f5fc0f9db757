"""
Tipos de valor de campo e snapshot de registro.

Registros são modelados como um mapa nome-de-campo → valor tipado. Além dos
escalares nativos (str, int, float, bool, Decimal, datetime, UUID, None),
três tipos carregam semântica própria e participam do despacho por tipo
na comparação de gatilhos e na conversão para texto:

    - EntityReference → referência a outro registro (id + tipo + nome)
    - OptionSetValue  → valor de enumeração (código inteiro)
    - Money           → valor monetário (Decimal)

Um campo ausente (`contains(field) is False`) é diferente de um campo
presente com valor None: o primeiro significa "não informado no evento",
o segundo "limpo explicitamente".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple
from uuid import UUID


@dataclass(frozen=True)
class EntityReference:
    """Referência a um registro de outro tipo de entidade."""

    logical_name: str
    id: UUID
    name: Optional[str] = None

    def same_target(self, other: "EntityReference") -> bool:
        return self.id == other.id and self.logical_name == other.logical_name


@dataclass(frozen=True)
class OptionSetValue:
    """Valor de enumeração; o rótulo legível vem de `Record.formatted_values`."""

    value: int


@dataclass(frozen=True)
class Money:
    value: Decimal


def primary_key_field(entity_name: str) -> str:
    """Campo de chave primária por convenção: `<entidade>id`."""
    return f"{entity_name}id"


@dataclass
class Record:
    """
    Snapshot de um registro (pré ou pós alteração).

    Campos:
        - logical_name: tipo de entidade
        - id: identificador estável (None para registros ainda não criados)
        - attributes: valores de campo tipados
        - formatted_values: rótulos legíveis fornecidos pelo host, por campo
    """

    logical_name: str
    id: Optional[UUID] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    formatted_values: Dict[str, str] = field(default_factory=dict)

    def contains(self, field_name: str) -> bool:
        return field_name in self.attributes

    def get(self, field_name: str, default: Any = None) -> Any:
        return self.attributes.get(field_name, default)

    def formatted(self, field_name: str) -> Optional[str]:
        return self.formatted_values.get(field_name)

    def __getitem__(self, field_name: str) -> Any:
        return self.attributes[field_name]

    def __setitem__(self, field_name: str, value: Any) -> None:
        self.attributes[field_name] = value

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.attributes

    def __iter__(self) -> Iterator[str]:
        return iter(self.attributes)

    def items(self) -> Iterable[Tuple[str, Any]]:
        return self.attributes.items()
