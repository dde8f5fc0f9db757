"""
Contrato canônico do record store.

O engine não sabe como o armazenamento de registros é alcançado (RPC,
arquivo local, memória); ele depende apenas das cinco operações do
protocolo `RecordStore` e dos seus contratos de falha:

    - retrieve               → leitura pontual por id + lista de campos
    - retrieve_multiple      → leitura por critérios (AND) com limite de resultado
    - update                 → escrita de um único registro
    - execute_batch          → escrita agrupada com continue-on-error e
                               resposta por item
    - get_attribute_metadata → tipo do campo e, para texto limitado,
                               o comprimento máximo

Conformidade é garantida por duck typing (@runtime_checkable), como nos
demais protocolos do pacote.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable
from uuid import UUID

from .types import Record


class ConditionOperator(str, Enum):
    """Operadores de condição suportados pela leitura por critérios."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    LT = "lt"
    IN = "in"
    NOT_IN = "notin"
    NULL = "null"
    NOT_NULL = "notnull"
    LIKE = "like"


@dataclass(frozen=True)
class Condition:
    field: str
    operator: ConditionOperator
    value: Any = None


@dataclass(frozen=True)
class RecordQuery:
    """
    Leitura por critérios.

    Todas as condições são combinadas com AND. `columns` vazio significa
    "apenas o identificador". `top_count` limita o número de registros.
    """

    entity_name: str
    conditions: List[Condition] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    top_count: Optional[int] = None


class AttributeType(str, Enum):
    STRING = "string"
    MEMO = "memo"
    LOOKUP = "lookup"
    PICKLIST = "picklist"
    MONEY = "money"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    UNIQUEIDENTIFIER = "uniqueidentifier"
    OTHER = "other"


_BOUNDED_TEXT_TYPES = {AttributeType.STRING, AttributeType.MEMO}


@dataclass(frozen=True)
class AttributeMetadata:
    entity_name: str
    logical_name: str
    attribute_type: AttributeType
    max_length: Optional[int] = None

    @property
    def is_text(self) -> bool:
        return self.attribute_type in _BOUNDED_TEXT_TYPES


@dataclass(frozen=True)
class BatchItemResponse:
    """Resposta de um item de `execute_batch`; `fault` preenchido indica falha."""

    index: int
    record_id: Optional[UUID] = None
    fault: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.fault is None


@runtime_checkable
class RecordStore(Protocol):
    """Colaborador de leitura/escrita de registros usado pelo engine."""

    def retrieve(self, entity_name: str, record_id: UUID, columns: Sequence[str]) -> Record:
        """Lê um registro; levanta exceção se não existir."""
        ...

    def retrieve_multiple(self, query: RecordQuery) -> List[Record]:
        ...

    def update(self, record: Record) -> None:
        ...

    def execute_batch(self, records: Sequence[Record]) -> List[BatchItemResponse]:
        """Aplica todas as atualizações; falha de um item não afeta os demais."""
        ...

    def get_attribute_metadata(self, entity_name: str, attribute_name: str) -> Optional[AttributeMetadata]:
        ...
