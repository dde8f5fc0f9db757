# src/cascade_fields/core/records/__init__.py

"""
Camada de registros do Cascade Fields.

Responsabilidades do pacote:
    - Tipos de valor de campo (EntityReference, OptionSetValue, Money)
    - Snapshot de registro (`Record`)
    - Protocolo do record store e suas estruturas de consulta/metadados
    - Implementação em memória baseada em pandas

Limites explícitos:
    - Não decide o que propagar
    - Não conhece configuração de cascade
"""

from .memory import InMemoryRecordStore, RecordNotFoundError
from .store import (
    AttributeMetadata,
    AttributeType,
    BatchItemResponse,
    Condition,
    ConditionOperator,
    RecordQuery,
    RecordStore,
)
from .types import EntityReference, Money, OptionSetValue, Record, primary_key_field

__all__ = [
    "AttributeMetadata",
    "AttributeType",
    "BatchItemResponse",
    "Condition",
    "ConditionOperator",
    "EntityReference",
    "InMemoryRecordStore",
    "Money",
    "OptionSetValue",
    "Record",
    "RecordNotFoundError",
    "RecordQuery",
    "RecordStore",
    "primary_key_field",
]
