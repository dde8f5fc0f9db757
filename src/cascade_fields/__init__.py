# src/cascade_fields/__init__.py
"""
Cascade Fields — propagação declarativa de valores de campo entre registros.

Quando um registro pai muda, valores configurados são copiados para os
registros filhos relacionados; quando um filho é criado ou re-vinculado,
recebe os valores atuais do pai.

Arquitetura em alto nível:
    - core.config  → fonte, merge, modelo, validação e hashing da configuração
    - core.records → tipos de valor e protocolo do record store
    - core.runtime → eventos, resultados e contexto de diagnóstico
    - core.engine  → orquestração e dispatcher de eventos
    - cascade      → gatilhos, valores, filtros, localização e escrita em lotes

Limites explícitos:
    - Um evento por vez, de forma síncrona
    - Não é um engine de regras genérico nem um pipeline de ETL
"""

from cascade_fields.core.config import (
    CascadeConfiguration,
    FieldMapping,
    RelatedEntityConfig,
    RelationshipMode,
    load_configuration,
    parse_configuration,
    validate_configuration,
)
from cascade_fields.core.engine.dispatcher import MAX_DEPTH, CascadeEngine
from cascade_fields.core.engine.orchestrator import CascadeService
from cascade_fields.core.exceptions import (
    CascadeConfigurationError,
    CascadeException,
    CascadeExecutionError,
    FilterFormatError,
)
from cascade_fields.core.records import (
    EntityReference,
    InMemoryRecordStore,
    Money,
    OptionSetValue,
    Record,
    RecordStore,
)
from cascade_fields.core.runtime import (
    CascadeResult,
    CascadeStatus,
    ChangeEvent,
    ExecutionStage,
    NullDiagnostics,
    Operation,
    TraceContext,
)

__all__ = [
    "MAX_DEPTH",
    "CascadeConfiguration",
    "CascadeConfigurationError",
    "CascadeEngine",
    "CascadeException",
    "CascadeExecutionError",
    "CascadeResult",
    "CascadeService",
    "CascadeStatus",
    "ChangeEvent",
    "EntityReference",
    "ExecutionStage",
    "FieldMapping",
    "FilterFormatError",
    "InMemoryRecordStore",
    "Money",
    "NullDiagnostics",
    "Operation",
    "OptionSetValue",
    "Record",
    "RecordStore",
    "RelatedEntityConfig",
    "RelationshipMode",
    "TraceContext",
    "load_configuration",
    "parse_configuration",
    "validate_configuration",
]
