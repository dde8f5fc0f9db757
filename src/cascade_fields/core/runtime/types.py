# src/cascade_fields/core/runtime/types.py
"""
Tipos canônicos de execução do Cascade Fields.

Este módulo define as estruturas e enums que padronizam a comunicação
entre o host, o dispatcher, o orquestrador e os componentes do cascade.

Componentes principais:
    - Operation        → tipo de mensagem do evento (CREATE, UPDATE)
    - ExecutionStage   → estágio do pipeline do host (pré/pós operação)
    - ChangeEvent      → evento de mudança entregue pelo host
    - CascadeStatus    → estados finais (SUCCESS, SKIPPED, FAILED)
    - RecordError / BatchUpdateResult → contabilidade de escrita em lote
    - RelatedCascadeResult / CascadeResult → resultados imutáveis

Invariantes:
    - Enums possuem valores estáveis e serializáveis
    - Resultados são imutáveis (frozen)
    - Nenhuma lógica de execução vive neste módulo
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional
from uuid import UUID

from cascade_fields.core.records.types import Record


class Operation(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class ExecutionStage(IntEnum):
    """Estágio de registro no pipeline do host (valores numéricos do host)."""

    PRE_VALIDATION = 10
    PRE_OPERATION = 20
    POST_OPERATION = 40


class CascadeStatus(str, Enum):
    """
    Estados finais de processamento.

    Estados definidos:
        - SUCCESS: processado (falhas por registro ficam em `updates`)
        - SKIPPED: não executado (não aplicável, profundidade, cancelamento)
        - FAILED: interrompido por erro (ex.: filtro inválido)
    """

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ChangeEvent:
    """
    Evento de mudança entregue pelo host.

    Campos:
        - entity_name: tipo de entidade do registro alterado
        - operation: CREATE ou UPDATE
        - target: snapshot pós-alteração (apenas campos enviados)
        - pre_image: snapshot anterior (ausente em CREATE ou se não registrado)
        - stage: estágio do pipeline do host
        - depth: profundidade de reentrada (1 = disparado pelo usuário)
    """

    entity_name: str
    operation: Operation
    target: Record
    pre_image: Optional[Record] = None
    stage: ExecutionStage = ExecutionStage.POST_OPERATION
    depth: int = 1


@dataclass(frozen=True)
class RecordError:
    record_id: Optional[UUID]
    message: str


@dataclass(frozen=True)
class BatchUpdateResult:
    """Contabilidade de escrita: sucesso + erro == registros submetidos."""

    success_count: int = 0
    error_count: int = 0
    errors: List[RecordError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return self.success_count + self.error_count


@dataclass(frozen=True)
class RelatedCascadeResult:
    """
    Resultado do processamento de uma RelatedEntityConfig.

    Campos:
        - entity_name: entidade filha configurada
        - status: estado final
        - summary: resumo textual
        - matched_count: registros localizados
        - values: valores resolvidos (campo destino → valor)
        - updates: contabilidade de escrita
        - error: CascadeErrorPayload serializado, quando FAILED
    """

    entity_name: str
    status: CascadeStatus
    summary: str
    matched_count: int = 0
    values: Dict[str, Any] = field(default_factory=dict)
    updates: BatchUpdateResult = field(default_factory=BatchUpdateResult)
    error: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class CascadeResult:
    """Resultado agregado de uma invocação (um evento de mudança)."""

    status: CascadeStatus
    summary: str
    trace_id: Optional[str] = None
    config_hash: Optional[str] = None
    related: List[RelatedCascadeResult] = field(default_factory=list)
    values: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(r.updates.success_count for r in self.related)

    @property
    def error_count(self) -> int:
        return sum(r.updates.error_count for r in self.related)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "summary": self.summary,
            "trace_id": self.trace_id,
            "config_hash": self.config_hash,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "warnings": list(self.warnings),
            "related": [
                {
                    "entity_name": r.entity_name,
                    "status": r.status.value,
                    "summary": r.summary,
                    "matched_count": r.matched_count,
                    "success_count": r.updates.success_count,
                    "error_count": r.updates.error_count,
                    "error": r.error,
                }
                for r in self.related
            ],
        }
