"""
Cascade Fields — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Cascade Fields.

Erros reportados pelo engine fazem parte do contrato operacional do sistema
e aparecem nos objetos de resultado (nunca como stack trace cru), devendo ser:
- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhuma decisão implícita é permitida.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CascadeErrorPayload:
    """
    Payload canônico de erro do Cascade Fields.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Configuração
CONFIGURATION_INVALID = "CONFIGURATION_INVALID"

# Filtros
FILTER_FORMAT_INVALID = "FILTER_FORMAT_INVALID"

# Escrita em lote
BATCH_SUBMISSION_FAILED = "BATCH_SUBMISSION_FAILED"
RECORD_UPDATE_FAILED = "RECORD_UPDATE_FAILED"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def configuration_invalid(*, reason: str, error_class: Optional[str] = None) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=CONFIGURATION_INVALID,
        message="Configuração de cascade não pôde ser carregada",
        details={"reason": reason, "error_class": error_class},
        hint="Verifique o arquivo/texto de configuração (JSON ou YAML com raiz em mapeamento).",
    )


def filter_format_invalid(
    *,
    filter_criteria: str,
    reason: str,
    entity_name: Optional[str] = None,
    token: Optional[str] = None,
    hint: str = "Corrija o filterCriteria no formato campo|operador|valor separado por ';'.",
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=FILTER_FORMAT_INVALID,
        message="Filtro inválido para a entidade relacionada",
        details={
            "filter_criteria": filter_criteria,
            "reason": reason,
            "entity_name": entity_name,
            "token": token,
        },
        hint=hint,
    )


def batch_submission_failed(
    *,
    batch_index: int,
    batch_size: int,
    reason: str,
) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=BATCH_SUBMISSION_FAILED,
        message="Lote de atualizações falhou por completo",
        details={
            "batch_index": batch_index,
            "batch_size": batch_size,
            "reason": reason,
        },
        hint="Verifique a disponibilidade do record store; nenhuma retentativa é feita pelo engine.",
    )


def record_update_failed(*, record_id: Any, index: int, reason: str) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=RECORD_UPDATE_FAILED,
        message="Atualização de registro relacionado falhou",
        details={"record_id": str(record_id), "index": index, "reason": reason},
        hint="O registro permanece com os valores anteriores; os demais itens do lote seguem.",
    )


def engine_execution_error(*, exc: BaseException, operation: Optional[str] = None) -> CascadeErrorPayload:
    return CascadeErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={
            "exception_class": exc.__class__.__name__,
            "operation": operation,
        },
        hint="Verifique o trace da execução e a configuração do cascade",
    )
