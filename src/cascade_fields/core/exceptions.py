"""
Cascade Fields — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Cascade Fields.

Objetivo:
- Permitir que componentes do engine levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para CascadeErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Exceções devem carregar apenas dados estruturados (serializáveis).
- Apenas erros de configuração e erros não classificados saem do engine;
  falhas de escrita são absorvidas nos objetos de resultado.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import CascadeErrorPayload


@dataclass(frozen=True)
class CascadeException(Exception):
    """Base class para exceções internas do Cascade Fields.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_payload(self) -> CascadeErrorPayload:
        return CascadeErrorPayload(
            type=self.__class__.__name__,
            message=self.message,
            details=dict(self.details or {}),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CascadeConfigurationError(CascadeException):
    """Configuração de cascade estruturalmente inválida (fatal, sem retry)."""


# ---------------------------------------------------------------------------
# Filtros
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterFormatError(CascadeException):
    """filterCriteria malformado ou inseguro para a camada de consulta."""


# ---------------------------------------------------------------------------
# Engine / Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CascadeExecutionError(CascadeException):
    """Erro inesperado durante a orquestração (encapsulado para o host)."""
