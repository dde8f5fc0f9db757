# src/cascade_fields/core/runtime/context.py
"""
Contexto de diagnóstico de uma invocação do engine.

Este módulo define o `TraceContext`, a estrutura canônica usada pelos
componentes do cascade para registrar eventos estruturados e warnings
durante o processamento de um único evento de mudança.

O TraceContext atua como o único meio permitido de:
    - registro de logs estruturados de execução
    - coleta de warnings não fatais agrupados por operação
    - medição de duração de operações (begin/end)

Princípios fundamentais:
    - Isolamento por invocação (cada evento possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - A presença ou ausência de diagnóstico nunca altera o resultado

Invariantes:
    - Eventos sempre incluem `trace_id` e `operation`
    - Eventos de nível `error` são registrados mesmo com verbosidade desligada
    - Warnings são agrupados por operação e sempre coletados

Limites explícitos:
    - Não executa cascade
    - Não persiste eventos automaticamente
    - Não envia eventos para sistemas externos
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable
import time
import uuid


DEFAULT_OPERATION = "cascade"


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Destino de diagnóstico aceito por todos os componentes do engine."""

    def info(self, message: str, **extra: Any) -> None:
        ...

    def warning(self, message: str, **extra: Any) -> None:
        ...

    def error(self, message: str, **extra: Any) -> None:
        ...

    def debug(self, message: str, **extra: Any) -> None:
        ...

    def begin(self, name: str) -> None:
        ...

    def end(self, name: str) -> None:
        ...


class NullDiagnostics:
    """Sink que descarta tudo; usado quando o host não fornece contexto."""

    def info(self, message: str, **extra: Any) -> None:
        return None

    def warning(self, message: str, **extra: Any) -> None:
        return None

    def error(self, message: str, **extra: Any) -> None:
        return None

    def debug(self, message: str, **extra: Any) -> None:
        return None

    def begin(self, name: str) -> None:
        return None

    def end(self, name: str) -> None:
        return None


@dataclass
class TraceContext:
    """
    Contexto de diagnóstico de uma invocação.

    O TraceContext consolida:
        - identidade da invocação (trace_id, created_at)
        - logs estruturados (`events`)
        - warnings agrupados pela operação corrente (`warnings`)
        - pilha de operações abertas com `begin`/`end`

    Decisões arquiteturais:
        - `enabled` controla apenas a verbosidade (info/debug/warning em
          `events`); erros e a coleta de warnings independem dele
        - A operação corrente é o topo da pilha aberta por `begin`
        - `elapsed_ms` é medido desde a criação do contexto

    Limites explícitos:
        - Não é thread-safe; cada invocação cria o seu
        - Não decide políticas de execução
    """

    trace_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    enabled: bool = True
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    _stack: List[Tuple[str, float]] = field(default_factory=list, init=False, repr=False)
    _t0: float = field(default_factory=time.perf_counter, init=False, repr=False)

    # -----------------------------
    # Verbosidade
    # -----------------------------
    def set_enabled(self, enabled: bool) -> None:
        self.enabled = bool(enabled)

    @property
    def operation(self) -> str:
        if not self._stack:
            return DEFAULT_OPERATION
        return self._stack[-1][0]

    def _elapsed_ms(self, since: float) -> float:
        return round((time.perf_counter() - since) * 1000.0, 3)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, level: str, message: str, operation: Optional[str] = None, **extra: Any) -> None:
        if not self.enabled and level != "error":
            return
        event = {
            "trace_id": self.trace_id,
            "operation": operation or self.operation,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "elapsed_ms": self._elapsed_ms(self._t0),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, operation: str, message: str) -> None:
        if operation not in self.warnings:
            self.warnings[operation] = []
        self.warnings[operation].append(message)

    def info(self, message: str, **extra: Any) -> None:
        self.log(level="info", message=message, **extra)

    def debug(self, message: str, **extra: Any) -> None:
        self.log(level="debug", message=message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        self.add_warning(operation=self.operation, message=message)
        self.log(level="warning", message=message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self.log(level="error", message=message, **extra)

    # -----------------------------
    # Operações
    # -----------------------------
    def begin(self, name: str) -> None:
        self._stack.append((name, time.perf_counter()))
        self.log(level="debug", message=f"begin {name}")

    def end(self, name: str) -> None:
        # Fecha até a operação pedida; nomes desconhecidos são ignorados.
        for i in range(len(self._stack) - 1, -1, -1):
            if self._stack[i][0] == name:
                started = self._stack[i][1]
                self.log(
                    level="debug",
                    message=f"end {name}",
                    duration_ms=self._elapsed_ms(started),
                )
                del self._stack[i:]
                return

    # -----------------------------
    # Consulta
    # -----------------------------
    def all_warnings(self) -> List[str]:
        out: List[str] = []
        for msgs in self.warnings.values():
            out.extend(msgs)
        return out

    def errors(self) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("level") == "error"]
