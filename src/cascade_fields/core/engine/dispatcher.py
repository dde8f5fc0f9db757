# src/cascade_fields/core/engine/dispatcher.py
"""
Dispatcher de eventos do Cascade Fields (CascadeEngine).

Ponto de entrada do host: recebe um ChangeEvent e a configuração e decide
qual caminho do orquestrador executar.

Sequência (v1):
    1. Guarda de profundidade: `depth > MAX_DEPTH` → SKIPPED com warning
    2. Verbosidade do diagnóstico conforme `enable_tracing`
    3. Validação da configuração (fatal)
    4. Aplicabilidade: configuração inativa ou entidade não configurada → SKIPPED
    5. Roteamento:
        - pai + UPDATE            → on_parent_changed (recomendado: pós-operação)
        - filho + CREATE/UPDATE   → on_child_attached_or_relinked (recomendado: pré-operação)
        - demais combinações      → SKIPPED

Erros:
    - CascadeException (configuração, filtro) propaga como está
    - Qualquer outra exceção é registrada e relançada como
      CascadeExecutionError, com a causa encadeada
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Union

from cascade_fields.core.config.errors import ConfigError
from cascade_fields.core.config.hashing import compute_config_hash
from cascade_fields.core.config.loader import build_configuration, parse_configuration
from cascade_fields.core.config.model import CascadeConfiguration
from cascade_fields.core.config.validation import validate_configuration
from cascade_fields.core.errors import configuration_invalid, engine_execution_error
from cascade_fields.core.exceptions import CascadeException, CascadeExecutionError
from cascade_fields.core.records.store import RecordStore
from cascade_fields.core.runtime.context import TraceContext
from cascade_fields.core.runtime.types import (
    CascadeResult,
    CascadeStatus,
    ChangeEvent,
    ExecutionStage,
    Operation,
)

from .orchestrator import CascadeService

MAX_DEPTH = 2

ConfigurationSource = Union[CascadeConfiguration, Dict[str, Any], str]


class CascadeEngine:
    """Engine canônico do Cascade Fields (dispatcher + orquestrador)."""

    def __init__(self, store: RecordStore, *, service: Optional[CascadeService] = None):
        self.store = store
        self.service = service or CascadeService(store)

    def _configuration(self, config: ConfigurationSource) -> CascadeConfiguration:
        if isinstance(config, str):
            return parse_configuration(config)
        if isinstance(config, dict):
            return build_configuration(config)
        validate_configuration(config)
        return config

    def _skipped(
        self,
        ctx: TraceContext,
        summary: str,
        config: Optional[CascadeConfiguration] = None,
    ) -> CascadeResult:
        return CascadeResult(
            status=CascadeStatus.SKIPPED,
            summary=summary,
            trace_id=ctx.trace_id,
            config_hash=compute_config_hash(config.to_dict()) if config is not None else None,
            warnings=ctx.all_warnings(),
        )

    def handle(
        self,
        event: ChangeEvent,
        config: ConfigurationSource,
        ctx: Optional[TraceContext] = None,
        *,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> CascadeResult:
        ctx = ctx or TraceContext()
        ctx.begin("handle")
        try:
            ctx.info(
                "Cascade execution started",
                entity_name=event.entity_name,
                operation_name=event.operation.value,
                stage=int(event.stage),
                depth=event.depth,
            )

            if event.depth > MAX_DEPTH:
                ctx.warning(
                    f"Execution depth {event.depth} exceeds maximum ({MAX_DEPTH}). "
                    "Stopping to prevent infinite loop."
                )
                return self._skipped(ctx, "depth limit exceeded")

            resolved = self._configuration(config)
            ctx.set_enabled(resolved.enable_tracing)
            ctx.debug(f"Tracing enabled: {resolved.enable_tracing}")

            if not resolved.is_active:
                ctx.info("Configuration is inactive")
                return self._skipped(ctx, "configuration inactive", resolved)

            is_parent = resolved.is_parent(event.entity_name)
            is_child = resolved.is_child(event.entity_name)
            if not (is_parent or is_child):
                ctx.info("Configuration not applicable to this entity")
                return self._skipped(ctx, "not applicable", resolved)

            if is_parent and event.operation is Operation.UPDATE:
                if event.stage != ExecutionStage.POST_OPERATION:
                    ctx.warning(
                        f"Parent update detected on unexpected stage {int(event.stage)}. "
                        "Recommended: 40 (Post-operation)"
                    )
                ctx.info("Beginning cascade operation to related children")
                return self.service.on_parent_changed(
                    event.target, event.pre_image, resolved, ctx, should_cancel=should_cancel
                )

            if is_child and event.operation in (Operation.CREATE, Operation.UPDATE):
                if event.stage != ExecutionStage.PRE_OPERATION:
                    ctx.warning(
                        f"Child handling on stage {int(event.stage)}. Recommended: 20 (Pre-operation)"
                    )
                return self.service.on_child_attached_or_relinked(
                    event.target,
                    event.pre_image,
                    resolved,
                    operation=event.operation,
                    stage=event.stage,
                    ctx=ctx,
                )

            ctx.info("No applicable execution mode for this context.")
            return self._skipped(ctx, "no applicable execution mode", resolved)

        except ConfigError as e:
            payload = configuration_invalid(reason=str(e), error_class=e.__class__.__name__)
            ctx.error("Cascade configuration could not be loaded", error=payload.to_dict())
            raise
        except CascadeException as e:
            ctx.error("Cascade execution failed with validation error", error=e.to_payload().to_dict())
            raise
        except Exception as e:
            payload = engine_execution_error(exc=e, operation="handle")
            ctx.error("Cascade execution failed with unexpected error", error=payload.to_dict())
            raise CascadeExecutionError(
                f"Cascade encountered an unexpected error: {e}. See trace log for details.",
                details=payload.details,
                hint=payload.hint,
            ) from e
        finally:
            ctx.end("handle")
