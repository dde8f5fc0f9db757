# src/cascade_fields/core/engine/orchestrator.py
"""
Orquestrador do cascade (CascadeService).

Dois pontos de entrada, um para cada sentido de propagação:

    - on_parent_changed
        pai atualizado → para cada RelatedEntityConfig, na ordem configurada:
        gatilhos → valores → filhos → escrita em lotes
    - on_child_attached_or_relinked
        filho criado com vínculo ou re-vinculado → lê o pai e aplica os
        valores mapeados no próprio filho (no target em pré-operação, ou
        com uma atualização separada em pós-operação)

Decisões arquiteturais:
    - Cada RelatedEntityConfig é uma unidade independente (`cascade_related`);
      um filtro inválido marca apenas aquela unidade como FAILED
    - Falhas de escrita por registro ficam no resultado, nunca são lançadas
    - Exceções não classificadas são registradas e relançadas
    - O cache de metadados pertence ao serviço e é compartilhado entre
      invocações

Invariantes:
    - A configuração nunca é mutada
    - O pre-image nunca é mutado
    - Reexecutar o mesmo evento produz as mesmas escritas

Limites explícitos:
    - Não valida configuração (responsabilidade do dispatcher)
    - Não aplica guarda de profundidade
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from cascade_fields.cascade.batch import apply_updates
from cascade_fields.cascade.locator import find_children, find_parent
from cascade_fields.cascade.triggers import should_cascade
from cascade_fields.cascade.values import AttributeMetadataCache, resolve_all, resolve_value
from cascade_fields.core.config.hashing import compute_config_hash
from cascade_fields.core.config.model import CascadeConfiguration, RelatedEntityConfig
from cascade_fields.core.errors import engine_execution_error, filter_format_invalid
from cascade_fields.core.exceptions import FilterFormatError
from cascade_fields.core.records.store import RecordStore
from cascade_fields.core.records.types import Record
from cascade_fields.core.runtime.context import DiagnosticsSink, NullDiagnostics
from cascade_fields.core.runtime.types import (
    CascadeResult,
    CascadeStatus,
    ExecutionStage,
    Operation,
    RelatedCascadeResult,
)

CANCELLED = "cancelled"


def _skipped(related: RelatedEntityConfig, summary: str) -> RelatedCascadeResult:
    return RelatedCascadeResult(entity_name=related.entity_name, status=CascadeStatus.SKIPPED, summary=summary)


def _aggregate_status(results: List[RelatedCascadeResult]) -> CascadeStatus:
    if any(r.status == CascadeStatus.FAILED for r in results):
        return CascadeStatus.FAILED
    if any(r.status == CascadeStatus.SUCCESS for r in results):
        return CascadeStatus.SUCCESS
    return CascadeStatus.SKIPPED


class CascadeService:
    """Orquestra os componentes do cascade sobre um RecordStore."""

    def __init__(self, store: RecordStore, *, metadata_cache: Optional[AttributeMetadataCache] = None):
        self.store = store
        self.metadata = metadata_cache or AttributeMetadataCache(store)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _result(
        self,
        *,
        config: CascadeConfiguration,
        ctx: DiagnosticsSink,
        status: CascadeStatus,
        summary: str,
        related: Optional[List[RelatedCascadeResult]] = None,
        values: Optional[Dict[str, Any]] = None,
    ) -> CascadeResult:
        all_warnings = getattr(ctx, "all_warnings", None)
        return CascadeResult(
            status=status,
            summary=summary,
            trace_id=getattr(ctx, "trace_id", None),
            config_hash=compute_config_hash(config.to_dict()),
            related=list(related or []),
            values=dict(values or {}),
            warnings=list(all_warnings()) if callable(all_warnings) else [],
        )

    # ------------------------------------------------------------------
    # Pai → filhos
    # ------------------------------------------------------------------

    def cascade_related(
        self,
        target: Record,
        pre_image: Optional[Record],
        related: RelatedEntityConfig,
        config: CascadeConfiguration,
        ctx: Optional[DiagnosticsSink] = None,
        *,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> RelatedCascadeResult:
        """Propaga a mudança do pai para uma única RelatedEntityConfig."""
        ctx = ctx or NullDiagnostics()
        op = f"cascade_related:{related.entity_name}"
        ctx.begin(op)
        try:
            if not should_cascade(related, target, pre_image, ctx):
                return _skipped(related, "no trigger field changed")

            values = resolve_all(target, pre_image, related, metadata=self.metadata, ctx=ctx)
            if not values:
                ctx.info(f"No values to cascade for {related.entity_name}")
                return _skipped(related, "no values to cascade")

            if target.id is None:
                ctx.warning("Parent record has no id; cannot locate related records.")
                return _skipped(related, "parent has no id")

            try:
                children = find_children(self.store, target.id, related, config.parent_entity, ctx)
            except FilterFormatError as e:
                payload = filter_format_invalid(
                    filter_criteria=related.filter_criteria or "",
                    reason=e.details.get("reason") or e.message,
                    entity_name=related.entity_name,
                    token=e.details.get("token"),
                )
                ctx.error(f"Invalid filter criteria for {related.entity_name}", error=payload.to_dict())
                return RelatedCascadeResult(
                    entity_name=related.entity_name,
                    status=CascadeStatus.FAILED,
                    summary=e.message,
                    values=values,
                    error=payload.to_dict(),
                )

            ctx.info(f"Found {len(children)} related {related.entity_name} records")
            if not children:
                return RelatedCascadeResult(
                    entity_name=related.entity_name,
                    status=CascadeStatus.SUCCESS,
                    summary="no related records",
                    values=values,
                )

            updates = apply_updates(self.store, children, values, ctx, should_cancel=should_cancel)
            summary = (
                CANCELLED
                if updates.cancelled
                else f"{updates.success_count} updated, {updates.error_count} failed"
            )
            return RelatedCascadeResult(
                entity_name=related.entity_name,
                status=CascadeStatus.SUCCESS,
                summary=summary,
                matched_count=len(children),
                values=values,
                updates=updates,
            )
        finally:
            ctx.end(op)

    def on_parent_changed(
        self,
        target: Record,
        pre_image: Optional[Record],
        config: CascadeConfiguration,
        ctx: Optional[DiagnosticsSink] = None,
        *,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> CascadeResult:
        ctx = ctx or NullDiagnostics()
        ctx.begin("on_parent_changed")
        results: List[RelatedCascadeResult] = []
        cancelled = False
        try:
            related_entities = list(config.related_entities)
            for i, related in enumerate(related_entities):
                if should_cancel is not None and should_cancel():
                    cancelled = True
                    ctx.warning(f"Cancellation requested; {len(related_entities) - i} related configurations skipped.")
                    results.extend(_skipped(r, CANCELLED) for r in related_entities[i:])
                    break

                result = self.cascade_related(
                    target, pre_image, related, config, ctx, should_cancel=should_cancel
                )
                results.append(result)
                if result.updates.cancelled:
                    cancelled = True
                    results.extend(_skipped(r, CANCELLED) for r in related_entities[i + 1:])
                    break
        except Exception as e:
            ctx.error(
                "Error in on_parent_changed",
                error=engine_execution_error(exc=e, operation="on_parent_changed").to_dict(),
            )
            raise
        finally:
            ctx.end("on_parent_changed")

        if cancelled:
            status, summary = CascadeStatus.SKIPPED, CANCELLED
        else:
            status = _aggregate_status(results)
            if results and all(r.status == CascadeStatus.SKIPPED for r in results):
                ctx.info("No related configuration triggered a cascade")
            success = sum(r.updates.success_count for r in results)
            failed = sum(r.updates.error_count for r in results)
            summary = f"{len(results)} related configurations processed: {success} updated, {failed} failed"
        return self._result(config=config, ctx=ctx, status=status, summary=summary, related=results)

    # ------------------------------------------------------------------
    # Filho → pai
    # ------------------------------------------------------------------

    def on_child_attached_or_relinked(
        self,
        target: Record,
        pre_image: Optional[Record],
        config: CascadeConfiguration,
        *,
        operation: Operation,
        stage: ExecutionStage,
        ctx: Optional[DiagnosticsSink] = None,
    ) -> CascadeResult:
        ctx = ctx or NullDiagnostics()
        ctx.begin("on_child_attached_or_relinked")
        try:
            related_configs = config.related_for(target.logical_name)
            if not related_configs:
                ctx.info(f"No related entity configuration found for '{target.logical_name}'. Skipping.")
                return self._result(
                    config=config,
                    ctx=ctx,
                    status=CascadeStatus.SKIPPED,
                    summary="no related configuration",
                )

            aggregated: Dict[str, Any] = {}
            results: List[RelatedCascadeResult] = []
            for related in related_configs:
                parent = find_parent(
                    self.store, target, pre_image, related, config.parent_entity, operation, ctx
                )
                if parent is None:
                    results.append(_skipped(related, "no parent to apply"))
                    continue

                values: Dict[str, Any] = {}
                for mapping in related.field_mappings:
                    if not parent.contains(mapping.source_field):
                        continue
                    values[mapping.target_field] = resolve_value(
                        parent, mapping, related.entity_name, metadata=self.metadata, ctx=ctx
                    )

                if not values:
                    ctx.info("No values resolved from parent to apply to child for this mapping set.")
                    results.append(_skipped(related, "no values resolved"))
                    continue

                aggregated.update(values)
                results.append(
                    RelatedCascadeResult(
                        entity_name=related.entity_name,
                        status=CascadeStatus.SUCCESS,
                        summary=f"{len(values)} values resolved from parent",
                        matched_count=1,
                        values=values,
                    )
                )

            if not aggregated:
                ctx.info("No values resolved from any related entity configuration; nothing to apply to child.")
                return self._result(
                    config=config,
                    ctx=ctx,
                    status=CascadeStatus.SKIPPED,
                    summary="nothing to apply",
                    related=results,
                )

            if stage == ExecutionStage.PRE_OPERATION:
                for name, value in aggregated.items():
                    target[name] = value
                ctx.info(f"Applied {len(aggregated)} mapped values to child in PreOperation.")
                summary = f"applied {len(aggregated)} values to target"
                status = CascadeStatus.SUCCESS
            elif target.id is None:
                ctx.warning("Cannot post-update child without an ID; ensure PreOperation stage for Create.")
                summary = "child has no id; values not applied"
                status = CascadeStatus.SKIPPED
            else:
                self.store.update(Record(logical_name=target.logical_name, id=target.id, attributes=dict(aggregated)))
                ctx.info(f"Updated child with {len(aggregated)} mapped values post-operation.")
                summary = f"updated child with {len(aggregated)} values"
                status = CascadeStatus.SUCCESS

            return self._result(
                config=config,
                ctx=ctx,
                status=status,
                summary=summary,
                related=results,
                values=aggregated,
            )
        except Exception as e:
            ctx.error(
                "Error in on_child_attached_or_relinked",
                error=engine_execution_error(exc=e, operation="on_child_attached_or_relinked").to_dict(),
            )
            raise
        finally:
            ctx.end("on_child_attached_or_relinked")
