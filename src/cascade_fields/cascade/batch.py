"""
Execução das atualizações em lotes.

Cada lote (até `BATCH_SIZE` registros) é submetido com uma única chamada a
`RecordStore.execute_batch`, que aplica todos os itens mesmo quando alguns
falham. Regras de contabilidade:

    - falha de um item → um `RecordError` com o id e a mensagem
    - exceção do lote inteiro → todos os itens do lote contam como falha
      (nota genérica) e o próximo lote segue normalmente
    - nunca há retentativa
    - cancelamento só é verificado entre lotes

Invariante: `success_count + error_count` é igual ao número de registros
efetivamente submetidos.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from cascade_fields.core.errors import batch_submission_failed, record_update_failed
from cascade_fields.core.records.store import RecordStore
from cascade_fields.core.records.types import Record
from cascade_fields.core.runtime.context import DiagnosticsSink, NullDiagnostics
from cascade_fields.core.runtime.types import BatchUpdateResult, RecordError

BATCH_SIZE = 50


def _chunks(items: Sequence[Record], size: int) -> List[Sequence[Record]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def build_updates(records: Sequence[Record], values: Mapping[str, Any]) -> List[Record]:
    """Um registro de atualização (apenas id + valores) por registro localizado."""
    return [
        Record(logical_name=r.logical_name, id=r.id, attributes=dict(values))
        for r in records
    ]


def apply_updates(
    store: RecordStore,
    records: Sequence[Record],
    values: Mapping[str, Any],
    ctx: Optional[DiagnosticsSink] = None,
    *,
    batch_size: int = BATCH_SIZE,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> BatchUpdateResult:
    ctx = ctx or NullDiagnostics()
    if not records:
        return BatchUpdateResult()

    updates = build_updates(records, values)
    batches = _chunks(updates, batch_size)
    ctx.info(f"Updating {len(updates)} records in batches of {batch_size}", batches=len(batches))

    success = 0
    failed = 0
    errors: List[RecordError] = []
    cancelled = False

    for batch_index, batch in enumerate(batches):
        if batch_index > 0 and should_cancel is not None and should_cancel():
            cancelled = True
            ctx.warning(
                f"Cancellation requested; {len(updates) - success - failed} records not submitted.",
                batch_index=batch_index,
            )
            break

        try:
            responses = store.execute_batch(batch)
        except Exception as e:  # noqa: BLE001
            payload = batch_submission_failed(
                batch_index=batch_index,
                batch_size=len(batch),
                reason=str(e) or e.__class__.__name__,
            )
            ctx.error("ExecuteMultiple batch failed completely", error=payload.to_dict())
            failed += len(batch)
            errors.extend(
                RecordError(record_id=r.id, message=f"Batch submission failed: {payload.details['reason']}")
                for r in batch
            )
            continue

        by_index: Dict[int, Any] = {resp.index: resp for resp in responses}
        for i, record in enumerate(batch):
            resp = by_index.get(i)
            if resp is None:
                # Item sem resposta do store: tratado como falha.
                failed += 1
                errors.append(RecordError(record_id=record.id, message="No response returned for update"))
                continue
            if resp.ok:
                success += 1
            else:
                failed += 1
                errors.append(RecordError(record_id=record.id, message=str(resp.fault)))
                ctx.error(
                    f"Batch update failed for record {record.id} at index {i}: {resp.fault}",
                    error=record_update_failed(record_id=record.id, index=i, reason=str(resp.fault)).to_dict(),
                )

        ctx.debug(
            f"Batch progress: {success + failed}/{len(updates)} records processed",
            batch_index=batch_index,
        )

    ctx.info(f"Update complete: {success} successful, {failed} failed")
    return BatchUpdateResult(
        success_count=success,
        error_count=failed,
        errors=errors,
        cancelled=cancelled,
    )
