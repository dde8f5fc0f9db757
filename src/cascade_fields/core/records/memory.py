"""
Record store em memória baseado em pandas.

Implementação de referência do protocolo `RecordStore`, usada pelos testes
e por hosts locais (ex.: replay de eventos a partir de um extrato CSV).
Cada tipo de entidade é uma `pandas.DataFrame` de dtype `object`, com a
chave primária na coluna `<entidade>id`.

Notas de implementação (v1):
  - Células ausentes (NaN introduzido por concat/colunas novas) são
    tratadas como null e nunca aparecem em `Record.attributes`.
  - Condições comparam valores normalizados: EntityReference → id,
    OptionSetValue → código, Money → valor.
  - Semântica SQL para nulls: `eq`, `ne`, `gt`, `lt`, `in`, `notin` e
    `like` nunca selecionam linhas com valor null.
"""

from __future__ import annotations

import math
import re
import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from uuid import UUID

import pandas as pd

from .store import (
    AttributeMetadata,
    BatchItemResponse,
    Condition,
    ConditionOperator,
    RecordQuery,
)
from .types import EntityReference, Money, OptionSetValue, Record, primary_key_field


class RecordNotFoundError(LookupError):
    """Registro inexistente no store."""


def _is_null(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and math.isnan(v):
        return True
    return False


def _comparable(v: Any) -> Any:
    if _is_null(v):
        return None
    if isinstance(v, EntityReference):
        return v.id
    if isinstance(v, OptionSetValue):
        return v.value
    if isinstance(v, Money):
        return v.value
    return v


def _like_regex(pattern: str) -> "re.Pattern[str]":
    parts: List[str] = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _ordered(op: Callable[[Any, Any], bool], expected: Any) -> Callable[[Any], bool]:
    def _check(v: Any) -> bool:
        if v is None or expected is None:
            return False
        try:
            return bool(op(v, expected))
        except TypeError:
            return False

    return _check


def _predicate(cond: Condition) -> Callable[[Any], bool]:
    op = cond.operator

    if op is ConditionOperator.NULL:
        return lambda v: v is None
    if op is ConditionOperator.NOT_NULL:
        return lambda v: v is not None

    if op in (ConditionOperator.IN, ConditionOperator.NOT_IN):
        raw = cond.value if isinstance(cond.value, (list, tuple, set)) else [cond.value]
        allowed = [_comparable(x) for x in raw]
        if op is ConditionOperator.IN:
            return lambda v: v is not None and v in allowed
        return lambda v: v is not None and v not in allowed

    expected = _comparable(cond.value)

    if op is ConditionOperator.EQ:
        return lambda v: v is not None and v == expected
    if op is ConditionOperator.NE:
        return lambda v: v is not None and v != expected
    if op is ConditionOperator.GT:
        return _ordered(lambda a, b: a > b, expected)
    if op is ConditionOperator.LT:
        return _ordered(lambda a, b: a < b, expected)
    if op is ConditionOperator.LIKE:
        rx = _like_regex(str(expected if expected is not None else ""))
        return lambda v: v is not None and rx.fullmatch(str(v)) is not None

    raise ValueError(f"Unsupported condition operator: {op}")


class InMemoryRecordStore:
    """Record store em memória (uma DataFrame por tipo de entidade)."""

    def __init__(self, metadata: Optional[Iterable[AttributeMetadata]] = None) -> None:
        self._tables: Dict[str, pd.DataFrame] = {}
        self._metadata: Dict[Tuple[str, str], AttributeMetadata] = {}
        self.writes: List[Record] = []
        for m in metadata or []:
            self.add_metadata(m)

    # -----------------------------
    # Seed / inspeção
    # -----------------------------

    def add_metadata(self, metadata: AttributeMetadata) -> None:
        key = (metadata.entity_name.lower(), metadata.logical_name.lower())
        self._metadata[key] = metadata

    def add_records(self, entity_name: str, rows: Iterable[Mapping[str, Any]]) -> List[UUID]:
        """Insere linhas; gera o id quando `<entidade>id` não for informado."""
        pk = primary_key_field(entity_name)
        prepared: List[Dict[str, Any]] = []
        ids: List[UUID] = []
        for row in rows:
            r = dict(row)
            rid = r.get(pk) or uuid.uuid4()
            r[pk] = rid
            ids.append(rid)
            prepared.append(r)

        if not prepared:
            return ids

        incoming = pd.DataFrame(prepared, dtype=object)
        current = self._tables.get(entity_name)
        if current is None or current.empty:
            self._tables[entity_name] = incoming.reset_index(drop=True)
        else:
            self._tables[entity_name] = pd.concat([current, incoming], ignore_index=True).astype(object)
        return ids

    def frame(self, entity_name: str) -> pd.DataFrame:
        """Cópia da tabela de uma entidade (para inspeção em testes/relatórios)."""
        return self._table(entity_name).copy()

    def get(self, entity_name: str, record_id: UUID) -> Record:
        """Registro completo (todas as colunas não nulas)."""
        table = self._table(entity_name)
        idx = self._row_index(entity_name, table, record_id)
        return self._to_record(entity_name, table, idx, list(table.columns))

    # -----------------------------
    # Helpers internos
    # -----------------------------

    def _table(self, entity_name: str) -> pd.DataFrame:
        table = self._tables.get(entity_name)
        if table is None:
            pk = primary_key_field(entity_name)
            table = pd.DataFrame({pk: pd.Series([], dtype=object)})
            self._tables[entity_name] = table
        return table

    def _row_index(self, entity_name: str, table: pd.DataFrame, record_id: Optional[UUID]) -> Any:
        pk = primary_key_field(entity_name)
        if record_id is None or table.empty or pk not in table.columns:
            raise RecordNotFoundError(f"{entity_name} with id = {record_id} does not exist")
        hits = table.index[table[pk].map(lambda v: v == record_id).astype(bool)]
        if len(hits) == 0:
            raise RecordNotFoundError(f"{entity_name} with id = {record_id} does not exist")
        return hits[0]

    def _to_record(self, entity_name: str, table: pd.DataFrame, idx: Any, columns: Sequence[str]) -> Record:
        pk = primary_key_field(entity_name)
        attrs: Dict[str, Any] = {}
        for col in columns:
            if col not in table.columns:
                continue
            value = table.at[idx, col]
            if not _is_null(value):
                attrs[col] = value
        return Record(logical_name=entity_name, id=table.at[idx, pk], attributes=attrs)

    def _apply_update(self, record: Record) -> None:
        table = self._table(record.logical_name)
        idx = self._row_index(record.logical_name, table, record.id)
        pk = primary_key_field(record.logical_name)
        for col, value in record.attributes.items():
            if col == pk:
                continue
            if col not in table.columns:
                table[col] = pd.Series([None] * len(table), index=table.index, dtype=object)
            table.at[idx, col] = value
        self.writes.append(
            Record(logical_name=record.logical_name, id=record.id, attributes=dict(record.attributes))
        )

    # -----------------------------
    # RecordStore
    # -----------------------------

    def retrieve(self, entity_name: str, record_id: UUID, columns: Sequence[str]) -> Record:
        table = self._table(entity_name)
        idx = self._row_index(entity_name, table, record_id)
        return self._to_record(entity_name, table, idx, columns)

    def retrieve_multiple(self, query: RecordQuery) -> List[Record]:
        table = self._table(query.entity_name)
        if table.empty:
            return []

        mask = pd.Series(True, index=table.index)
        for cond in query.conditions:
            pred = _predicate(cond)
            if cond.field not in table.columns:
                if not pred(None):
                    return []
                continue
            # Normaliza e avalia em um único map: o resultado é sempre bool.
            mask &= table[cond.field].map(lambda v, p=pred: bool(p(_comparable(v)))).astype(bool)

        selected = table[mask]
        if query.top_count is not None:
            selected = selected.head(query.top_count)

        return [
            self._to_record(query.entity_name, table, idx, query.columns)
            for idx in selected.index
        ]

    def update(self, record: Record) -> None:
        self._apply_update(record)

    def execute_batch(self, records: Sequence[Record]) -> List[BatchItemResponse]:
        responses: List[BatchItemResponse] = []
        for i, record in enumerate(records):
            try:
                self._apply_update(record)
            except Exception as e:  # noqa: BLE001
                responses.append(BatchItemResponse(index=i, record_id=record.id, fault=str(e) or e.__class__.__name__))
            else:
                responses.append(BatchItemResponse(index=i, record_id=record.id))
        return responses

    def get_attribute_metadata(self, entity_name: str, attribute_name: str) -> Optional[AttributeMetadata]:
        return self._metadata.get((entity_name.lower(), attribute_name.lower()))
