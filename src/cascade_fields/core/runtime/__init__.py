# src/cascade_fields/core/runtime/__init__.py

"""
Runtime do Cascade Fields: eventos, resultados e contexto de diagnóstico.
"""

from .context import DiagnosticsSink, NullDiagnostics, TraceContext
from .types import (
    BatchUpdateResult,
    CascadeResult,
    CascadeStatus,
    ChangeEvent,
    ExecutionStage,
    Operation,
    RecordError,
    RelatedCascadeResult,
)

__all__ = [
    "BatchUpdateResult",
    "CascadeResult",
    "CascadeStatus",
    "ChangeEvent",
    "DiagnosticsSink",
    "ExecutionStage",
    "NullDiagnostics",
    "Operation",
    "RecordError",
    "RelatedCascadeResult",
    "TraceContext",
]
