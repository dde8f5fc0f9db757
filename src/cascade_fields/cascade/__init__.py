# src/cascade_fields/cascade/__init__.py

"""
Componentes do cascade.

Cada módulo implementa uma etapa do processamento de um evento:

    - filters  → parser da linguagem de filtro (`campo|operador|valor`)
    - triggers → decisão de propagação por campos de gatilho
    - values   → resolução/conversão de valores e cache de metadados
    - locator  → localização de filhos (pai → filhos) e do pai (filho → pai)
    - batch    → escrita em lotes com falha parcial

A orquestração vive em `cascade_fields.core.engine`.
"""

from .batch import BATCH_SIZE, apply_updates
from .filters import FilterCriterion, FilterOperator, parse_filter, parse_value
from .locator import MAX_RELATED_RECORDS, child_matches_filter, find_children, find_parent
from .triggers import should_cascade, values_equal
from .values import AttributeMetadataCache, apply_truncation, convert_to_text, resolve_all, resolve_value

__all__ = [
    "AttributeMetadataCache",
    "BATCH_SIZE",
    "FilterCriterion",
    "FilterOperator",
    "MAX_RELATED_RECORDS",
    "apply_truncation",
    "apply_updates",
    "child_matches_filter",
    "convert_to_text",
    "find_children",
    "find_parent",
    "parse_filter",
    "parse_value",
    "resolve_all",
    "resolve_value",
    "should_cascade",
    "values_equal",
]
