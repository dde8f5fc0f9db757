"""
Avaliação de gatilhos: decide se uma mudança do pai deve propagar.

Regras (por RelatedEntityConfig):
    - Sem campos de gatilho → sempre propaga (default permissivo).
    - Para cada gatilho presente no snapshot pós-alteração:
        * ausente do pré (ou pré não fornecido) → propaga
        * presente em ambos e diferente (`values_equal`) → propaga
    - Nenhum gatilho alterado → não propaga.
"""

from __future__ import annotations

from typing import Any, Optional

from cascade_fields.core.config.model import RelatedEntityConfig
from cascade_fields.core.records.types import EntityReference, Money, OptionSetValue, Record
from cascade_fields.core.runtime.context import DiagnosticsSink, NullDiagnostics


def values_equal(a: Any, b: Any) -> bool:
    """Igualdade sensível a tipo: referência por id + tipo, option set por código, money por valor."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if isinstance(a, EntityReference) and isinstance(b, EntityReference):
        return a.same_target(b)
    if isinstance(a, OptionSetValue) and isinstance(b, OptionSetValue):
        return a.value == b.value
    if isinstance(a, Money) and isinstance(b, Money):
        return a.value == b.value
    return a == b


def should_cascade(
    related: RelatedEntityConfig,
    target: Record,
    pre_image: Optional[Record],
    ctx: Optional[DiagnosticsSink] = None,
) -> bool:
    ctx = ctx or NullDiagnostics()
    triggers = related.trigger_fields

    if not triggers:
        ctx.debug("No trigger fields configured; cascading", entity_name=related.entity_name)
        return True

    for name in triggers:
        if not target.contains(name):
            continue
        if pre_image is None or not pre_image.contains(name):
            ctx.debug(f"Trigger field '{name}' not in pre-image; treating as changed", field=name)
            return True
        if not values_equal(pre_image.get(name), target.get(name)):
            ctx.info(f"Trigger field '{name}' changed", field=name, entity_name=related.entity_name)
            return True

    ctx.debug("No trigger fields changed", entity_name=related.entity_name)
    return False
