"""
Parser da linguagem de filtro das entidades relacionadas.

Formato (texto de `filterCriteria`):

    criteria := segment (';' segment)*
    segment  := field '|' operator '|' value

Exemplos:
    "statecode|eq|0"
    "statecode|eq|0;address1_stateorprovince|in|CA,NY,TX"
    "parentcustomerid|notnull"

Regras:
    - Segmentos vazios são ignorados; espaços ao redor de cada parte são removidos.
    - `null`/`notnull` aceitam a forma curta sem o segundo `|`.
    - Operadores são case-insensitive e aceitam aliases
      (`equal`, `=`, `notequal`, `!=`, `greaterthan`, `>`, `lessthan`, `<`).
    - Nomes de campo com aspas, marcadores de comentário, `;` ou caracteres
      fora de `[A-Za-z0-9_]` são rejeitados.
    - Valores: `null` → None, `true`/`false` → bool, inteiro, UUID, senão texto.
      Para `in`/`notin` o valor é uma lista separada por vírgulas.
    - Todos os critérios são combinados com AND.

Critérios nunca são cacheados: o texto é parseado a cada montagem de consulta.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import re
import uuid

from cascade_fields.core.exceptions import FilterFormatError
from cascade_fields.core.records.store import Condition, ConditionOperator

# Os operadores do filtro coincidem com os da camada de consulta.
FilterOperator = ConditionOperator

_OPERATOR_ALIASES: Dict[str, FilterOperator] = {
    "eq": FilterOperator.EQ,
    "equal": FilterOperator.EQ,
    "=": FilterOperator.EQ,
    "ne": FilterOperator.NE,
    "notequal": FilterOperator.NE,
    "!=": FilterOperator.NE,
    "gt": FilterOperator.GT,
    "greaterthan": FilterOperator.GT,
    ">": FilterOperator.GT,
    "lt": FilterOperator.LT,
    "lessthan": FilterOperator.LT,
    "<": FilterOperator.LT,
    "in": FilterOperator.IN,
    "notin": FilterOperator.NOT_IN,
    "null": FilterOperator.NULL,
    "notnull": FilterOperator.NOT_NULL,
    "like": FilterOperator.LIKE,
}

_VALUELESS = {FilterOperator.NULL, FilterOperator.NOT_NULL}
_LIST_VALUED = {FilterOperator.IN, FilterOperator.NOT_IN}

_FIELD_NAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
_FORBIDDEN_FRAGMENTS = (";", "--", "/*", "*/", "'", '"')
_INT_RE = re.compile(r"^[+-]?\d+$")

_HINT = "Use o formato campo|operador|valor; separe critérios com ';'."


@dataclass(frozen=True)
class FilterCriterion:
    field: str
    operator: FilterOperator
    value: Any = None

    def to_condition(self) -> Condition:
        return Condition(field=self.field, operator=self.operator, value=self.value)

    def to_filter_string(self) -> str:
        if self.operator in _VALUELESS:
            return f"{self.field}|{self.operator.value}|"
        if self.operator in _LIST_VALUED and isinstance(self.value, (list, tuple)):
            rendered = ",".join(_render_scalar(v) for v in self.value)
        else:
            rendered = _render_scalar(self.value)
        return f"{self.field}|{self.operator.value}|{rendered}"


def _render_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _fail(reason: str, *, filter_criteria: str, token: Optional[str] = None) -> FilterFormatError:
    return FilterFormatError(
        f"Invalid filter criteria format: {reason}",
        details={"filter_criteria": filter_criteria, "reason": reason, "token": token},
        hint=_HINT,
    )


def validate_field_name(field_name: str, *, filter_criteria: str = "") -> None:
    """Rejeita nomes de campo que não sejam identificadores simples."""
    if not field_name:
        raise _fail("field name is empty", filter_criteria=filter_criteria, token=field_name)
    for fragment in _FORBIDDEN_FRAGMENTS:
        if fragment in field_name:
            raise _fail(
                f"field name '{field_name}' contains forbidden characters",
                filter_criteria=filter_criteria,
                token=field_name,
            )
    if not _FIELD_NAME_RE.match(field_name):
        raise _fail(
            f"field name '{field_name}' must contain only letters, digits and underscores",
            filter_criteria=filter_criteria,
            token=field_name,
        )


def parse_operator(token: str, *, filter_criteria: str = "") -> FilterOperator:
    op = _OPERATOR_ALIASES.get(token.strip().lower())
    if op is None:
        raise _fail(f"Unknown operator: {token}", filter_criteria=filter_criteria, token=token)
    return op


def parse_scalar(raw: str) -> Any:
    """Converte um literal textual: null, bool, inteiro, UUID, senão texto."""
    text = raw.strip()
    lowered = text.lower()
    if lowered == "null":
        return None
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_RE.match(text):
        return int(text)
    try:
        return uuid.UUID(text)
    except ValueError:
        return text


def parse_value(raw: str, operator: FilterOperator) -> Any:
    if operator in _VALUELESS:
        return None
    if operator in _LIST_VALUED:
        return [parse_scalar(p) for p in raw.split(",") if p.strip()]
    return parse_scalar(raw)


def parse_filter(text: Optional[str]) -> List[FilterCriterion]:
    """
    Converte `filterCriteria` em uma lista de critérios (AND).

    Raises:
        FilterFormatError: segmento malformado, operador desconhecido ou
            nome de campo inseguro.
    """
    if text is None or not text.strip():
        return []

    criteria: List[FilterCriterion] = []
    for segment in text.split(";"):
        if not segment.strip():
            continue

        parts = [p.strip() for p in segment.split("|")]
        if len(parts) == 2 and parts[1].lower() in ("null", "notnull"):
            parts.append("")
        if len(parts) != 3:
            raise _fail(
                f"'{segment.strip()}' is not in the form field|operator|value",
                filter_criteria=text,
                token=segment.strip(),
            )

        field_name, op_token, raw_value = parts
        validate_field_name(field_name, filter_criteria=text)
        operator = parse_operator(op_token, filter_criteria=text)
        criteria.append(
            FilterCriterion(field=field_name, operator=operator, value=parse_value(raw_value, operator))
        )

    return criteria
