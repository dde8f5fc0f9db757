# tests/core/cascade/test_triggers.py
"""
Testes da avaliação de gatilhos (should_cascade / values_equal).

Os testes asseguram que:
- sem campos de gatilho, toda mudança propaga
- um gatilho ausente do pré-image conta como alterado
- comparações respeitam tipo (referência, option set, money)
"""

import uuid
from decimal import Decimal

import pytest

from cascade_fields.cascade.triggers import should_cascade, values_equal
from cascade_fields.core.config.model import FieldMapping, RelatedEntityConfig, RelationshipMode
from cascade_fields.core.records.types import EntityReference, Money, OptionSetValue, Record


TERRITORY_A = uuid.UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
TERRITORY_B = uuid.UUID("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb")


def _related(*mappings):
    return RelatedEntityConfig(
        entity_name="contact",
        relationship_mode=RelationshipMode.BY_LOOKUP_FIELD,
        lookup_field_name="parentcustomerid",
        field_mappings=tuple(mappings),
    )


def _account(**attrs):
    return Record("account", uuid.uuid4(), attributes=attrs)


def test_no_trigger_fields_always_cascades():
    related = _related(FieldMapping("telephone1", "telephone1"))
    target = _account(name="Contoso")
    pre = _account(name="Contoso")
    assert should_cascade(related, target, pre) is True


def test_changed_trigger_cascades(trace):
    related = _related(FieldMapping("territoryid", "territoryid", is_trigger_field=True))
    target = _account(territoryid=EntityReference("territory", TERRITORY_B))
    pre = _account(territoryid=EntityReference("territory", TERRITORY_A))

    assert should_cascade(related, target, pre, trace) is True
    assert any("territoryid" in e["message"] for e in trace.events)


def test_unchanged_trigger_does_not_cascade():
    related = _related(FieldMapping("territoryid", "territoryid", is_trigger_field=True))
    target = _account(territoryid=EntityReference("territory", TERRITORY_A, name="Norte"))
    pre = _account(territoryid=EntityReference("territory", TERRITORY_A))

    assert should_cascade(related, target, pre) is False


def test_trigger_not_sent_in_target_is_ignored():
    related = _related(FieldMapping("territoryid", "territoryid", is_trigger_field=True))
    target = _account(name="Renamed")
    pre = _account(territoryid=EntityReference("territory", TERRITORY_A), name="Old")

    assert should_cascade(related, target, pre) is False


@pytest.mark.parametrize("pre", [None, Record("account", uuid.uuid4())])
def test_trigger_missing_from_pre_image_counts_as_changed(pre):
    related = _related(FieldMapping("creditlimit", "creditlimit", is_trigger_field=True))
    target = _account(creditlimit=Money(Decimal("100")))

    assert should_cascade(related, target, pre) is True


def test_any_trigger_changed_is_enough():
    related = _related(
        FieldMapping("territoryid", "territoryid", is_trigger_field=True),
        FieldMapping("industrycode", "industrycode", is_trigger_field=True),
    )
    target = _account(
        territoryid=EntityReference("territory", TERRITORY_A),
        industrycode=OptionSetValue(3),
    )
    pre = _account(
        territoryid=EntityReference("territory", TERRITORY_A),
        industrycode=OptionSetValue(2),
    )
    assert should_cascade(related, target, pre) is True


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (None, None, True),
        (None, "x", False),
        ("x", None, False),
        (EntityReference("territory", TERRITORY_A, "Norte"), EntityReference("territory", TERRITORY_A, "Sul"), True),
        (EntityReference("territory", TERRITORY_A), EntityReference("account", TERRITORY_A), False),
        (EntityReference("territory", TERRITORY_A), EntityReference("territory", TERRITORY_B), False),
        (OptionSetValue(1), OptionSetValue(1), True),
        (OptionSetValue(1), OptionSetValue(2), False),
        (Money(Decimal("10.0")), Money(Decimal("10")), True),
        (Money(Decimal("10")), Money(Decimal("11")), False),
        ("Recife", "Recife", True),
        (5, 6, False),
    ],
)
def test_values_equal_is_type_aware(a, b, expected):
    assert values_equal(a, b) is expected
