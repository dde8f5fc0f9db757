# tests/core/records/test_memory_store.py
"""
Testes do record store em memória (pandas).

Este módulo valida que `InMemoryRecordStore` cumpre o protocolo
`RecordStore` usado pelo engine:

- leitura pontual com projeção de campos
- leitura por critérios (AND) com limite de resultado
- comparação normalizada de valores tipados (referência, option set, money)
- semântica de null nos operadores
- escrita individual e em lote com falha por item

Limites explícitos:
    - Não valida regras de cascade
"""

import uuid
from decimal import Decimal

import pytest

from cascade_fields.core.records.memory import InMemoryRecordStore, RecordNotFoundError
from cascade_fields.core.records.store import (
    AttributeMetadata,
    AttributeType,
    Condition,
    ConditionOperator,
    RecordQuery,
    RecordStore,
)
from cascade_fields.core.records.types import EntityReference, Money, OptionSetValue, Record

ACCOUNT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_ACCOUNT_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


def _ids(records):
    return sorted(str(r.id) for r in records)


@pytest.fixture
def contacts():
    store = InMemoryRecordStore()
    parent = EntityReference("account", ACCOUNT_ID)
    other = EntityReference("account", OTHER_ACCOUNT_ID)
    ids = store.add_records(
        "contact",
        [
            {"fullname": "Ana Souza", "parentcustomerid": parent, "statecode": OptionSetValue(0), "city": "Recife"},
            {"fullname": "Bruno Lima", "parentcustomerid": parent, "statecode": OptionSetValue(1)},
            {"fullname": "Carla Dias", "parentcustomerid": other, "statecode": OptionSetValue(0), "city": "Natal"},
        ],
    )
    return store, ids


def test_store_satisfies_protocol():
    assert isinstance(InMemoryRecordStore(), RecordStore)


def test_retrieve_projects_requested_columns(contacts):
    store, ids = contacts
    record = store.retrieve("contact", ids[0], ["fullname", "missing"])
    assert record.id == ids[0]
    assert record.logical_name == "contact"
    assert record.attributes == {"fullname": "Ana Souza"}


def test_retrieve_omits_null_cells(contacts):
    store, ids = contacts
    record = store.retrieve("contact", ids[1], ["fullname", "city"])
    assert not record.contains("city")


def test_retrieve_unknown_record_raises(contacts):
    store, _ = contacts
    with pytest.raises(RecordNotFoundError):
        store.retrieve("contact", uuid.uuid4(), ["fullname"])


def test_retrieve_multiple_matches_reference_by_id(contacts):
    store, ids = contacts
    query = RecordQuery(
        entity_name="contact",
        conditions=[Condition("parentcustomerid", ConditionOperator.EQ, ACCOUNT_ID)],
    )
    found = store.retrieve_multiple(query)
    assert _ids(found) == _ids([Record("contact", ids[0]), Record("contact", ids[1])])
    # columns vazio → apenas o id
    assert all(r.attributes == {} for r in found)


def test_conditions_are_anded(contacts):
    store, ids = contacts
    query = RecordQuery(
        entity_name="contact",
        conditions=[
            Condition("parentcustomerid", ConditionOperator.EQ, ACCOUNT_ID),
            Condition("statecode", ConditionOperator.EQ, 0),
        ],
    )
    assert [r.id for r in store.retrieve_multiple(query)] == [ids[0]]


def test_top_count_limits_results(contacts):
    store, _ = contacts
    query = RecordQuery(entity_name="contact", top_count=2)
    assert len(store.retrieve_multiple(query)) == 2


@pytest.mark.parametrize(
    "condition, expected_positions",
    [
        (Condition("city", ConditionOperator.NULL), [1]),
        (Condition("city", ConditionOperator.NOT_NULL), [0, 2]),
        (Condition("city", ConditionOperator.NE, "Recife"), [2]),
        (Condition("city", ConditionOperator.IN, ["Recife", "Natal"]), [0, 2]),
        (Condition("city", ConditionOperator.NOT_IN, ["Recife"]), [2]),
        (Condition("fullname", ConditionOperator.LIKE, "%lima"), [1]),
        (Condition("statecode", ConditionOperator.GT, 0), [1]),
        (Condition("statecode", ConditionOperator.LT, 1), [0, 2]),
    ],
)
def test_operators(contacts, condition, expected_positions):
    store, ids = contacts
    found = store.retrieve_multiple(RecordQuery(entity_name="contact", conditions=[condition]))
    assert _ids(found) == _ids([Record("contact", ids[i]) for i in expected_positions])


def test_condition_on_unknown_column(contacts):
    store, _ = contacts
    eq = RecordQuery(entity_name="contact", conditions=[Condition("nope", ConditionOperator.EQ, 1)])
    null = RecordQuery(entity_name="contact", conditions=[Condition("nope", ConditionOperator.NULL)])
    assert store.retrieve_multiple(eq) == []
    assert len(store.retrieve_multiple(null)) == 3


def test_unknown_entity_returns_empty():
    assert InMemoryRecordStore().retrieve_multiple(RecordQuery(entity_name="lead")) == []


def test_update_writes_new_and_existing_columns(contacts):
    store, ids = contacts
    store.update(Record("contact", ids[1], {"city": "Olinda", "creditlimit": Money(Decimal("10.50"))}))

    record = store.get("contact", ids[1])
    assert record["city"] == "Olinda"
    assert record["creditlimit"] == Money(Decimal("10.50"))
    assert store.writes[-1].attributes["city"] == "Olinda"


def test_execute_batch_continues_on_error(contacts):
    store, ids = contacts
    missing = uuid.uuid4()
    responses = store.execute_batch(
        [
            Record("contact", ids[0], {"city": "Caruaru"}),
            Record("contact", missing, {"city": "Caruaru"}),
            Record("contact", ids[2], {"city": "Caruaru"}),
        ]
    )

    assert [r.ok for r in responses] == [True, False, True]
    assert responses[1].record_id == missing
    assert "does not exist" in responses[1].fault
    assert store.get("contact", ids[2])["city"] == "Caruaru"


def test_attribute_metadata_lookup_is_case_insensitive():
    meta = AttributeMetadata("contact", "jobtitle", AttributeType.STRING, max_length=100)
    store = InMemoryRecordStore(metadata=[meta])
    assert store.get_attribute_metadata("Contact", "JobTitle") == meta
    assert store.get_attribute_metadata("contact", "unknown") is None
    assert meta.is_text
    assert not AttributeMetadata("contact", "territoryid", AttributeType.LOOKUP).is_text
