# tests/e2e/test_territory_cascade.py
"""
E2E — Cascade Fields (account → contact)

Valida o fluxo completo a partir de arquivos de configuração:
- configuração YAML + override local (deep-merge)
- mudança de território no account propagada aos contatos ativos
- contato criado sob o account herda o território (pré-operação)
- contato re-vinculado herda o território do novo account (pós-operação)
- reentrada disparada pelas próprias escritas é barrada pela profundidade

Requisitos:
- pytest -q (sem serviços externos)
"""

from __future__ import annotations

import uuid
from pathlib import Path

import yaml

from cascade_fields import CascadeEngine, load_configuration
from cascade_fields.core.records.memory import InMemoryRecordStore
from cascade_fields.core.records.store import AttributeMetadata, AttributeType
from cascade_fields.core.records.types import EntityReference, OptionSetValue, Record
from cascade_fields.core.runtime.context import TraceContext
from cascade_fields.core.runtime.types import CascadeStatus, ChangeEvent, ExecutionStage, Operation


CONTOSO = uuid.UUID("11111111-1111-1111-1111-111111111111")
FABRIKAM = uuid.UUID("22222222-2222-2222-2222-222222222222")
NORTH = EntityReference("territory", uuid.UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"), name="North")
SOUTH = EntityReference("territory", uuid.UUID("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb"), name="South")

CONFIG = {
    "id": "cfg-account-territory",
    "name": "Account territory",
    "parentEntity": "account",
    "isActive": True,
    "enableTracing": True,
    "relatedEntities": [
        {
            "entityName": "contact",
            "relationshipMode": "byLookupField",
            "lookupFieldName": "parentcustomerid",
            "fieldMappings": [
                {"sourceField": "territoryid", "targetField": "territoryid", "isTriggerField": True},
                {"sourceField": "territoryid", "targetField": "new_territoryname"},
            ],
        }
    ],
}


def _write_configs(tmp_path: Path) -> tuple:
    main = tmp_path / "cascade.yaml"
    local = tmp_path / "cascade.local.yaml"
    main.write_text(yaml.safe_dump(CONFIG), encoding="utf-8")
    local_related = dict(CONFIG["relatedEntities"][0], filterCriteria="statecode|eq|0")
    local.write_text(yaml.safe_dump({"relatedEntities": [local_related]}), encoding="utf-8")
    return str(main), str(local)


def _store() -> InMemoryRecordStore:
    store = InMemoryRecordStore(
        metadata=[
            AttributeMetadata("contact", "territoryid", AttributeType.LOOKUP),
            AttributeMetadata("contact", "new_territoryname", AttributeType.STRING, max_length=100),
        ]
    )
    store.add_records(
        "account",
        [
            {"accountid": CONTOSO, "name": "Contoso", "territoryid": NORTH},
            {"accountid": FABRIKAM, "name": "Fabrikam", "territoryid": SOUTH},
        ],
    )
    return store


def test_territory_cascade_e2e(tmp_path: Path) -> None:
    main, local = _write_configs(tmp_path)
    config = load_configuration(path=main, local_path=local)
    assert config.related_entities[0].filter_criteria == "statecode|eq|0"

    store = _store()
    contoso = EntityReference("account", CONTOSO)
    active = store.add_records(
        "contact",
        [
            {"fullname": f"Active {i}", "parentcustomerid": contoso, "statecode": OptionSetValue(0), "territoryid": NORTH}
            for i in range(3)
        ],
    )
    (inactive,) = store.add_records(
        "contact",
        [{"fullname": "Inactive", "parentcustomerid": contoso, "statecode": OptionSetValue(1), "territoryid": NORTH}],
    )
    engine = CascadeEngine(store)

    # 1) Território do account muda: contatos ativos recebem o novo valor
    ctx = TraceContext(trace_id="e2e-parent")
    result = engine.handle(
        ChangeEvent(
            entity_name="account",
            operation=Operation.UPDATE,
            target=Record("account", CONTOSO, attributes={"territoryid": SOUTH}),
            pre_image=Record("account", CONTOSO, attributes={"territoryid": NORTH, "name": "Contoso"}),
        ),
        config,
        ctx,
    )

    assert result.status is CascadeStatus.SUCCESS
    assert (result.success_count, result.error_count) == (3, 0)
    assert result.trace_id == "e2e-parent"
    for cid in active:
        contact = store.get("contact", cid)
        assert contact["territoryid"] == SOUTH
        assert contact["new_territoryname"] == "South"
    assert store.get("contact", inactive)["territoryid"] == NORTH

    # 2) Reentrada causada pelas escritas é barrada
    reentry = engine.handle(
        ChangeEvent(
            entity_name="contact",
            operation=Operation.UPDATE,
            target=Record("contact", active[0], attributes={"territoryid": SOUTH}),
            stage=ExecutionStage.PRE_OPERATION,
            depth=3,
        ),
        config,
    )
    assert reentry.summary == "depth limit exceeded"

    # 3) Novo contato criado sob Fabrikam herda o território em pré-operação
    new_contact = Record(
        "contact",
        attributes={"fullname": "Novo", "parentcustomerid": EntityReference("account", FABRIKAM)},
    )
    created = engine.handle(
        ChangeEvent(
            entity_name="contact",
            operation=Operation.CREATE,
            target=new_contact,
            stage=ExecutionStage.PRE_OPERATION,
        ),
        config,
    )
    assert created.status is CascadeStatus.SUCCESS
    assert new_contact["territoryid"] == SOUTH
    assert new_contact["new_territoryname"] == "South"

    # 4) Contato ativo re-vinculado a Fabrikam em pós-operação
    writes_before = len(store.writes)
    relinked = engine.handle(
        ChangeEvent(
            entity_name="contact",
            operation=Operation.UPDATE,
            target=Record("contact", active[1], attributes={"parentcustomerid": EntityReference("account", FABRIKAM)}),
            pre_image=Record("contact", active[1], attributes={"parentcustomerid": contoso}),
            stage=ExecutionStage.POST_OPERATION,
        ),
        config,
    )
    assert relinked.status is CascadeStatus.SUCCESS
    assert len(store.writes) == writes_before + 1
    assert store.writes[-1].attributes == {"territoryid": SOUTH, "new_territoryname": "South"}


def test_result_serializes_for_host_logging(tmp_path: Path) -> None:
    main, _ = _write_configs(tmp_path)
    config = load_configuration(path=main)

    store = _store()
    store.add_records("contact", [{"parentcustomerid": EntityReference("account", CONTOSO)}])

    result = CascadeEngine(store).handle(
        ChangeEvent(
            entity_name="account",
            operation=Operation.UPDATE,
            target=Record("account", CONTOSO, attributes={"territoryid": SOUTH}),
            pre_image=Record("account", CONTOSO, attributes={"territoryid": NORTH}),
        ),
        config,
    )

    payload = result.to_dict()
    assert payload["status"] == "success"
    assert payload["success_count"] == 1
    assert payload["related"][0]["entity_name"] == "contact"
    assert len(payload["config_hash"]) == 64
