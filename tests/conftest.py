# tests/conftest.py
"""
Fixtures compartilhados para testes do Cascade Fields.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (account → contact)
- record store em memória com metadados de campo conhecidos
- contexto de diagnóstico controlado (TraceContext)
- fábricas de registros (pai e filhos)

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Ids são fixos para garantir determinismo
    - Imports do pacote são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture realiza I/O
    - Cada teste recebe seu próprio store e contexto

Limites explícitos:
    - Não substituir testes de integração (ver tests/e2e)
    - Não conter lógica de domínio
"""

import uuid

import pytest


ACCOUNT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_ACCOUNT_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")
TERRITORY_A = uuid.UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
TERRITORY_B = uuid.UUID("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb")


@pytest.fixture
def territory_config_dict() -> dict:
    """
    Configuração account → contact por campo de lookup, com `territoryid`
    como único mapeamento e gatilho.

    Returns:
        dict: Configuração no formato de serialização (camelCase).
    """
    return {
        "id": "cfg-territory",
        "name": "Account territory to contacts",
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
                ],
            }
        ],
    }


@pytest.fixture
def territory_config(territory_config_dict):
    from cascade_fields.core.config.loader import build_configuration

    return build_configuration(territory_config_dict)


@pytest.fixture
def trace():
    """TraceContext determinístico (trace_id fixo)."""
    from cascade_fields.core.runtime.context import TraceContext

    return TraceContext(trace_id="trace-test-001")


@pytest.fixture
def store():
    """
    Record store em memória com metadados conhecidos para `contact`.

    Campos:
        - territoryid: lookup (não texto, passthrough)
        - jobtitle: texto limitado a 10 caracteres
        - description: memo limitado a 2000 caracteres
        - statecode: option set
    """
    from cascade_fields.core.records.memory import InMemoryRecordStore
    from cascade_fields.core.records.store import AttributeMetadata, AttributeType

    return InMemoryRecordStore(
        metadata=[
            AttributeMetadata("contact", "territoryid", AttributeType.LOOKUP),
            AttributeMetadata("contact", "jobtitle", AttributeType.STRING, max_length=10),
            AttributeMetadata("contact", "description", AttributeType.MEMO, max_length=2000),
            AttributeMetadata("contact", "statecode", AttributeType.PICKLIST),
        ]
    )


@pytest.fixture
def account_ref():
    """Fábrica de EntityReference para account."""
    from cascade_fields.core.records.types import EntityReference

    def _make(account_id=ACCOUNT_ID, name=None):
        return EntityReference(logical_name="account", id=account_id, name=name)

    return _make


@pytest.fixture
def territory_ref():
    """Fábrica de EntityReference para territory."""
    from cascade_fields.core.records.types import EntityReference

    def _make(territory_id=TERRITORY_A, name=None):
        return EntityReference(logical_name="territory", id=territory_id, name=name)

    return _make


@pytest.fixture
def seed_contacts(store, account_ref):
    """
    Fábrica que insere `n` contatos vinculados a um account.

    Args:
        n: quantidade de contatos
        account_id: pai dos contatos
        statecode: código do option set de estado (0 = ativo)

    Returns:
        List[UUID]: ids dos contatos inseridos.
    """
    from cascade_fields.core.records.types import OptionSetValue

    def _seed(n, account_id=ACCOUNT_ID, statecode=0, **extra):
        rows = []
        for i in range(n):
            row = {
                "fullname": f"Contact {i}",
                "parentcustomerid": account_ref(account_id),
                "statecode": OptionSetValue(statecode),
            }
            row.update(extra)
            rows.append(row)
        return store.add_records("contact", rows)

    return _seed
