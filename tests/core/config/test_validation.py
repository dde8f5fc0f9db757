# tests/core/config/test_validation.py
"""
Testes da validação estrutural de `CascadeConfiguration`.

A validação é depth-first e fail-fast: a primeira violação encontrada é
reportada com mensagem que identifica a entidade ou o mapping ofensor.
"""

import pytest

from cascade_fields.core.config.model import CascadeConfiguration
from cascade_fields.core.config.validation import validate_configuration
from cascade_fields.core.exceptions import CascadeConfigurationError


def _config(**overrides) -> CascadeConfiguration:
    data = {
        "parentEntity": "account",
        "relatedEntities": [
            {
                "entityName": "contact",
                "relationshipMode": "byLookupField",
                "lookupFieldName": "parentcustomerid",
                "fieldMappings": [{"sourceField": "territoryid", "targetField": "territoryid"}],
            }
        ],
    }
    data.update(overrides)
    return CascadeConfiguration.from_dict(data)


def _related(**overrides) -> dict:
    related = {
        "entityName": "contact",
        "relationshipMode": "byLookupField",
        "lookupFieldName": "parentcustomerid",
        "fieldMappings": [{"sourceField": "territoryid", "targetField": "territoryid"}],
    }
    related.update(overrides)
    return related


def test_valid_configuration_passes():
    validate_configuration(_config())


def test_missing_parent_entity():
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(parentEntity=""))
    assert "ParentEntity" in exc.value.message


def test_parent_is_checked_before_related():
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(parentEntity=None, relatedEntities=[]))
    assert "ParentEntity" in exc.value.message


def test_active_configuration_requires_related_entities():
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(relatedEntities=[]))
    assert "related entity" in exc.value.message


def test_inactive_configuration_may_have_no_related_entities():
    validate_configuration(_config(isActive=False, relatedEntities=[]))


def test_related_entity_name_required():
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(relatedEntities=[_related(entityName="")]))
    assert exc.value.details["related_index"] == 0


def test_lookup_mode_requires_lookup_field():
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(relatedEntities=[_related(lookupFieldName=None)]))
    assert "LookupFieldName" in exc.value.message
    assert "contact" in exc.value.message


def test_named_mode_requires_relationship_name():
    related = _related(relationshipMode="byNamedRelationship", lookupFieldName=None)
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(relatedEntities=[related]))
    assert "RelationshipName" in exc.value.message


def test_at_least_one_mapping_required():
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(relatedEntities=[_related(fieldMappings=[])]))
    assert "field mapping" in exc.value.message


def test_mapping_target_required_names_the_source():
    related = _related(fieldMappings=[{"sourceField": "territoryid", "targetField": ""}])
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(relatedEntities=[related]))
    assert "TargetField" in exc.value.message
    assert "territoryid" in exc.value.message
    assert exc.value.details["mapping_index"] == 0


def test_second_related_entity_is_identified():
    second = _related(entityName="opportunity", lookupFieldName="parentaccountid", fieldMappings=[])
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(relatedEntities=[_related(), second]))
    assert "opportunity" in exc.value.message


def test_unknown_relationship_mode_is_a_configuration_error():
    with pytest.raises(CascadeConfigurationError):
        _config(relatedEntities=[_related(relationshipMode="byMagic")])


def test_non_configuration_object_rejected():
    with pytest.raises(CascadeConfigurationError):
        validate_configuration({"parentEntity": "account"})


def test_configuration_error_converts_to_payload():
    with pytest.raises(CascadeConfigurationError) as exc:
        validate_configuration(_config(parentEntity=""))
    payload = exc.value.to_payload().to_dict()
    assert payload["type"] == "CascadeConfigurationError"
    assert payload["message"] == exc.value.message
