# src/cascade_fields/core/config/__init__.py

"""
Camada de configuração do Cascade Fields.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, materializar, validar e identificar configurações de cascade.

Responsabilidades do pacote:
    - Carregamento de arquivos/texto de configuração (YAML ou JSON)
    - Override local via deep-merge determinístico
    - Modelo tipado e imutável (`CascadeConfiguration`)
    - Validação estrutural fail-fast
    - Hash canônico para rastreabilidade

Limites explícitos:
    - Não executa cascade
    - Não interage com o record store
"""

from .hashing import compute_config_hash
from .loader import build_configuration, load_configuration, parse_configuration
from .model import CascadeConfiguration, FieldMapping, RelatedEntityConfig, RelationshipMode
from .validation import validate_configuration

__all__ = [
    "CascadeConfiguration",
    "FieldMapping",
    "RelatedEntityConfig",
    "RelationshipMode",
    "build_configuration",
    "compute_config_hash",
    "load_configuration",
    "parse_configuration",
    "validate_configuration",
]
