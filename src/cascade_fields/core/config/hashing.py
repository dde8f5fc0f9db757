# src/cascade_fields/core/config/hashing.py
"""
Hashing canônico de configuração de cascade.

O hash representa a identidade estrutural da configuração efetiva e é
anexado a cada `CascadeResult`, permitindo correlacionar um resultado de
cascade com a versão exata da configuração que o produziu.

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - Algoritmo SHA-256

Invariantes:
    - Configurações estruturalmente equivalentes produzem o mesmo hash
    - O valor gerado é sempre uma string hexadecimal de 64 caracteres
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Calcula o hash SHA-256 determinístico de uma configuração.

    Args:
        config (Dict[str, Any]): Configuração em forma de dicionário
            (por exemplo, `CascadeConfiguration.to_dict()`).

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
