# src/cascade_fields/core/config/loader.py
"""
Loader canônico de configuração de cascade.

Este módulo é a fonte de configuração do engine: lê uma configuração de
cascade em YAML ou JSON, aplica opcionalmente um override local via
deep-merge, materializa o modelo tipado e o valida antes de entregá-lo.

A configuração pode vir de:
    - um arquivo principal (obrigatório) + um arquivo local de overrides
      (opcional), via `load_configuration`
    - um texto já em memória (ex.: configuração de registro do host),
      via `parse_configuration`

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Erros de carregamento e de estrutura são fatais
    - A mesma entrada sempre produz a mesma configuração final

Invariantes:
    - O retorno é sempre uma `CascadeConfiguration` já validada
    - Overrides nunca mutam a configuração principal

Limites explícitos:
    - Não persiste configuração
    - Não registra o engine no host
    - Não interage com o record store
"""

from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .errors import (
    ConfigNotFoundError,
    ConfigParseError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge
from .model import CascadeConfiguration
from .validation import validate_configuration


def _ensure_root(data: Any) -> Dict[str, Any]:
    if data is None:
        raise ConfigParseError("No configuration found: content is empty")
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )
    return data


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Raises:
        ConfigNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        ConfigParseError: Se o conteúdo não puder ser parseado ou estiver vazio.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise ConfigNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()
    raw = path.read_text(encoding="utf-8")

    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(raw)
        elif suffix == ".json":
            data = json.loads(raw)
        else:
            raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")
    except UnsupportedConfigFormatError:
        raise
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigParseError(f"Invalid configuration in {path.name}: {e}") from e

    return _ensure_root(data)


def build_configuration(data: Dict[str, Any]) -> CascadeConfiguration:
    """Materializa e valida o modelo tipado a partir de um dicionário já resolvido."""
    config = CascadeConfiguration.from_dict(_ensure_root(data))
    validate_configuration(config)
    return config


def parse_configuration(text: Optional[str]) -> CascadeConfiguration:
    """
    Carrega uma configuração a partir de texto JSON (ou YAML).

    JSON é tentado primeiro; em caso de falha o texto é lido como YAML.

    Raises:
        ConfigParseError: Se o texto estiver vazio ou não puder ser parseado.
        InvalidConfigRootTypeError: Se a raiz não for um mapeamento.
        CascadeConfigurationError: Se o modelo for estruturalmente inválido.
    """
    if text is None or not str(text).strip():
        raise ConfigParseError(
            "No configuration found. Provide the cascade configuration JSON."
        )
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid configuration JSON: {e}") from e
    return build_configuration(data)


def load_configuration(
    *,
    path: str,
    local_path: Optional[str] = None,
) -> CascadeConfiguration:
    """
    Carrega e resolve a configuração efetiva de cascade.

    Política de resolução:
        - O arquivo principal é obrigatório
        - O arquivo local é opcional; quando existe, tem prioridade
        - A resolução utiliza `deep_merge` (listas são sobrescritas por inteiro)

    Args:
        path (str): Caminho para o arquivo principal.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        CascadeConfiguration: Configuração validada.
    """
    effective = _load_file(Path(path))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return build_configuration(effective)
