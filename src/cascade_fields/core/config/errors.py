# src/cascade_fields/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Cascade Fields.

Este módulo define a hierarquia de exceções utilizadas durante o
carregamento de uma configuração de cascade a partir de arquivo ou texto,
antes que a validação estrutural do modelo aconteça.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros de carregamento são tratados como falhas fatais
    - Mensagens de erro são claras e direcionadas ao operador

Invariantes:
    - Todas as exceções de carregamento herdam de `ConfigError`
    - Violações do modelo (campos obrigatórios ausentes) não pertencem a
      este módulo: são `CascadeConfigurationError`

Limites explícitos:
    - Não executa cascade
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros de carregamento de configuração.

    Esta hierarquia permite:
        - captura genérica de erros de carregamento
        - distinção clara entre falhas de fonte (arquivo/texto) e falhas
          estruturais do modelo
    """


class ConfigNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração de cascade
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo principal é obrigatório
        - Apenas o override local é opcional
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class ConfigParseError(ConfigError):
    """Falha ao parsear o conteúdo YAML/JSON (texto vazio incluso)."""


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).

    Limites explícitos:
        - Não tenta normalizar ou encapsular estruturas inválidas
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge
    entre a configuração principal e o override local.

    Exemplo de conflito:
        - base:     {"isActive": true}
        - override: {"isActive": "no"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """
