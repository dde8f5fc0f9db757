# src/cascade_fields/core/engine/__init__.py
"""
Engine do Cascade Fields.

Componentes principais:
    - orchestrator → CascadeService: os dois sentidos de propagação e a
      unidade por entidade relacionada (`cascade_related`)
    - dispatcher   → CascadeEngine: guarda de profundidade, aplicabilidade,
      roteamento do evento e encapsulamento de erros inesperados

Invariantes:
    - Uma configuração inválida é rejeitada antes de qualquer acesso ao store
    - Cada invocação possui seu próprio TraceContext

Limites explícitos:
    - Não executa eventos de forma assíncrona
    - Não faz retentativas de escrita
"""
