# src/cascade_fields/core/__init__.py
"""
Core do Cascade Fields.

Este pacote reúne as responsabilidades independentes de host do engine de
cascade: configuração, registros, runtime de diagnóstico e orquestração.

O core é projetado para ser:
    - determinístico
    - testável de forma isolada
    - livre de dependências de plataforma do host
    - orientado a contratos explícitos

Componentes principais:
    - config  → carregamento, merge, modelo tipado, validação e hashing
    - records → tipos de valor, snapshot de registro e protocolo do record store
    - runtime → eventos, resultados e contexto de diagnóstico
    - engine  → orquestrador (CascadeService) e dispatcher (CascadeEngine)

Limites explícitos:
    - Não registra o engine em um host
    - Não oferece interface gráfica de configuração
"""
