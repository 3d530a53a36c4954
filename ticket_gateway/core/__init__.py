"""
Core Domain Layer - O Hexágono.

Este pacote contém a lógica do gateway sem dependências de frameworks:
- access: vocabulário de permissões, credenciais e verificação
- tickets: resolução de referências, busca, estatísticas e use cases
- subtickets: máquina de estados pai/filho sobre o relationship store

Características:
- Zero dependências externas
- 100% testável com os adapters em memória
- Agnóstico a infraestrutura
"""
