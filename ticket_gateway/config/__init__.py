"""
Configuração do Ticket Gateway.

Módulos:
- settings: Variáveis de ambiente (python-dotenv) e LOGGING
- container: Dependency Injection Container
"""
