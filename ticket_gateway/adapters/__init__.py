"""
Adapters - Implementações de infraestrutura dos Ports do Core.

- events: publicação de Domain Events (auditoria via logging)
- plugins: registro de plugins do helpdesk
"""
