"""
Ticket Gateway.

Camada de consulta/mutação com controle de acesso na frente de um
ticket store de helpdesk: leitura/atualização/exclusão de tickets,
gerenciamento de subtickets, busca e estatísticas.
"""

__version__ = "1.0.0"
