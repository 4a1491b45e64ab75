"""
Inventory Console

Client du backend de gestion d'inventaire: session et autorisations,
garde de navigation, client HTTP authentifié et vues filtrées par rôle.
"""

__version__ = "0.1.0"
