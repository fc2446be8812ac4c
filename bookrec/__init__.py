"""Library lending, fine and recommendation engine.

Layers:
    bookrec.db        store handle, ORM models, repositories, transactions
    bookrec.services  catalog cache, identity, issuance, fines,
                      recommendations, catalog mutation
    bookrec.startup   engine facade composition and app wiring
    bookrec.routes    thin Flask JSON surface
"""

__all__ = [
]
