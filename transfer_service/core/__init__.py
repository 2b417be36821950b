"""Core Layer — pure domain logic for transfers: entities, rules, events, results.

Invariants:
    - No IO, no framework imports (FastAPI, SQLAlchemy) in this package
    - Collaborators reached only through repository_protocols
"""
