"""Infrastructure Layer — adapters implementing the core boundary protocols.

Invariants:
    - Every adapter maps its library's failures to typed errors from core/errors.py
    - Adapters hold no domain rules; they translate between IO and core types
"""
