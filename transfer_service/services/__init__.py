"""Services Layer — async handlers that orchestrate IO around the pure core.

Invariants:
    - One handler class per use case, dependencies passed to __init__
    - Handlers return Result values; they never raise for expected domain failures
"""
