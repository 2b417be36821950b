"""Transfer Service Package — money-transfer processing core with an HTTP shell.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
