"""Transaction Codes — caller-facing, URL-safe lookup keys for transfers."""

import secrets
from typing import Callable

CodeGenerator = Callable[[], str]

DEFAULT_CODE_LENGTH = 8


def generate_transaction_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Random numeric code without a leading zero (e.g. '48213907')."""
    if length < 6:
        raise ValueError("transaction codes need at least 6 digits")
    first = str(secrets.randbelow(9) + 1)
    rest = "".join(str(secrets.randbelow(10)) for _ in range(length - 1))
    return first + rest


def code_generator(length: int = DEFAULT_CODE_LENGTH) -> CodeGenerator:
    return lambda: generate_transaction_code(length)
