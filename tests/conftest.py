"""Root conftest — shared test configuration."""

import os

# Settings are cached on first import: set test defaults before anything loads them
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault(
    "API_KEYS", '{"test-key": ["*"], "reader-key": ["read"]}',
)
os.environ.setdefault("EXCHANGE_RATES", '{"USD:EUR": "0.9", "EUR:USD": "1.1"}')
os.environ.setdefault("EVENT_SINK", "logging")
os.environ.setdefault("BASE_CURRENCY", "USD")
