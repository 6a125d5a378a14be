"""Global pytest configuration."""

import os

# Settings are read lazily, but pin a throwaway database before any imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SEARCH_BACKEND", "sql")
