import os

# Point the global engine at an in-memory database before restbone is imported
os.environ.setdefault("RESTBONE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
