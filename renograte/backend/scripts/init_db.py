# scripts/init_db.py
import asyncio

from app.config import settings
from app.db import engine, init_models


async def main() -> None:
    await init_models()
    await engine.dispose()
    print(f"OK: contract tables ready at {settings.RENOGRATE_DB_URL} (idempotent).")


if __name__ == "__main__":
    asyncio.run(main())
