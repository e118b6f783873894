# create_db.py
import asyncio

from shared.config import settings
from shared.db import AsyncSessionLocal, engine, Base
from services.file_portal.core.bootstrap import ensure_default_admin, ensure_default_classes

# Import all models here so they are registered with SQLAlchemy's metadata
import services.file_portal.models


async def init_models():
    async with engine.begin() as conn:
        print("🔧 Creating tables...")
        await conn.run_sync(Base.metadata.create_all)
        print("✅ Tables created.")

    async with AsyncSessionLocal() as db:
        added = await ensure_default_classes(db, settings.DEFAULT_CLASSES)
        print(f"✅ {added} default classes seeded.")
        admin = await ensure_default_admin(
            db,
            settings.DEFAULT_ADMIN_USERNAME,
            settings.DEFAULT_ADMIN_PASSWORD,
            settings.DEFAULT_CLASSES
        )
        if admin:
            print(f"✅ Default admin '{admin.username}' created.")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(init_models())
