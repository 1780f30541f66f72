"""Create an admin account, or promote an existing user to admin.

Usage:
    ADMIN_EMAIL=admin@quizhub.dev ADMIN_PASSWORD=... python scripts/seed_admin.py
"""
import asyncio
import os

from sqlalchemy import select

from quizhub.db.session import SessionLocal
from quizhub.models.users import User, UserRole
from quizhub.core.security import hash_password

ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@quizhub.dev")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")


async def main() -> int:
    async with SessionLocal() as db:
        res = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        user = res.scalar_one_or_none()

        if user:
            user.role = UserRole.admin.value
            user.is_active = True
            print("Admin already exists -> promoted/ensured active.")
        else:
            if not ADMIN_PASSWORD:
                print("ADMIN_PASSWORD is not set; refusing to create an admin without one.")
                return 2
            db.add(
                User(
                    name=ADMIN_NAME,
                    email=ADMIN_EMAIL,
                    password_hash=hash_password(ADMIN_PASSWORD),
                    role=UserRole.admin.value,
                    is_active=True,
                )
            )
            print("Created admin user.")

        await db.commit()
        print(f"ADMIN_EMAIL={ADMIN_EMAIL}")
        return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
