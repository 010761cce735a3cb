#!/usr/bin/env python3
"""
Initialize Wedding Guests database tables.

Creates the tables and, optionally, seeds a planner account and prints
its API key. The key is only shown once; the database stores its hash.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --planner-email planner@example.com --plan pro
"""

import argparse
import sys
import os
import logging
from typing import Optional, Tuple

# Add the project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text
from sqlalchemy.orm import Session
from core.config import get_settings
from core.database import Base, SessionLocal, engine, atomic
from models import User, Wedding, Guest
from app.middleware.auth import generate_api_key, hash_api_key

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

TABLES = [User.__table__, Wedding.__table__, Guest.__table__]


def init_database() -> bool:
    """Create tables and confirm the connection works."""
    print("🗄️  Initializing database...")

    try:
        Base.metadata.create_all(bind=engine, tables=TABLES)

        with engine.connect() as conn:
            result = conn.execute(text("SELECT 1")).fetchone()
            print(f"✅ Database connected: {result[0]}")

        for table in TABLES:
            print(f"✅ {table.name} table created/exists")

        return True

    except Exception as e:
        print(f"❌ Database initialization failed: {str(e)}")
        return False


def seed_planner(db: Session, email: str, name: Optional[str] = None, plan: Optional[str] = None) -> Tuple[User, str]:
    """
    Create a planner, or rotate the API key of an existing one.

    Args:
        db: Database session
        email: Planner email
        name: Display name
        plan: Subscription plan; defaults to DEFAULT_PLAN

    Returns:
        (planner, plaintext API key)

    Raises:
        ValueError: If the plan is not configured in PLAN_EVENT_LIMITS
    """
    settings = get_settings()
    plan = (plan or settings.DEFAULT_PLAN).strip().lower()
    if plan not in settings.get_plan_limits():
        raise ValueError(f"Unknown plan '{plan}'. Configured plans: {', '.join(settings.get_plan_limits())}")

    api_key = generate_api_key()
    email = email.strip().lower()

    with atomic(db):
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            user = User(email=email, name=name, plan=plan)
            db.add(user)
            logger.info(f"Creating planner {email} on plan {plan}")
        else:
            user.plan = plan
            if name:
                user.name = name
            logger.info(f"Planner {email} exists; rotating API key")
        user.api_key_hash = hash_api_key(api_key)

    db.refresh(user)
    return user, api_key


def main(argv=None) -> bool:
    """Main initialization function."""
    parser = argparse.ArgumentParser(description="Initialize the Wedding Guests database")
    parser.add_argument("--planner-email", help="Seed (or re-key) a planner with this email")
    parser.add_argument("--planner-name", help="Display name for the seeded planner")
    parser.add_argument("--plan", help="Subscription plan for the seeded planner")
    args = parser.parse_args(argv)

    print("🚀 Starting Wedding Guests Database Initialization\n")

    try:
        settings = get_settings()
        print("📋 Configuration:")
        print(f"   Database: {settings.database_url.split('@')[-1]}")
        print(f"   Plans: {settings.PLAN_EVENT_LIMITS}")
    except Exception as e:
        print(f"❌ Configuration error: {str(e)}")
        return False

    if not init_database():
        print("\n❌ Database initialization failed.")
        print("\n🔧 Troubleshooting:")
        print("1. Check database connection settings in .env")
        print("2. Ensure PostgreSQL is running")
        print("3. Check database permissions")
        return False

    if args.planner_email:
        db = SessionLocal()
        try:
            user, api_key = seed_planner(db, args.planner_email, args.planner_name, args.plan)
        except ValueError as e:
            print(f"❌ {str(e)}")
            return False
        finally:
            db.close()
        print(f"\n👤 Planner {user.email} (plan: {user.plan})")
        print(f"🔑 API key: {api_key}")
        print("   Store it now; it cannot be shown again.")

    print("\n🎉 Database initialization completed successfully!")
    print("\n📋 Next steps:")
    print("1. Start the FastAPI server: uvicorn app.main:app --reload")
    print("2. Call the API with the X-API-Key header: http://localhost:8000/docs")
    return True


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
