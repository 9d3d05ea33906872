# scripts/seed.py

import os
import sys
import argparse
from datetime import timedelta
from decimal import Decimal

from dotenv import load_dotenv
from sqlmodel import Session, select

# Ensure root path for relative imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# ✅ Load environment variables before settings are read
load_dotenv()

from core.config import settings
from core.database import Database
from core.security import hash_password
from models.models import (
    BillingInterval,
    Event,
    Member,
    MemberStatus,
    MembershipPlan,
    Organization,
    Payment,
    PaymentMethod,
    PaymentStatus,
    User,
    UserRole,
    utcnow,
)


def ensure_admin(session: Session, email: str, name: str, password: str, org_name: str):
    """Admin principal plus the organization it administers."""
    admin = session.exec(select(User).where(User.email == email)).first()
    if not admin:
        admin = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN.value,
        )
        session.add(admin)
        session.commit()
        session.refresh(admin)
        print(f"✅ Added admin {email}")

    org = session.exec(select(Organization).where(Organization.admin_id == admin.id)).first()
    if not org:
        org = Organization(name=org_name, admin_id=admin.id)
        session.add(org)
        session.commit()
        session.refresh(org)
        print(f"✅ Created {org_name}")
    return admin, org


def seed_dev_data(db: Database):
    """Seed development database with a demo organization and sample rows."""
    print("🌱 Seeding development data...")

    with db.session() as session:
        admin, org = ensure_admin(session, "admin@demo.com", "Admin User", "admin1234", "Demo Organization")

        # -----------------------------
        # 👥 Members
        # -----------------------------
        samples = [
            ("Ada Member", "ada@demo.com", MemberStatus.ACTIVE),
            ("Ben Member", "ben@demo.com", MemberStatus.PENDING),
            ("Cy Member", "cy@demo.com", MemberStatus.INACTIVE),
        ]
        for name, email, member_status in samples:
            exists = session.exec(
                select(Member).where(Member.organization_id == org.id, Member.email == email)
            ).first()
            if not exists:
                session.add(Member(organization_id=org.id, name=name, email=email, status=member_status.value))
        session.commit()
        print("✅ Added sample members")

        # -----------------------------
        # 💳 Plan + payment
        # -----------------------------
        plan = session.exec(
            select(MembershipPlan).where(MembershipPlan.organization_id == org.id, MembershipPlan.name == "Standard")
        ).first()
        if not plan:
            plan = MembershipPlan(
                organization_id=org.id,
                created_by_id=admin.id,
                name="Standard",
                description="Monthly access to all events",
                price=Decimal("25.00"),
                interval=BillingInterval.MONTHLY.value,
                features=["Event access", "Newsletter"],
            )
            session.add(plan)
            session.add(
                Payment(
                    organization_id=org.id,
                    initiated_by_id=admin.id,
                    amount=Decimal("25.00"),
                    status=PaymentStatus.COMPLETED.value,
                    method=PaymentMethod.CASH.value,
                    description="First month",
                )
            )
            session.commit()
            print("✅ Added Standard plan and a payment")

        # -----------------------------
        # 📅 Public event
        # -----------------------------
        event = session.exec(
            select(Event).where(Event.organization_id == org.id, Event.name == "Open House")
        ).first()
        if not event:
            start = utcnow().replace(hour=18, minute=0, second=0, microsecond=0) + timedelta(days=14)
            session.add(
                Event(
                    organization_id=org.id,
                    organizer_id=admin.id,
                    name="Open House",
                    description="Meet the team",
                    date=start,
                    end_date=start + timedelta(hours=2),
                    location="Main Hall",
                    capacity=50,
                )
            )
            session.commit()
            print("✅ Added Open House event")

    print("🌱 Development data seeding complete.")


def seed_staging_data(db: Database):
    """Seed staging database with minimal safe data."""
    print("🌱 Seeding staging data...")

    with db.session() as session:
        ensure_admin(session, "staging-admin@missionboard.dev", "Staging Admin", "staging123", "Staging Org")

    print("🌱 Staging data seeding complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the MissionBoard database.")
    parser.add_argument(
        "--env",
        choices=["dev", "staging"],
        default="dev",
        help="Select environment to seed (dev or staging)",
    )
    args = parser.parse_args()

    database = Database(settings.DATABASE_URL)
    database.create_all()

    if args.env == "dev":
        seed_dev_data(database)
    elif args.env == "staging":
        seed_staging_data(database)
