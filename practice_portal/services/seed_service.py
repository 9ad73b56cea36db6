"""
Demo staff directory and the seeding routine that loads it.

Seeded accounts are written straight to the store, so they skip the
registration password rules (the two mock logins use short passwords).
"""

import logging
from typing import Iterable, List, NamedTuple

from ..core.errors import DuplicateAccount, StoreUnavailable
from ..core.security import PasswordHasher, generate_staff_id, utcnow
from ..schemas.auth import SeedResult, SeedSummary, SkippedAccount
from ..schemas.staff import StaffAccount, StaffUser
from ..store.base import CredentialStore, normalize_email

logger = logging.getLogger(__name__)


class DemoAccount(NamedTuple):
    first_name: str
    last_name: str
    email: str
    password: str
    role: str
    organization: str
    phone: str = ""


DEMO_ACCOUNTS = [
    DemoAccount("Demo", "User", "demo@iwil.com", "demo123", "staff",
                "IWIL Protocol", "+1-555-0123"),
    DemoAccount("Admin", "User", "admin@iwil.com", "admin123", "admin",
                "IWIL Protocol", "+1-555-0124"),
    DemoAccount("Dr. Sarah", "Johnson", "sarah.johnson@iwilprotocol.com", "demo123456",
                "doctor", "IWIL Medical Center", "+1 (555) 123-4567"),
    DemoAccount("Michael", "Chen", "michael.chen@iwilprotocol.com", "demo123456",
                "nutritionist", "IWIL Wellness Clinic", "+1 (555) 234-5678"),
    DemoAccount("Emily", "Rodriguez", "emily.rodriguez@iwilprotocol.com", "demo123456",
                "nurse", "IWIL Health Services", "+1 (555) 345-6789"),
    DemoAccount("Dr. James", "Wilson", "james.wilson@iwilprotocol.com", "demo123456",
                "therapist", "IWIL Therapy Center", "+1 (555) 456-7890"),
    DemoAccount("Lisa", "Thompson", "lisa.thompson@iwilprotocol.com", "demo123456",
                "wellness-coach", "IWIL Wellness Institute", "+1 (555) 567-8901"),
    DemoAccount("Admin", "User", "admin@iwilprotocol.com", "admin123456",
                "administrator", "IWIL Protocol HQ", "+1 (555) 678-9012"),
]


def seed_accounts(
    store: CredentialStore,
    hasher: PasswordHasher,
    accounts: Iterable[DemoAccount] = DEMO_ACCOUNTS,
) -> SeedResult:
    """Insert every account not already present; one failure does not stop the batch."""
    store.ensure_schema()

    created: List[StaffUser] = []
    skipped: List[SkippedAccount] = []
    total = 0
    for demo in accounts:
        total += 1
        email = normalize_email(demo.email)
        try:
            if store.find_by_email(email) is not None:
                skipped.append(SkippedAccount(email=email, reason="User already exists"))
                continue

            now = utcnow()
            account = StaffAccount(
                id=generate_staff_id(),
                first_name=demo.first_name,
                last_name=demo.last_name,
                email=email,
                password_hash=hasher.hash(demo.password),
                role=demo.role,
                organization=demo.organization,
                phone=demo.phone,
                created_at=now,
                updated_at=now,
            )
            store.insert(account)
        except DuplicateAccount:
            skipped.append(SkippedAccount(email=email, reason="User already exists"))
            continue
        except StoreUnavailable:
            logger.exception(f"Error creating demo account {email}")
            skipped.append(SkippedAccount(email=email, reason="Creation failed"))
            continue
        created.append(account.to_public())

    logger.info(f"Demo seeding: {len(created)} created, {len(skipped)} skipped")
    return SeedResult(
        summary=SeedSummary(created=len(created), skipped=len(skipped), total=total),
        created_users=created,
        skipped_users=skipped,
    )
