from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from ...core.security import PasswordHasher
from ...schemas.auth import SeedResult
from ...services.seed_service import seed_accounts
from ...store.base import CredentialStore
from ..deps import get_hasher, get_store, require_demo_seeding, service_guard

router = APIRouter(
    prefix="/demo",
    tags=["Demo"],
    dependencies=[Depends(require_demo_seeding)],
)


@router.options("/seed", include_in_schema=False)
async def preflight():
    return {}


@router.post("/seed", response_model=SeedResult)
async def seed_demo_data(
    store: CredentialStore = Depends(get_store),
    hasher: PasswordHasher = Depends(get_hasher),
):
    """Create the demo staff accounts that do not exist yet."""
    with service_guard("Failed to seed demo data"):
        return await run_in_threadpool(seed_accounts, store, hasher)
