"""Service factories for FastAPI dependency injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.database import get_async_session
from claimflow.services.auth_service import AuthService
from claimflow.services.claim_service import ClaimService
from claimflow.services.cpm_service import CPMFormService
from claimflow.services.fppa04_service import FPPA04Service
from claimflow.services.storage_service import StorageService
from claimflow.services.user_service import UserService
from claimflow.services.workflow_service import WorkflowService


def get_storage_service() -> StorageService:
    return StorageService()


SessionDep = Annotated[AsyncSession, Depends(get_async_session)]
StorageDep = Annotated[StorageService, Depends(get_storage_service)]


async def get_claim_service(db_session: SessionDep, storage: StorageDep) -> ClaimService:
    return ClaimService(db_session, storage)


async def get_cpm_service(db_session: SessionDep, storage: StorageDep) -> CPMFormService:
    return CPMFormService(db_session, storage)


async def get_workflow_service(db_session: SessionDep, storage: StorageDep) -> WorkflowService:
    return WorkflowService(db_session, storage)


async def get_fppa04_service(db_session: SessionDep, storage: StorageDep) -> FPPA04Service:
    return FPPA04Service(db_session, storage)


async def get_user_service(db_session: SessionDep) -> UserService:
    return UserService(db_session)


async def get_auth_service(db_session: SessionDep) -> AuthService:
    return AuthService(db_session)
