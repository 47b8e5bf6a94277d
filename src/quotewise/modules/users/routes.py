"""User API routes."""

from uuid import UUID

from fastapi import APIRouter, Request

from quotewise.core.auth.dependencies import AdminUser, CurrentUser, OwnerUser
from quotewise.core.logging import get_client_ip
from quotewise.modules.users.schemas import UserProfileUpdate, UserPublic, UserStatusUpdate
from quotewise.modules.users.services import UserSvc


router = APIRouter(tags=["users"])


@router.put(
    "/users/me",
    response_model=UserPublic,
    summary="Update own profile",
)
async def update_me(
    data: UserProfileUpdate,
    current_user: CurrentUser,
    service: UserSvc,
) -> UserPublic:
    return UserPublic.model_validate(await service.update_profile(current_user, data))


@router.get(
    "/users",
    response_model=list[UserPublic],
    summary="List users of the caller's company",
)
async def list_company_users(owner: OwnerUser, service: UserSvc) -> list[UserPublic]:
    if owner.company_id is None:
        return []
    users = await service.list_company_users(owner.company_id)
    return [UserPublic.model_validate(u) for u in users]


@router.put(
    "/admin/users/{user_id}/status",
    response_model=UserPublic,
    summary="Activate or deactivate a user",
    description="Users are never deleted. Deactivation revokes all of the user's sessions.",
)
async def set_user_status(
    user_id: UUID,
    data: UserStatusUpdate,
    admin: AdminUser,
    service: UserSvc,
    request: Request,
) -> UserPublic:
    user = await service.set_active(
        user_id,
        data.is_active,
        acting_user=admin,
        ip_address=get_client_ip(request),
    )
    return UserPublic.model_validate(user)
