from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from prm.core.database import get_db
from prm.api.dependencies import get_auth_service, get_current_session, verify_csrf
from prm.schemas import MessageResponse, UserResponse, UserUpdate
from prm.services.auth_service import AuthService, OperationResult, ResultCode, USER_NOT_FOUND
from prm.services.session_store import session_store

# Administrative routes require a logged-in session
router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(get_current_session)])

FAILURE_STATUS = {
    ResultCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultCode.DUPLICATE_EMAIL: status.HTTP_400_BAD_REQUEST,
    ResultCode.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _raise_for_failure(result: OperationResult) -> None:
    if not result.success:
        raise HTTPException(
            status_code=FAILURE_STATUS.get(result.code, status.HTTP_400_BAD_REQUEST),
            detail=result.message,
        )


@router.get("/", response_model=List[UserResponse])
async def list_users(auth_service: AuthService = Depends(get_auth_service)):
    """List all users"""
    return auth_service.get_all_users()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, auth_service: AuthService = Depends(get_auth_service)):
    """Get a specific user"""
    user = auth_service.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return user


@router.put("/{user_id}", response_model=MessageResponse, dependencies=[Depends(verify_csrf)])
async def update_user(
    user_id: int,
    patch: UserUpdate,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Update names, email and active flag of a user"""
    result = auth_service.update_user(user_id, patch)
    _raise_for_failure(result)
    return {"message": result.message}


@router.delete("/{user_id}", response_model=MessageResponse, dependencies=[Depends(verify_csrf)])
async def delete_user(
    user_id: int,
    auth_service: AuthService = Depends(get_auth_service),
    db: Session = Depends(get_db)
):
    """Delete a user and end their sessions"""
    result = auth_service.delete_user(user_id)
    _raise_for_failure(result)
    session_store.clear_for_user(db, user_id)
    return {"message": result.message}
