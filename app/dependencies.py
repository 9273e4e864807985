from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.security import extract_user_id
from app.core.exceptions import UnauthorizedException
from app.database import get_db
from app.domain.registry import SchemaRegistry
from app.repositories.user_repository import UserRepository
from app.models.user import User

security = HTTPBearer()


def get_registry(request: Request) -> SchemaRegistry:
    """Schema registry built at application startup"""
    return request.app.state.registry


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency to validate JWT and resolve the owning user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Read the user id from the 'sub' claim
    4. Load the User; every record the request touches is scoped to it

    Raises:
        HTTPException 401: If token invalid, expired, or the user no longer exists
    """
    try:
        token = credentials.credentials
        user_id = extract_user_id(token)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
