from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from supabase._async.client import AsyncClient
from datetime import datetime
from jose import JWTError, jwt
import logging
import uuid

from morningproof.config.database import get_async_supabase_client
from morningproof.config.settings import get_settings
from morningproof.models.schemas import AnonymousSignInRequest, TimezoneUpdate, Token, User
from morningproof.utils.timezone_utils import normalize_timezone

router = APIRouter()
logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/anonymous")


def create_access_token(data: dict) -> str:
    settings = get_settings()
    to_encode = data.copy()
    # Add timestamp to make each token unique, even for the same user
    to_encode["iat"] = datetime.utcnow().timestamp()
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _user_from_row(user_data: dict) -> User:
    return User(
        id=user_data["id"],
        name=user_data.get("name") or "",
        timezone=normalize_timezone(user_data.get("timezone", "UTC")),
        created_at=user_data.get("created_at"),
    )


@router.post("/anonymous", response_model=Token)
async def sign_in_anonymously(
    request: AnonymousSignInRequest,
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Create a user without credentials and return a bearer token for it"""
    try:
        user_row = {
            "id": str(uuid.uuid4()),
            "name": request.name.strip(),
            "timezone": normalize_timezone(request.timezone),
            "created_at": datetime.utcnow().isoformat(),
        }
        result = await supabase.table("users").insert(user_row).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create user")

        user = _user_from_row(result.data[0])
        logger.info(f"Anonymous user created: {user.id}")
        return Token(access_token=create_access_token({"sub": str(user.id)}), user=user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Anonymous sign-in failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    supabase: AsyncClient = Depends(get_async_supabase_client)
) -> User:
    settings = get_settings()
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    result = await supabase.table("users").select("*").eq("id", user_id).execute()
    if not result.data:
        raise credentials_exception

    return _user_from_row(result.data[0])


@router.get("/me", response_model=User)
async def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me/timezone", response_model=User)
async def update_timezone(
    update: TimezoneUpdate,
    current_user: User = Depends(get_current_user),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    timezone = normalize_timezone(update.timezone)
    await supabase.table("users").update({"timezone": timezone}).eq("id", str(current_user.id)).execute()
    return current_user.model_copy(update={"timezone": timezone})
