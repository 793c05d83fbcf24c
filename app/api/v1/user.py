from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from app.core.dependencies import get_user_service, get_current_user
from app.services.user import UserService
from app.db.schema import User
from app.models.auth import Token, TokenAccess, TokenRefresh
from app.models.user import UserSignin, UserRead, UserCreate


router = APIRouter()


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=UserRead,
    summary="Register an account",
    description=(
        "Creates a user account, or a company account together with its "
        "collection company when 'account_type' is 'company'."
    )
)
def signup(
    user_in: UserCreate,
    service: UserService = Depends(get_user_service)
):
    try:
        new_user = service.create_user(user_in)
        return service.to_read(new_user)

    except ValueError as e:
        # Catch logic errors like "Email exists" or "Company name exists"
        logger.warning(f"Signup validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except Exception:
        logger.exception("Unexpected error during signup")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while processing your request."
        )


@router.post(
    "/token",
    response_model=Token,
    status_code=status.HTTP_200_OK,
    summary="Signin to get tokens",
    description="Returns an Access Token (short-lived) and Refresh Token (long-lived)."
)
def login(
    signin_data: UserSignin,
    service: UserService = Depends(get_user_service)
):
    user = service.authenticate_user(signin_data.email, signin_data.password)

    if not user:
        # Generic error to prevent user enumeration
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated. Please contact support."
        )

    tokens = service.generate_tokens(user)
    logger.info(f"User logged in: {user.id}")
    return tokens


@router.post(
    "/refresh",
    response_model=TokenAccess,
    status_code=status.HTTP_200_OK,
    summary="Refresh Session",
    description="Exchanges a valid Refresh Token for a new Access Token."
)
def refresh_token(
    refresh_data: TokenRefresh,
    service: UserService = Depends(get_user_service)
):
    new_access_token = service.refresh_session(refresh_data.refresh_token)
    return TokenAccess(access_token=new_access_token)


@router.get(
    "/me",
    response_model=UserRead,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Returns profile info and, for company accounts, the operated company."
)
def get_me(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return service.to_read(current_user)
