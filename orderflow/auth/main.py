"""
Auth Service API

Issues user access tokens and service-identity tokens. Every other service
validates these tokens with the shared JWT secret.

Endpoints:
    POST /register: Register a new user
    POST /login: Authenticate and receive an access token
    GET /me: Get the current user's information
    POST /service-token: Exchange a service name/secret pair for a service token
    GET /healthz: Health check endpoint for orchestration systems
"""
import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import Depends, FastAPI, status
from sqlalchemy.orm import Session

from .. import config
from ..errors import UnauthorizedError
from ..health import check_health
from ..responses import Envelope, register_error_handlers
from ..security import (
    TOKEN_TYPE_SERVICE,
    TOKEN_TYPE_USER,
    RequestContext,
    create_token,
    require_context,
)
from . import credentials, models, schemas
from .database import engine, get_db

config.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    models.Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="auth-service", lifespan=lifespan)
register_error_handlers(app)


@app.get("/healthz")
def health(db: Session = Depends(get_db)):
    """Health check endpoint for the auth service."""
    return check_health("auth", db)

@app.post("/register", response_model=Envelope[schemas.User], status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user.

    Args:
        user: Registration data (email, password, role)
        db: Database session (injected)

    Raises:
        ConflictError: If email is already registered
    """
    db_user = credentials.create_user(db, user)
    logger.info(f"Registered user {db_user.id} with role {db_user.role}")
    return Envelope[schemas.User](
        status=status.HTTP_201_CREATED,
        message="user registered",
        data=schemas.User.model_validate(db_user),
    )

@app.post("/login", response_model=Envelope[schemas.Token])
def login(login_data: schemas.UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate user and return an access token.

    Raises:
        UnauthorizedError: If credentials are invalid
    """
    user = credentials.authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise UnauthorizedError("incorrect email or password")

    expires = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_token(user.id, TOKEN_TYPE_USER, expires, email=user.email, role=user.role)
    return Envelope[schemas.Token](
        message="login successful",
        data=schemas.Token(
            access_token=access_token,
            expires_in=int(expires.total_seconds()),
            user=schemas.User.model_validate(user),
        ),
    )

@app.get("/me", response_model=Envelope[schemas.User])
def get_current_user_info(
    context: RequestContext = Depends(require_context),
    db: Session = Depends(get_db)
):
    """Get the user the bearer token was issued to."""
    user = None
    if not context.claims.is_service:
        user = credentials.get_user(db, context.claims.sub)
    if user is None:
        raise UnauthorizedError("token does not belong to a user")
    return Envelope[schemas.User](data=schemas.User.model_validate(user))

@app.post("/service-token", response_model=Envelope[schemas.ServiceToken])
def issue_service_token(request: schemas.ServiceTokenRequest):
    """
    Issue a service-identity token.

    Raises:
        UnauthorizedError: If the service is unknown or the secret is wrong
    """
    if not credentials.verify_service_secret(request.service_name, request.service_secret):
        logger.warning(f"Rejected service token request for '{request.service_name}'")
        raise UnauthorizedError("invalid service credentials")

    expires = timedelta(minutes=config.SERVICE_TOKEN_EXPIRE_MINUTES)
    token = create_token(request.service_name, TOKEN_TYPE_SERVICE, expires)
    logger.info(f"Issued service token for '{request.service_name}'")
    return Envelope[schemas.ServiceToken](
        data=schemas.ServiceToken(token=token, expires_in=int(expires.total_seconds())),
    )
