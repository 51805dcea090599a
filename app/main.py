"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.middleware import AccessFilterMiddleware
from app.api.policy import build_policy
from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.services.authorization import AuthorizationPolicy
from app.services.revocation import RevocationRegistry
from app.services.tokens import TokenService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def create_app(
    settings: Settings | None = None,
    policy: AuthorizationPolicy | None = None,
    token_service: TokenService | None = None,
    revocations: RevocationRegistry | None = None,
) -> FastAPI:
    """
    Build the API. Fails at startup if the signing key is unusable
    (TokenConfigError) or the access rules are ambiguous (PolicyConfigError).
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    token_service = token_service or TokenService(
        settings.JWT_SECRET.get_secret_value(), settings.JWT_ALGORITHM
    )
    revocations = revocations or RevocationRegistry()
    policy = policy or build_policy(settings.API_V1_PREFIX)

    app = FastAPI(
        title="Ridepool API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.token_service = token_service
    app.state.revocations = revocations
    app.state.policy = policy

    register_exception_handlers(app)

    # Added first so CORS (added last, outermost) answers preflight requests before the filter.
    app.add_middleware(
        AccessFilterMiddleware,
        policy=policy,
        tokens=token_service,
        revocations=revocations,
        fail_closed=settings.AUTH_FAIL_CLOSED,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else settings.CORS_ORIGINS,
        allow_credentials=settings.APP_ENV != "dev",
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Ridepool API"}

    logger.info(
        "Ridepool API configured: env=%s jwt_algorithm=%s rules=%s",
        settings.APP_ENV,
        token_service.algorithm,
        len(policy.rules),
    )
    return app


app = create_app()
