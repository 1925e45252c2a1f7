"""
api.py — REST API for the BetGuard mock betting backend.

Features:
  - /auth/register and /auth/login with bearer session tokens
  - /bets/place with rule-based fraud detection and account flagging
  - /bets/history and /users/account-status
  - CORS middleware
  - Structured request logging
  - JSON 404 for unknown routes
"""
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from config import (
    API_HOST, API_PORT, ENVIRONMENT, SERVICE_NAME, SERVICE_VERSION, get_logger,
)
from errors import BetGuardError
from models import isoformat
from services import BettingService

logger = get_logger("api")


# ─── Response models ─────────────────────────────────────────────────

class UserView(BaseModel):
    id: str
    username: str
    email: str
    status: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserView


class BetView(BaseModel):
    id: str
    matchId: str
    selection: str
    odds: float
    amount: float
    status: str


class PlaceBetResponse(BaseModel):
    message: str
    betId: str
    bet: BetView


class BetHistoryEntry(BetView):
    createdAt: str


class AccountStatusResponse(BaseModel):
    accountId: str
    status: str
    flags: List[Dict[str, Any]]
    restrictions: List[str]
    verificationStatus: str
    fraudWarnings: int
    lastUpdated: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
    version: str
    environment: str


# ─── Dependencies ────────────────────────────────────────────────────

def get_service(request: Request) -> BettingService:
    return request.app.state.service


def current_account(
    authorization: Optional[str] = Header(None),
    service: BettingService = Depends(get_service),
) -> str:
    """Resolve the bearer token to an account id or fail with 401."""
    return service.authenticate(authorization)


# ─── Error handlers ──────────────────────────────────────────────────

async def betguard_error_handler(request: Request, exc: BetGuardError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Malformed request body", "code": "validation-error"},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={
            "error": "Endpoint not found",
            "message": f"{request.method} {request.url.path} is not a valid endpoint",
            "code": "not-found",
        })
    return JSONResponse(status_code=exc.status_code,
                        content={"error": str(exc.detail), "code": "http-error"})


# ─── App factory ─────────────────────────────────────────────────────

def create_app(service: Optional[BettingService] = None) -> FastAPI:
    """Build an app around its own backend state. Each call starts empty."""
    app = FastAPI(
        title=SERVICE_NAME,
        description="In-memory betting backend with rule-based fraud detection",
        version=SERVICE_VERSION,
    )
    app.state.service = service or BettingService()
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BetGuardError, betguard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # ─── Auth endpoints ──────────────────────────────────────────────

    @app.post("/auth/register", status_code=201, response_model=AuthResponse, tags=["Auth"])
    async def register(
        payload: Optional[Dict[str, Any]] = Body(None),
        service: BettingService = Depends(get_service),
    ):
        """Create an account and return a session token."""
        result = service.register(payload or {})
        return {
            "message": "User registered successfully",
            "token": result.token,
            "user": result.account.public_view(),
        }

    @app.post("/auth/login", response_model=AuthResponse, tags=["Auth"])
    async def login(
        payload: Optional[Dict[str, Any]] = Body(None),
        service: BettingService = Depends(get_service),
    ):
        """Exchange username/password for a new session token."""
        result = service.login(payload or {})
        return {
            "message": "Login successful",
            "token": result.token,
            "user": result.account.public_view(),
        }

    # ─── Bet endpoints ───────────────────────────────────────────────

    @app.post("/bets/place", status_code=201, response_model=PlaceBetResponse, tags=["Bets"])
    async def place_bet(
        payload: Optional[Dict[str, Any]] = Body(None),
        account_id: str = Depends(current_account),
        service: BettingService = Depends(get_service),
    ):
        """Place a bet. Fraudulent requests are rejected and flag the account."""
        bet = service.place_bet(account_id, payload or {})
        return {
            "message": "Bet placed successfully",
            "betId": bet.id,
            "bet": bet.public_view(),
        }

    @app.get("/bets/history", response_model=List[BetHistoryEntry], tags=["Bets"])
    async def bet_history(
        account_id: str = Depends(current_account),
        service: BettingService = Depends(get_service),
    ):
        """Accepted bets for the caller, newest first."""
        return service.bet_history(account_id)

    # ─── Account endpoints ───────────────────────────────────────────

    @app.get("/users/account-status", response_model=AccountStatusResponse, tags=["Account"])
    async def account_status(
        account_id: str = Depends(current_account),
        service: BettingService = Depends(get_service),
    ):
        """Status, fraud flags and restrictions for the caller's account."""
        return service.account_status(account_id)

    # ─── System ──────────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health(request: Request):
        """Health check endpoint."""
        return {
            "status": "OK",
            "timestamp": isoformat(datetime.now(timezone.utc)),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "version": SERVICE_VERSION,
            "environment": ENVIRONMENT,
        }

    # ─── Request logging middleware ──────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests with timing."""
        start = time.time()
        response = await call_next(request)
        elapsed = round((time.time() - start) * 1000, 1)
        logger.info("%s %s -> %d (%.1fms)", request.method, request.url.path,
                    response.status_code, elapsed)
        return response

    return app


app = create_app()


# ─── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("Starting %s on %s:%d", SERVICE_NAME, API_HOST, API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)
