"""
api_client.py — HTTP client for the betting backend, including fraud probes.

Talks to any server implementing the BetGuard wire contract (the mock in
api.py or a real backend). `place_fraudulent_bet` clones a legitimate bet,
applies one mutation per fraud category and reports whether the server
detected it.
"""
import copy
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from config import (
    API_BASE_URL, API_TIMEOUT_S, TAMPER_MARKER, TIMESTAMP_BACKDATE_SECONDS,
    UNAUTHORIZED_FIELDS, get_logger,
)
from models import isoformat

logger = get_logger("api_client")


class ApiError(Exception):
    """Non-2xx response from the backend."""

    def __init__(self, status_code: int, body: Any, method: str = "", path: str = ""):
        super().__init__(f"{method} {path} -> {status_code}: {body}")
        self.status_code = status_code
        self.body = body


@dataclass
class FraudProbeResult:
    fraud_type: str
    success: bool
    fraud_detected: bool
    status_code: int
    data: Any = None
    error: Any = None


# ─── Payload mutations ───────────────────────────────────────────────

def mutate_bet(bet: dict, fraud_type: str, now: Optional[datetime] = None) -> dict:
    """Deep-copy a legitimate bet and apply the mutation for `fraud_type`."""
    mutated = copy.deepcopy(bet)
    now = now or datetime.now(timezone.utc)

    if fraud_type == "negative-amount":
        mutated["amount"] = -abs(float(mutated["amount"]))
    elif fraud_type == "odds-manipulation":
        mutated["odds"] = str(float(mutated["odds"]) * 10)
    elif fraud_type == "match-alteration":
        mutated["matchId"] = f"{mutated['matchId']}{TAMPER_MARKER}"
    elif fraud_type == "timestamp-manipulation":
        mutated["timestamp"] = isoformat(now - timedelta(seconds=TIMESTAMP_BACKDATE_SECONDS))
    elif fraud_type == "request-tampering":
        for f in UNAUTHORIZED_FIELDS:
            mutated[f] = True
    else:
        # combined attack
        mutated["amount"] = -abs(float(mutated["amount"]))
        mutated["odds"] = str(float(mutated["odds"]) * 5)
    return mutated


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


# ─── Client ──────────────────────────────────────────────────────────

class BettingApiClient:
    """
    Thin wrapper over httpx for the betting API.

    Pass `client` to reuse an existing httpx.Client (for example a FastAPI
    TestClient); otherwise one is created for `base_url`.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 client: Optional[httpx.Client] = None, timeout: float = API_TIMEOUT_S):
        self.client = client or httpx.Client(base_url=base_url or API_BASE_URL, timeout=timeout)
        self.client.headers["Content-Type"] = "application/json"
        if token:
            self.set_auth_token(token)

    def set_auth_token(self, token: str) -> None:
        self.client.headers["Authorization"] = f"Bearer {token}"

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("[API ERROR] %s %s - Network Error: %s", method, path, e)
            raise
        if response.is_success:
            logger.info("[API] %s %s - %d", method, path, response.status_code)
        else:
            logger.error("[API ERROR] %s %s - %d", method, path, response.status_code)
        return response

    def _call(self, method: str, path: str, **kwargs) -> Any:
        response = self._request(method, path, **kwargs)
        body = _body(response)
        if not response.is_success:
            raise ApiError(response.status_code, body, method, path)
        return body

    # ─── Endpoints ───────────────────────────────────────────────────

    def register_user(self, user_data: dict) -> dict:
        return self._call("POST", "/auth/register", json=user_data)

    def login(self, credentials: dict) -> dict:
        data = self._call("POST", "/auth/login", json=credentials)
        if data.get("token"):
            self.set_auth_token(data["token"])
        return data

    def place_bet(self, bet_data: dict) -> dict:
        return self._call("POST", "/bets/place", json=bet_data)

    def get_bet_history(self) -> list:
        return self._call("GET", "/bets/history")

    def get_account_status(self) -> dict:
        return self._call("GET", "/users/account-status")

    def health(self) -> dict:
        return self._call("GET", "/health")

    def place_fraudulent_bet(self, legit_bet: dict, fraud_type: str) -> FraudProbeResult:
        """
        Submit a mutated copy of `legit_bet`.

        fraud_detected is True only for a non-2xx response whose body names
        a fraudType; any other rejection is reported as undetected.
        """
        payload = mutate_bet(legit_bet, fraud_type)
        logger.info("Attempting %s bet: %s", fraud_type, payload)
        response = self._request("POST", "/bets/place", json=payload)
        body = _body(response)

        if response.is_success:
            logger.warning("Fraudulent bet (%s) was accepted by the system!", fraud_type)
            return FraudProbeResult(fraud_type=fraud_type, success=True, fraud_detected=False,
                                    status_code=response.status_code, data=body)

        detected = isinstance(body, dict) and bool(body.get("fraudType"))
        if detected:
            logger.info("Fraud properly detected (%s): %s", body["fraudType"], body.get("error"))
        else:
            logger.warning("Bet rejected without a fraud verdict (%d): %s",
                           response.status_code, body)
        return FraudProbeResult(fraud_type=fraud_type, success=False, fraud_detected=detected,
                                status_code=response.status_code, error=body)
