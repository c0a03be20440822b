"""HTTP adapter for the study ledger backend.

The bearer credential belongs to one LedgerClient instance and is sent
per request; nothing is written to process-wide state.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError as PydanticValidationError

from .errors import LedgerError, PhraseUnavailable, SubmissionFailure, ValidationError
from .models import SessionRecord, StudySessionCreate, Subject, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class LedgerClient:
    """Thin client for the ledger REST API (`<base_url>/api/...`)."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.api_url = base_url.rstrip("/") + "/api"
        self.timeout = timeout
        self._token = token or None
        self._session = session or requests.Session()

    # ---- Credential lifecycle ----

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_token(self, token: str | None) -> None:
        self._token = token or None

    def login(self, email: str, password: str) -> str:
        """Exchange credentials for a bearer token and keep it on this client."""
        data = self._request("POST", "/auth/login", json={"email": email, "password": password}, auth=False)
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise LedgerError("login response did not include an access token")
        self.set_token(token)
        logger.info(f"Logged in as {email}")
        return token

    def logout(self) -> None:
        self._token = None

    def close(self) -> None:
        self._session.close()

    # ---- Endpoints ----

    def create_study_session(self, subject_id: str, duration_minutes: int) -> SessionRecord:
        """POST /study-sessions. A failed request is a SubmissionFailure."""
        try:
            payload = StudySessionCreate(subject_id=subject_id, duration_minutes=duration_minutes)
        except PydanticValidationError as exc:
            raise ValidationError(f"invalid study session: {exc}") from exc

        try:
            data = self._request("POST", "/study-sessions", json=payload.model_dump())
        except LedgerError as exc:
            raise SubmissionFailure(str(exc), status_code=exc.status_code) from exc

        # Past this point the ledger has stored the session.
        if not isinstance(data, dict):
            data = {}
        try:
            return SessionRecord(**{**payload.model_dump(), **data})
        except PydanticValidationError as exc:
            logger.warning(f"Session saved but reply body was not understood: {exc}")
            return SessionRecord(**payload.model_dump())

    def list_subjects(self) -> list[Subject]:
        data = self._request("GET", "/subjects")
        if not isinstance(data, list):
            raise LedgerError("expected a list of subjects")
        try:
            return [Subject(**item) for item in data]
        except (PydanticValidationError, TypeError) as exc:
            raise LedgerError(f"unexpected subject payload: {exc}") from exc

    def motivational_phrase(self, context: str) -> str:
        try:
            data = self._request("POST", "/motivational-phrase", json={"context": context})
        except LedgerError as exc:
            raise PhraseUnavailable(str(exc), status_code=exc.status_code) from exc

        phrase = data.get("phrase") if isinstance(data, dict) else None
        if not isinstance(phrase, str) or not phrase.strip():
            raise PhraseUnavailable("phrase service returned no phrase")
        return phrase.strip()

    def fetch_profile(self) -> UserProfile:
        data = self._request("GET", "/auth/profile")
        if not isinstance(data, dict):
            raise LedgerError("expected a profile object")
        try:
            return UserProfile(**data)
        except PydanticValidationError as exc:
            raise LedgerError(f"unexpected profile payload: {exc}") from exc

    def fetch_dashboard(self) -> dict:
        data = self._request("GET", "/dashboard")
        if not isinstance(data, dict):
            raise LedgerError("expected a dashboard object")
        return data

    # ---- Internal ----

    def _headers(self, auth: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if auth and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _request(self, method: str, path: str, json: dict | None = None, auth: bool = True) -> Any:
        url = f"{self.api_url}{path}"
        try:
            response = self._session.request(
                method, url, json=json, headers=self._headers(auth), timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning(f"{method} {path} failed: {exc}")
            raise LedgerError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {detail}")
            raise LedgerError(f"{method} {path} -> {response.status_code}: {detail}", status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise LedgerError(f"{method} {path} returned invalid JSON") from exc


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason or "error"
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)[:200]
