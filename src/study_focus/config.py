"""Configuration loaded from the environment (and a local .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass

import click
from dotenv import load_dotenv

from .ledger import DEFAULT_TIMEOUT, LedgerClient

ENV_PREFIX = "STUDY_FOCUS_"


@dataclass
class FocusConfig:
    api_url: str | None = None
    token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    verbose: bool = False

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "FocusConfig":
        env = os.environ if environ is None else environ
        raw_timeout = env.get(f"{ENV_PREFIX}TIMEOUT", "")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise click.ClickException(f"{ENV_PREFIX}TIMEOUT must be a number, got '{raw_timeout}'")
        return cls(
            api_url=env.get(f"{ENV_PREFIX}API_URL") or None,
            token=env.get(f"{ENV_PREFIX}TOKEN") or None,
            timeout=timeout,
            verbose=env.get(f"{ENV_PREFIX}VERBOSE", "false").lower() == "true",
        )

    def validate(self) -> None:
        """Check settings needed to talk to the ledger."""
        if not self.api_url:
            raise click.ClickException(
                f"{ENV_PREFIX}API_URL is not set. Export it or add it to a .env file."
            )
        if self.timeout <= 0:
            raise click.ClickException(f"{ENV_PREFIX}TIMEOUT must be positive, got {self.timeout}")

    def ledger_client(self) -> LedgerClient:
        self.validate()
        return LedgerClient(self.api_url, token=self.token, timeout=self.timeout)


def get_config() -> FocusConfig:
    """Load .env (if present) and build the config from the environment."""
    load_dotenv()
    return FocusConfig.from_env()
