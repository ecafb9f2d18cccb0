"""
config.py – Centralised configuration loaded from environment variables.

A `.env` file is loaded first; when ``TESTRAIL_PROFILE`` is set, the
matching ``.env.<profile>`` file is layered on top of it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

from errors import ConfigurationError

TRUE_VALUES = {"true", "1", "yes", "on"}

DEFAULT_RUN_NAME = "Automated test run"
DEFAULT_PLAN_NAME = "Automated test plan"
DEFAULT_FEATURES_DIR = "features"


def load_environment(profile: str | None = None) -> None:
    """Populate ``os.environ`` from ``.env`` and an optional profile file."""
    load_dotenv(".env")
    profile = profile or os.getenv("TESTRAIL_PROFILE", "")
    if profile:
        load_dotenv(f".env.{profile}", override=True)


def _get_int(env: Mapping[str, str], key: str) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got '{raw}'") from None


def _get_bool(env: Mapping[str, str], key: str) -> bool:
    return (env.get(key) or "").strip().lower() in TRUE_VALUES


def _get_str(env: Mapping[str, str], key: str, default: str = "") -> str:
    return (env.get(key) or "").strip() or default


@dataclass(frozen=True)
class Settings:
    """Validated, read-only application settings."""

    # ── TestRail connection ─────────────────────────────────
    base_url: str = ""
    username: str = ""
    password: str = ""
    project_id: int = 0

    # ── Run / plan selection ────────────────────────────────
    suite_id: int = 0
    run_id: int = 0
    plan_id: int = 0
    run_create_new: bool = False
    run_name: str = DEFAULT_RUN_NAME
    plan_create_new: bool = False
    plan_name: str = DEFAULT_PLAN_NAME
    plan_close: bool = False

    # ── Behaviour ───────────────────────────────────────────
    add_results: bool = False
    create_feature_files: bool = False
    features_dir: str = DEFAULT_FEATURES_DIR

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from *env* (defaults to ``os.environ``)."""
        if env is None:
            load_environment()
            env = os.environ
        return cls(
            base_url=_get_str(env, "TESTRAIL_BASE_URL"),
            username=_get_str(env, "TESTRAIL_USERNAME"),
            password=env.get("TESTRAIL_PASSWORD", "") or "",
            project_id=_get_int(env, "TESTRAIL_PROJECT_ID"),
            suite_id=_get_int(env, "TESTRAIL_SUITE_ID"),
            run_id=_get_int(env, "TESTRAIL_RUN_ID"),
            plan_id=_get_int(env, "TESTRAIL_PLAN_ID"),
            run_create_new=_get_bool(env, "TESTRAIL_RUN_CREATE_NEW"),
            run_name=_get_str(env, "TESTRAIL_RUN_NAME", DEFAULT_RUN_NAME),
            plan_create_new=_get_bool(env, "TESTRAIL_PLAN_CREATE_NEW"),
            plan_name=_get_str(env, "TESTRAIL_PLAN_NAME", DEFAULT_PLAN_NAME),
            plan_close=_get_bool(env, "TESTRAIL_PLAN_CLOSE"),
            add_results=_get_bool(env, "TESTRAIL_ADD_RESULTS"),
            create_feature_files=_get_bool(env, "TESTRAIL_CREATE_FEATURE_FILES"),
            features_dir=_get_str(env, "TESTRAIL_FEATURES_DIR", DEFAULT_FEATURES_DIR),
        )

    def require(self, attr: str) -> int | str:
        """Return a setting, raising `ConfigurationError` when it is unset."""
        value = getattr(self, attr)
        if not value:
            raise ConfigurationError(f"TESTRAIL_{attr.upper()} is not configured")
        return value

    def validate(self) -> None:
        """Halt early if the always-required values are missing."""
        missing: list[str] = []
        if not self.base_url:
            missing.append("TESTRAIL_BASE_URL")
        if not self.username:
            missing.append("TESTRAIL_USERNAME")
        if not self.password:
            missing.append("TESTRAIL_PASSWORD")
        if not self.project_id:
            missing.append("TESTRAIL_PROJECT_ID")

        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "  → Copy .env.example to .env and fill in all values."
            )
