"""Configuration loader"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/75.0.3770.142 Safari/537.36"
)


@dataclass
class ScratchConfig:
    """Endpoints, fixed headers and timeouts for the Scratch service"""

    base_url: str = "https://scratch.mit.edu"
    api_url: str = "https://api.scratch.mit.edu"
    user_agent: str = DEFAULT_USER_AGENT
    referer: str = "https://scratch.mit.edu"
    language: str = "en"
    default_csrf_token: str = "a"  # Service doesn't validate it strictly
    impersonate: str = "chrome"  # curl_cffi browser fingerprint
    request_timeout: float = 30.0  # Seconds, per HTTP request
    login_timeout_ms: float = 10000  # Bounded wait for the xtoken in login()
    cookie_storage_path: str = "data/scratch_cookies.json"

    @property
    def login_url(self) -> str:
        return f"{self.base_url}/login/"

    @property
    def session_url(self) -> str:
        return f"{self.base_url}/session/"

    @property
    def logout_url(self) -> str:
        return f"{self.base_url}/accounts/logout/"


def load_config(config_path: str | Path | None = "config.json") -> ScratchConfig:
    """Load Scratch configuration from the "scratch" section of a config file

    Args:
        config_path: Path to config.json, or None for defaults

    Returns:
        ScratchConfig with file values applied over the defaults
    """
    if config_path is None:
        return ScratchConfig()

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r", encoding="utf-8") as f:
        config = json.load(f)

    section = config.get("scratch", {})
    known = {f.name for f in fields(ScratchConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning(f"Ignoring unknown scratch config keys: {', '.join(unknown)}")

    return ScratchConfig(**{k: v for k, v in section.items() if k in known})


def load_credentials(credentials_path: str | Path) -> tuple[str, str]:
    """Read {"username": ..., "password": ...} from a JSON file"""
    with open(credentials_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    username = str(data.get("username", "")).strip()
    password = str(data.get("password", ""))
    if not username or not password:
        raise ValueError(
            f"Credentials file {credentials_path} needs both username and password"
        )
    return username, password
