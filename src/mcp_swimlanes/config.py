"""Environment-driven settings."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_API_URL = "https://api.swimlanes.io/v1"
DEFAULT_TIMEOUT = 120.0
BUNDLED_SYNTAX_FILE = Path(__file__).with_name("syntax.md")


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    syntax_file: Path = BUNDLED_SYNTAX_FILE
    http_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        syntax_file = env.get("SWIMLANES_SYNTAX_FILE")
        timeout = env.get("SWIMLANES_HTTP_TIMEOUT")
        return Settings(
            api_url=env.get("SWIMLANES_API_URL", DEFAULT_API_URL).rstrip("/"),
            syntax_file=Path(syntax_file).expanduser() if syntax_file else BUNDLED_SYNTAX_FILE,
            http_timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
            log_level=env.get("SWIMLANES_LOG_LEVEL", "INFO").upper(),
        )
