from pathlib import Path

from mcp_swimlanes.config import BUNDLED_SYNTAX_FILE, DEFAULT_API_URL, Settings


def test_defaults():
    settings = Settings.from_env({})

    assert settings.api_url == DEFAULT_API_URL
    assert settings.syntax_file == BUNDLED_SYNTAX_FILE
    assert settings.http_timeout == 120.0
    assert settings.log_level == "INFO"


def test_bundled_syntax_file_ships_with_package():
    assert BUNDLED_SYNTAX_FILE.is_file()


def test_overrides():
    settings = Settings.from_env({
        "SWIMLANES_API_URL": "http://localhost:9000/v1/",
        "SWIMLANES_SYNTAX_FILE": "/tmp/syntax.md",
        "SWIMLANES_HTTP_TIMEOUT": "5",
        "SWIMLANES_LOG_LEVEL": "debug",
    })

    assert settings.api_url == "http://localhost:9000/v1"
    assert settings.syntax_file == Path("/tmp/syntax.md")
    assert settings.http_timeout == 5.0
    assert settings.log_level == "DEBUG"
