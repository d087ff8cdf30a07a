import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


RELEASE_NOTES_URL = "https://docs.docker.com/desktop/release-notes/index.md"
SECURITY_ANNOUNCEMENTS_URL = (
    "https://docs.docker.com/security/security-announcements/index.md"
)
TRANSPORTS = ("sse", "stdio", "streamable-http")


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _number(name: str, default: str, kind=int):
    raw = os.getenv(name, default)
    try:
        return kind(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}.") from None


@dataclass(frozen=True)
class Settings:
    """Runtime configuration loaded from environment variables."""

    # Source documents (markdown renditions of the Docker docs pages)
    release_notes_url: str = RELEASE_NOTES_URL
    security_announcements_url: str = SECURITY_ANNOUNCEMENTS_URL

    http_timeout: float = 15.0

    # Tool server
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 3000
    mcp_transport: str = "sse"

    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Optional overrides:
        - RELEASE_NOTES_URL
        - SECURITY_ANNOUNCEMENTS_URL
        - HTTP_TIMEOUT (seconds)
        - MCP_HOST, MCP_PORT
        - MCP_TRANSPORT (sse, stdio or streamable-http)
        - DEBUG
        """

        transport = os.getenv("MCP_TRANSPORT", "sse").strip().lower()
        if transport not in TRANSPORTS:
            raise RuntimeError(
                f"MCP_TRANSPORT must be one of {', '.join(TRANSPORTS)}, "
                f"got {transport!r}."
            )

        return cls(
            release_notes_url=os.getenv("RELEASE_NOTES_URL", RELEASE_NOTES_URL),
            security_announcements_url=os.getenv(
                "SECURITY_ANNOUNCEMENTS_URL", SECURITY_ANNOUNCEMENTS_URL
            ),
            http_timeout=_number("HTTP_TIMEOUT", "15", float),
            mcp_host=os.getenv("MCP_HOST", "0.0.0.0"),
            mcp_port=_number("MCP_PORT", "3000"),
            mcp_transport=transport,
            debug=_truthy(os.getenv("DEBUG", "false")),
        )
