import json
import logging
import sys
from typing import Annotated, Any, Callable, Dict, List, Optional, Tuple

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from .config import Settings
from .digest import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MIN_LIMIT,
    render_releases,
    render_security_announcements,
)
from .fetch import FetchError, fetch_markdown, fetch_markdown_async


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

def _limit_schema(description: str) -> Dict[str, Any]:
    return {
        "type": "integer",
        "minimum": MIN_LIMIT,
        "maximum": MAX_LIMIT,
        "default": DEFAULT_LIMIT,
        "description": description,
    }


TOOLS: List[Dict[str, Any]] = [
    {
        "name": "get-desktop-releases",
        "title": "Get Docker Desktop Release Notes",
        "description": "Get information about the latest Docker Desktop releases",
        "inputSchema": {
            "type": "object",
            "properties": {"limit": _limit_schema("Number of releases to return")},
            "required": [],
            "additionalProperties": False,
        },
    },
    {
        "name": "get-security-details",
        "title": "Get Docker Desktop Security Details",
        "description": "Get information about the latest Docker Desktop security updates",
        "inputSchema": {
            "type": "object",
            "properties": {
                "limit": _limit_schema("Number of security updates to return")
            },
            "required": [],
            "additionalProperties": False,
        },
    },
]

_TOOLS_BY_NAME = {tool["name"]: tool for tool in TOOLS}

Limit = Annotated[
    int,
    Field(ge=MIN_LIMIT, le=MAX_LIMIT, description="Number of items to return (1-10)"),
]


def check_limit(limit: Any) -> int:
    """Validate a tool ``limit`` argument; None means the default."""
    if limit is None:
        return DEFAULT_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValueError(f"limit must be an integer, got {limit!r}")
    if not MIN_LIMIT <= limit <= MAX_LIMIT:
        raise ValueError(f"limit must be between {MIN_LIMIT} and {MAX_LIMIT}, got {limit}")
    return limit


# ---------------------------------------------------------------------------
# Tool implementations
# ---------------------------------------------------------------------------

# tool name -> (Settings attribute holding the source URL, renderer)
_SOURCES: Dict[str, Tuple[str, Callable[[str, int], str]]] = {
    "get-desktop-releases": ("release_notes_url", render_releases),
    "get-security-details": ("security_announcements_url", render_security_announcements),
}


def _resolve_tool(
    name: str, arguments: Dict[str, Any], settings: Settings
) -> Tuple[str, Callable[[str, int], str], int]:
    source = _SOURCES.get(name)
    if source is None:
        raise ValueError(f"Unknown tool: {name}")
    url_attr, render = source
    limit = check_limit(arguments.get("limit"))
    logger.info("Tool call %s(limit=%d)", name, limit)
    return getattr(settings, url_attr), render, limit


def _dispatch_tool(name: str, arguments: Dict[str, Any], settings: Settings) -> str:
    url, render, limit = _resolve_tool(name, arguments, settings)
    doc = fetch_markdown(url, settings)
    return render(doc.text, limit)


async def _dispatch_tool_async(
    name: str, arguments: Dict[str, Any], settings: Settings
) -> str:
    url, render, limit = _resolve_tool(name, arguments, settings)
    doc = await fetch_markdown_async(url, settings)
    return render(doc.text, limit)


# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

async def _call_for_client(name: str, limit: int, settings: Settings) -> str:
    try:
        return await _dispatch_tool_async(name, {"limit": limit}, settings)
    except FetchError as e:
        logger.error("%s", e)
        raise ToolError(f"Could not retrieve the source document: {e.reason}") from e


def build_server(settings: Settings) -> FastMCP:
    server = FastMCP(
        "release-digest",
        host=settings.mcp_host,
        port=settings.mcp_port,
        sse_path="/mcp",
        debug=settings.debug,
    )

    releases = _TOOLS_BY_NAME["get-desktop-releases"]
    security = _TOOLS_BY_NAME["get-security-details"]

    @server.tool(
        name=releases["name"],
        title=releases["title"],
        description=releases["description"],
    )
    async def get_desktop_releases(limit: Limit = DEFAULT_LIMIT) -> str:
        return await _call_for_client(releases["name"], limit, settings)

    @server.tool(
        name=security["name"],
        title=security["title"],
        description=security["description"],
    )
    async def get_security_details(limit: Limit = DEFAULT_LIMIT) -> str:
        return await _call_for_client(security["name"], limit, settings)

    return server


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

USAGE = """Usage:
  release-digest serve
  release-digest releases [LIMIT]
  release-digest security [LIMIT]
  release-digest tools"""

_COMMANDS = {
    "releases": "get-desktop-releases",
    "security": "get-security-details",
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _parse_limit(args: List[str]) -> Optional[int]:
    if not args:
        return None
    try:
        return int(args[0])
    except ValueError:
        raise ValueError(f"limit must be an integer, got {args[0]!r}") from None


def main(argv: Optional[List[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in ("serve", "tools", *_COMMANDS):
        print(USAGE)
        raise SystemExit(1)

    command = argv[0]
    if command == "tools":
        print(json.dumps(TOOLS, indent=2))
        return

    settings = Settings.from_env()
    configure_logging(settings)

    if command == "serve":
        logger.info(
            "Serving %d tools over %s on %s:%d",
            len(TOOLS),
            settings.mcp_transport,
            settings.mcp_host,
            settings.mcp_port,
        )
        build_server(settings).run(transport=settings.mcp_transport)
        return

    try:
        limit = check_limit(_parse_limit(argv[1:]))
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        raise SystemExit(2)

    try:
        print(_dispatch_tool(_COMMANDS[command], {"limit": limit}, settings))
    except FetchError as e:
        print(f"error: {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
