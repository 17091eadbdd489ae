"""
Tasks Overview MCP server entry point.

Configuration comes from the environment (VAULT_ROOT, EXCLUDE_DIRS,
POLL_INTERVAL, API_ENABLED, API_PORT). On startup the vault is wrapped in a
FileSystemDocumentStore and scanned once into a TaskCache. A worker thread
applies rebuilds that the polling VaultWatcher requests. The board and task
tools are served over MCP on stdio and, unless disabled, the same handlers
over REST from a uvicorn thread.
"""

import locale
import logging
import os
import sys
import threading
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from tasks_overview.cache.task_cache import TaskCache
from tasks_overview.store.documents import FileSystemDocumentStore
from tasks_overview.tools import register_task_tools
from tasks_overview.watcher.vault_watcher import VaultWatcher

log = logging.getLogger(__name__)

_DEFAULT_EXCLUDE_DIRS = ".git,.obsidian,node_modules,.trash"


def _configure_logging() -> None:
    # stdout carries the MCP stdio transport
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _configure_collation() -> None:
    """Use the user's locale for alphabetical board sorting."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        log.warning("Could not apply the environment's collation locale: %s", e)


def _parse_exclude_dirs(raw: str) -> set[str]:
    """Parse a comma-separated list of directory names to exclude."""
    return {part.strip() for part in raw.split(",") if part.strip()}


def _resolve_vault_root() -> Path:
    raw = os.environ.get("VAULT_ROOT", "")
    if not raw:
        log.error("VAULT_ROOT environment variable is not set")
        sys.exit(1)
    vault_root = Path(raw)
    if not vault_root.is_dir():
        log.error("VAULT_ROOT does not exist or is not a directory: %s", vault_root)
        sys.exit(1)
    return vault_root


def _start_api_server(cache, port: int) -> None:
    """Serve the REST API with uvicorn (runs inside a daemon thread)."""
    import uvicorn

    from tasks_overview.api.app import create_app

    log.info("REST API listening on port %d", port)
    uvicorn.run(create_app(cache), host="0.0.0.0", port=port, log_level="warning")


def main() -> None:
    _configure_logging()
    _configure_collation()

    vault_root = _resolve_vault_root()
    exclude_dirs = _parse_exclude_dirs(os.environ.get("EXCLUDE_DIRS", _DEFAULT_EXCLUDE_DIRS))
    store = FileSystemDocumentStore(vault_root, exclude_dirs)

    cache = TaskCache(store)
    cache.initialize()
    cache.start_worker()

    watcher = VaultWatcher(cache, store)
    watcher.start()

    if os.environ.get("API_ENABLED", "true").lower() in ("true", "1", "yes"):
        api_port = int(os.environ.get("API_PORT", "9400"))
        threading.Thread(
            target=_start_api_server, args=(cache, api_port), daemon=True, name="rest-api"
        ).start()

    mcp = FastMCP("tasks-overview")
    register_task_tools(mcp, cache)

    log.info("Serving task tools for %s", vault_root)
    try:
        mcp.run(transport="stdio")
    finally:
        watcher.stop()
        cache.stop_worker()


if __name__ == "__main__":
    main()
