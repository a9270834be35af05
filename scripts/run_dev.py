#!/usr/bin/env python3
"""Run the DB Explorer API with hot reload, using settings from .env."""

from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent.parent

if __name__ == "__main__":
    import uvicorn
    from db_explorer.config import get_settings

    load_dotenv(project_root / ".env")
    server_config = get_settings().server

    uvicorn.run(
        server_config.app_module,
        host=server_config.host,
        port=server_config.port,
        reload=True,
        reload_dirs=[str(project_root / "src")],
        log_config=None,  # Use our structured logging
        access_log=False,  # Access logging is done by middleware
    )
