#!/usr/bin/env python3
"""Run the DB Explorer API without reload and with at least two workers."""

if __name__ == "__main__":
    import uvicorn
    from db_explorer.config import get_settings

    server_config = get_settings().server

    uvicorn.run(
        server_config.app_module,
        host=server_config.host,
        port=server_config.port,
        workers=max(server_config.workers, 2),
        log_config=None,
        access_log=False,
        server_header=False,
    )
