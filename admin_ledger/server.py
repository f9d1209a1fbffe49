"""
Server entry point.

Run with:
    admin-ledger
or:
    python -m admin_ledger.server
"""

import uvicorn

from admin_ledger.config import get_settings


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "admin_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    run()
