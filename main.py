import os

import uvicorn

from goalpath.logger import setup_logging


def main():
    """Main entry point for the goalpath web service."""
    setup_logging()

    reload_enabled = os.getenv("GOALPATH_RELOAD", "0").lower() in {"1", "true", "yes"}
    host = os.getenv("GOALPATH_HOST", "0.0.0.0")
    port = int(os.getenv("GOALPATH_PORT", "8010"))

    uvicorn.run(
        "web.backend.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=["web", "goalpath", "interface", "scheduler"] if reload_enabled else None,
    )


if __name__ == "__main__":
    main()
