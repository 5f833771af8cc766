"""Uvicorn launcher for the hub API."""

from __future__ import annotations

from skillhub.config import HubConfig, load_config


def create_default_app():  # noqa: ANN201
    """Factory used by uvicorn: database and documents under the data dir."""
    from skillhub.server.app import create_app

    config = load_config()
    return create_app(str(config.db_path), config.documents_dir, config)


def run_server(config: HubConfig | None = None, host: str = "127.0.0.1") -> None:
    """Start the HTTP API server with uvicorn."""
    import uvicorn

    if config is None:
        config = load_config()

    config.db_path.parent.mkdir(parents=True, exist_ok=True)

    uvicorn.run(
        "skillhub.server.runner:create_default_app",
        factory=True,
        host=host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
