import uvicorn

from abuse_guard.settings import get_config


def main() -> None:
    config = get_config()
    uvicorn.run(
        "abuse_guard.application:get_production_app",
        factory=True,
        host=config.api.host,
        port=config.api.port,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
