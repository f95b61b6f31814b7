"""Command-line entrypoint that serves the app with uvicorn."""

import uvicorn

from custom_frames.config import Settings


def main() -> None:
    """Run the ASGI app on the configured host and port."""
    settings = Settings()
    uvicorn.run(
        "custom_frames.api.asgi:app",
        host=settings.host,
        port=settings.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
