#!/usr/bin/env python3
"""Pet Heaven: single entry point.

Loads settings from ``.env``, configures logging and serves the FastAPI
site. Pets are fetched from The Cat API and The Dog API on first page view;
member features need SUPABASE_URL and SUPABASE_ANON_KEY.

Usage:
    python main.py
    python main.py --port 8000
    python main.py --no-browser
"""

from __future__ import annotations

import argparse
import logging
import threading
import time
import webbrowser

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("pet-heaven")


def _open_browser(url: str, delay: float = 2.0) -> None:
    """Open browser after a delay to give the server time to start.

    Args:
        url: URL to open in the browser.
        delay: Seconds to wait before opening.
    """
    def _delayed_open():
        time.sleep(delay)
        logger.info("Opening browser at %s", url)
        webbrowser.open(url)

    thread = threading.Thread(target=_delayed_open, daemon=True)
    thread.start()


def main() -> None:
    """Parse arguments and launch the web server."""
    from src.config import get_config

    config = get_config()

    parser = argparse.ArgumentParser(description="Pet Heaven adoption website")
    parser.add_argument("--port", type=int, default=config.port, help="Server port")
    parser.add_argument("--host", type=str, default=config.host, help="Server host")
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not open a browser window on startup",
    )
    args = parser.parse_args()

    if not config.cat_api_key or not config.dog_api_key:
        logger.info("Image API key(s) not set; using anonymous, rate-limited access")

    import uvicorn

    from src.api.app import create_app

    app = create_app()

    if not args.no_browser:
        _open_browser(f"http://localhost:{args.port}")

    logger.info("Launching Pet Heaven on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
