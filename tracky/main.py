"""FastAPI application entrypoint. No business logic; only environment loading and app creation.

Run with: uvicorn tracky.main:app
"""

import logging

from dotenv import load_dotenv

load_dotenv()

from tracky.application import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)

app = create_app()
