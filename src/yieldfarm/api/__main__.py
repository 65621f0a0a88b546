# src/yieldfarm/api/__main__.py
from __future__ import annotations

import os

import uvicorn

from yieldfarm.env import load_dotenv_if_present


def main() -> None:
    # Load .env early so YIELDFARM_* vars exist before anything reads them.
    load_dotenv_if_present()

    # Import after dotenv load (prevents "config read before env" surprises)
    from yieldfarm.api.app import create_app
    from yieldfarm.runtime.config import apply_farm_config_to_env, load_farm_config
    from yieldfarm.runtime.event_log import configure_structured_logging
    from yieldfarm.runtime.service import build_service

    cfg = load_farm_config()
    apply_farm_config_to_env(cfg)
    configure_structured_logging()

    host = os.getenv("YIELDFARM_API_HOST", cfg.api_host)
    port = int(os.getenv("YIELDFARM_API_PORT", str(cfg.api_port)))

    uvicorn.run(create_app(service=build_service(cfg)), host=host, port=port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    main()
