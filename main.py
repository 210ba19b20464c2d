"""Run the contract signing service with uvicorn."""
import uvicorn

from contracts.api.app import create_app
from core.config.config_service import config_service
from core.logging.setup import configure_logging

config = config_service.app_config()
configure_logging(config.logging.level)

app = create_app(config)

if __name__ == "__main__":
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level=config.logging.level.lower())
