"""FastAPI main application for the Rummy game backend"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import register_error_handlers, router
from .engine import RummyEngine
from .rules import rules_from_env

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(engine: Optional[RummyEngine] = None) -> FastAPI:
    """Build the API around an engine (a fresh one configured from the environment by default)."""
    app = FastAPI(title="Rummy Card Game API", version="1.0.0")
    app.state.engine = engine or RummyEngine(rules=rules_from_env())

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Rummy Card Game API", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "rooms": len(app.state.engine.store)}

    register_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3000)
