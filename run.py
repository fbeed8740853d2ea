#!/usr/bin/env python3

import uvicorn
from auth_service.utils.logger import app_logger


if __name__ == "__main__":
    app_logger.info("=" * 80)
    app_logger.info("Starting Auth Service API Server")
    app_logger.info("=" * 80)

    uvicorn.run(
        "auth_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
        access_log=True
    )
