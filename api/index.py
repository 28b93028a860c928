"""
Serverless entry point for the Buganizer API
"""
import os

# Set environment variables for serverless
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("SLA_CONFIG_PATH", "/tmp/sla_config.yaml")
os.environ.setdefault("SLA_MONITOR_INTERVAL", "0")  # No background scheduler in serverless

from mangum import Mangum  # noqa: E402

from buganizer.main import app  # noqa: E402

# Lambda handler for ASGI app (disable lifespan for serverless)
handler = Mangum(app, lifespan="off")
