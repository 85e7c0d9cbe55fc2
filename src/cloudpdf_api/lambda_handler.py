"""Lambda handler for the CloudPDF API using Mangum."""
from typing import Optional

from mangum import Mangum

from cloudpdf_api.config.settings import Settings
from cloudpdf_api.main import create_app

_handler: Optional[Mangum] = None


def build_handler(settings: Optional[Settings] = None) -> Mangum:
    """Wrap the FastAPI app for Lambda compatibility."""
    return Mangum(create_app(settings), lifespan="off")


def lambda_handler(event, context):
    """Lambda entry point; the app is built on the first invocation and reused."""
    global _handler
    if _handler is None:
        _handler = build_handler()
    return _handler(event, context)
