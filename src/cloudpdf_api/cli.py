# cli.py
import json
import logging

import click

from cloudpdf_api.config.settings import get_settings
from cloudpdf_api.database.local import JsonFileStore

# Configure logging
logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
def cli():
    """CLI commands for the CloudPDF API"""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST)")
@click.option("--port", default=None, type=int, help="Port (defaults to PORT)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development only)")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "cloudpdf_api.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    for name, value in settings.redacted().items():
        print(f"  {name}: {value}")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the raw records")
def list_documents(as_json):
    """List the records of the metadata file"""
    settings = get_settings()
    records = JsonFileStore(settings.db_file).list()

    if as_json:
        print(json.dumps(records, indent=2))
        return

    if not records:
        print(f"No documents in {settings.db_file}")
        return
    for record in records:
        cached = " (cached)" if record.get("source") == "telegram" and record.get("localPath") else ""
        print(f"{record.get('id')}  [{record.get('source')}]  {record.get('title') or record.get('name')}{cached}")


if __name__ == "__main__":
    cli()
