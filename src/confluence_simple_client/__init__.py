import json
import logging
import os
import sys

import click
from dotenv import load_dotenv
from requests.exceptions import RequestException

from .config import ConfluenceConfig
from .connection import ConfluenceConnection
from .exceptions import ConfluenceClientError, ConfluenceQueryError
from .query import ConfluenceQuery, QueryOptions
from .utils.logging import setup_logging

__version__ = "0.3.0"

logger = logging.getLogger("confluence-simple-client")


@click.command()
@click.argument("address")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file"
)
@click.option(
    "--connection-string",
    help="Connection string: 'Data Source=<url>;User ID=<login>;password=<password>;'",
)
@click.option(
    "--confluence-url",
    help="Confluence URL (e.g., https://your-domain.atlassian.net/wiki)",
)
@click.option("--confluence-username", help="Confluence username/email")
@click.option("--confluence-token", help="Confluence API token or password")
@click.option(
    "--method",
    type=click.Choice(["GET", "POST", "PUT", "DELETE"], case_sensitive=False),
    help="HTTP method (default: POST with --body, GET without)",
)
@click.option("--body", help="JSON request body")
@click.option(
    "--paged/--single",
    default=False,
    help="Follow _links.next and print every page (default: single request)",
)
@click.option(
    "--page-size",
    type=click.IntRange(1, 999),
    help="Page size sent as the limit parameter",
)
@click.option(
    "--ssl-verify/--no-ssl-verify",
    default=True,
    help="Verify SSL certificates (default: verify)",
)
@click.option("--indent", default=2, help="Indentation of the printed JSON")
def main(
    address: str,
    verbose: int,
    env_file: str | None,
    connection_string: str | None,
    confluence_url: str | None,
    confluence_username: str | None,
    confluence_token: str | None,
    method: str | None,
    body: str | None,
    paged: bool,
    page_size: int | None,
    ssl_verify: bool,
    indent: int,
) -> None:
    """Query the Confluence REST API and print the JSON response.

    ADDRESS is a REST path such as 'rest/api/content/123' or a shorthand
    like 'content/123' (rest/api) or 'greenhopper:1.0/rapidview'.
    """
    if verbose == 1:
        current_logging_level = logging.INFO
    elif verbose >= 2:  # -vv or more
        current_logging_level = logging.DEBUG
    elif os.getenv("CONFLUENCE_VERBOSE", "false").lower() in ("true", "1", "yes"):
        current_logging_level = logging.INFO
    else:
        current_logging_level = logging.WARNING

    global logger
    logger = setup_logging(current_logging_level)
    logger.debug(f"Logging level set to: {logging.getLevelName(current_logging_level)}")

    def was_option_provided(ctx: click.Context, param_name: str) -> bool:
        return (
            ctx.get_parameter_source(param_name)
            != click.core.ParameterSource.DEFAULT_MAP
            and ctx.get_parameter_source(param_name)
            != click.core.ParameterSource.DEFAULT
        )

    if env_file:
        logger.debug(f"Loading environment from file: {env_file}")
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    # Command-line options take precedence over the environment
    click_ctx = click.get_current_context()
    if connection_string:
        os.environ["CONFLUENCE_CONNECTION_STRING"] = connection_string
    if confluence_url:
        os.environ["CONFLUENCE_URL"] = confluence_url
    if confluence_username:
        os.environ["CONFLUENCE_USERNAME"] = confluence_username
    if confluence_token:
        os.environ["CONFLUENCE_API_TOKEN"] = confluence_token
    if page_size is not None:
        os.environ["CONFLUENCE_PAGE_SIZE"] = str(page_size)
    if was_option_provided(click_ctx, "ssl_verify"):
        os.environ["CONFLUENCE_SSL_VERIFY"] = str(ssl_verify).lower()

    try:
        config = ConfluenceConfig.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with ConfluenceConnection.from_config(config) as connection:
        query = connection.create_query()
        try:
            if paged:
                for document in query.query_paged(address, body=body, method=method):
                    click.echo(json.dumps(document, indent=indent))
            else:
                document = query.query(address, body=body, method=method)
                click.echo(json.dumps(document, indent=indent))
        except ConfluenceQueryError as e:
            click.echo(f"Error: query failed ({e.status_code}): {e}", err=True)
            sys.exit(1)
        except RequestException as e:
            logger.error(f"Request to {connection.server} failed: {e}")
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)


__all__ = [
    "main",
    "__version__",
    "ConfluenceConfig",
    "ConfluenceConnection",
    "ConfluenceQuery",
    "QueryOptions",
    "ConfluenceClientError",
    "ConfluenceQueryError",
]

if __name__ == "__main__":
    main()
