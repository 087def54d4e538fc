import os
from pathlib import Path
import sys

import click

from loguru import logger
logger.remove()

# args & params for logger.add():
logger_args = [] # Should contain only one value, the sink.
logger_params = {
    'level':       os.environ.get('REQRES_LOG_LEVEL', 'INFO'),
    'serialize':   os.environ.get('REQRES_LOG_SERIALIZE', False),
}

# python-dotenv evaluates any string as True in a boolean context, so we do the following instead.
if isinstance(logger_params['serialize'], str):
    logger_params['serialize'] = logger_params['serialize'].lower()
if logger_params['serialize'] in (0, '0', 'false', '', 'none', None):
    logger_params['serialize'] = False
else:
    logger_params['serialize'] = True

if (log_file := os.environ.get('REQRES_LOG_FILE', None)):
    logger_args.append(log_file)
    # These values can be passed to logger.add only if the sink is a file:
    logger_params.update({
        'rotation':    os.environ.get('REQRES_LOG_ROTATION', '1 month'),
        'retention':   os.environ.get('REQRES_LOG_RETENTION', '1 year'),
        'compression': os.environ.get('REQRES_LOG_COMPRESSION', 'gz'),
    })

# stdout is reserved for the user listing.
if len(logger_args) == 0:
    logger_args.append(sys.stderr)

logger.add(
    *logger_args,
    **logger_params,
)

from reqres.api.common import default_timeout
from reqres.api.users import Client, UserRecords
from reqres.config import ConfigError, load_config
from reqres.pagination import PaginationReport, StopReason, paginate

def echo_page(page_number: int, records: UserRecords, debug: bool = False) -> None:
    click.echo(f'\n--- Users on Page {page_number} ---')
    for record in records:
        click.echo(f'Name: {record.full_name}')
        if debug:
            click.echo(f'  Debug Info: {record.dump()}')
    click.echo('-------------------------')

def echo_report(report: PaginationReport) -> None:
    match report.stop_reason:
        case StopReason.EXHAUSTED:
            click.echo(f'\nNo more users found on page {report.last_page}. Stopping pagination.')
        case StopReason.FAILED:
            click.echo(f'\nError detected during fetch on page {report.last_page}: {report.reason}', err=True)
        case StopReason.PAGE_LIMIT:
            click.echo(f'\nReached the maximum of {report.max_pages} pages at page {report.last_page}. Stopping pagination.')
    click.echo('\n--- Finished Fetching All Pages ---')
    click.echo(report.summary, err=(report.stop_reason is StopReason.FAILED))

@click.command()
@click.option(
    '--config', 'config_file',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Properties file with api.base.url and debug. Default: ./config.properties, if it exists.',
)
@click.option('--base-url', default=None, help='User-listing endpoint URL. Overrides REQRES_BASE_URL and api.base.url.')
@click.option('--debug/--no-debug', default=None, help='Print every field of every user, or not. Overrides REQRES_DEBUG and debug.')
@click.option('--max-pages', type=click.IntRange(min=1), default=None, help='Stop after this many pages. Default: no limit.')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None, help='Request timeout in seconds.')
@click.option('--first-page', type=click.IntRange(min=1), default=1, show_default=True, help='Page to start from.')
def users(config_file, base_url, debug, max_pages, timeout, first_page):
    '''Print all users from a paginated user-listing endpoint, page by page.'''
    try:
        config = load_config(
            config_file=config_file,
            base_url=base_url,
            debug=debug,
            max_pages=max_pages,
            timeout=timeout,
        )
    except ConfigError as e:
        logger.error('Invalid configuration: {error}', error=str(e))
        raise click.ClickException(str(e))

    click.echo(f'Using API Base URL from config: {config.base_url}')
    click.echo(f'Debugging Enabled: {str(config.debug).lower()}')

    click.echo('\n--- Fetching All Users Across Pages ---')
    with Client(
        base_url=config.base_url,
        timeout=config.httpx_timeout(default_timeout),
    ) as client:
        report = paginate(
            client.fetch,
            on_page=lambda page_number, records: echo_page(page_number, records, debug=config.debug),
            first_page=first_page,
            max_pages=config.max_pages,
        )

    echo_report(report)
    if report.stop_reason is StopReason.FAILED:
        sys.exit(1)
