"""
Creates incremental MySQL dumps by calling mysqldump and gzip.
"""
import sys
from datetime import datetime
from pathlib import Path
from typing import List

import click
from dynaconf import Dynaconf
from loguru import logger

from db_dumper.database import Database
from db_dumper.utils.config import parse_config
from db_dumper.utils.converters import format_date
from db_dumper.utils.datatypes import (DailyTable, Table, parse_table,
                                       whole_table_path)
from db_dumper.utils.errors import DumperError
from db_dumper.utils.logging import setup_logging


class CtxArgs:
    """
    Cache object for arguments between click group and commands.
    """

    def __init__(self, config_folder: Path, settings: Dynaconf, db: Database):
        self.config_folder = Path(config_folder)
        self.settings = settings
        self.db = db


def parse_tables(entries) -> List[Table]:
    """
    Convert the dump.tables entries of the config.
    :param entries: list of mappings
    :return: list of table descriptors
    """
    return [parse_table(entry) for entry in entries or []]


@click.group()
@click.option(
    '-c',
    '--config-folder',
    help='Folder where the config files are stored. /etc/db-dumper by default.'
         ' Make sure that the user has read and write access to the folder.',
    default='/etc/db-dumper',
)
@click.pass_context
@click.version_option(package_name='db_dumper')
def main(ctx, config_folder):
    """
    Dump MySQL tables whole or one day at a time.
    """
    try:
        settings = parse_config(Path(config_folder))
        log_dir = settings('logging.dir', default=None)
        setup_logging(Path(log_dir) if log_dir else None,
                      settings('logging.level', default='INFO'))

        db = Database(
            database=settings('mysql.database', default=''),
            user=settings('mysql.user', default=''),
            password=settings('mysql.password', default=None) or None,
            tables=parse_tables(settings('dump.tables', default=[])),
            verbose=settings('dump.verbose', cast=bool, default=False),
            root=Path(settings('dump.dir', default='.')),
        )
    except Exception as e:
        logger.exception(f'Error during config parsing! {e}')
        sys.exit(1)

    ctx.obj = CtxArgs(config_folder, settings, db)


@main.command('dump')
@click.option(
    '-v', '--verbose',
    is_flag=True, show_default=True, default=False,
    help='Print every command before it is executed.'
)
@click.option(
    '-n', '--dry-run',
    is_flag=True, show_default=True, default=False,
    help='Only print the commands which would be executed.'
)
@click.pass_context
def dump_command(ctx, verbose, dry_run):
    """
    Dump the structure, all whole tables and the missing days of the daily tables.
    """
    args: CtxArgs = ctx.obj
    db = args.db
    if verbose:
        db.verbose = True
    try:
        if dry_run:
            jobs = db.plan()
            for job in jobs:
                click.secho(f'{job}:', fg='cyan')
                click.echo(f'\t{db.client.describe(job.command)} > {job.output}')
            click.secho(f'{len(jobs)} command(s) planned.', fg='green')
            return
        db.dump()
    except DumperError as e:
        logger.critical(f'Dump failed! {e}')
        sys.exit(1)


@main.command('list')
@click.pass_context
def list_command(ctx):
    """
    List the archive state of all configured tables.
    """
    args: CtxArgs = ctx.obj
    db = args.db
    if len(db.tables) == 0:
        click.secho('None! Add tables to dump.tables in config.toml first...', fg='red',
                    file=sys.stderr)
        sys.exit(1)
    try:
        db.validate()
    except DumperError as e:
        click.secho(str(e), fg='red', file=sys.stderr)
        sys.exit(1)

    output = click.style(f'Tables of {db.database} in {db.directory}:\n', fg='green', bold=True)
    for table in db.tables:
        if isinstance(table, DailyTable):
            days = db.days(table)
            pending = db.pending_days(table)
            output += click.style(f'{table} (daily by {table.date_field})\n\t', fg='cyan')
            output += f'{len(days) - len(pending)}/{len(days)} day(s) archived'
            if pending:
                output += click.style(
                    f', {len(pending)} pending from {format_date(pending[0])}', fg='yellow')
        else:
            path = whole_table_path(db.root, db.database, table.name)
            output += click.style(f'{table} (whole)\n\t', fg='cyan')
            if path.is_file():
                modified = datetime.fromtimestamp(path.stat().st_mtime)
                output += f'{path} @ {modified:%Y-%m-%d %H:%M}'
            else:
                output += click.style('No archive yet.', fg='red')
        output += '\n'
    click.echo(output)


if __name__ == '__main__':
    main()
