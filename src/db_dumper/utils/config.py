"""
config handling for dynaconf
"""
import logging
import os
import sys
from importlib.resources import files
from pathlib import Path

from dynaconf import Dynaconf, Validator


def parse_config(config_folder: Path) -> Dynaconf:
    """
    Parse config with dynaconf.
    Writes the packaged default.toml to the folder if it is missing.
    :param config_folder: folder containing default.toml and config.toml
    :return: Dynaconf
    """
    default_config = config_folder / 'default.toml'
    if not os.path.isfile(default_config):
        try:
            config_folder.mkdir(parents=True, exist_ok=True)
            with open(default_config, 'w', encoding='utf-8') as f:
                f.write(files('db_dumper.data').joinpath('default.toml').read_text())
        except Exception as e:
            logging.critical(f'Failed to create default config {default_config}. '
                             'Consider creating the folder writeable for this user '
                             f'or choose a different path. Error: {e}')
            sys.exit(1)

    settings = Dynaconf(
        envvar_prefix='DB_DUMPER',
        settings_files=['default.toml', 'config.toml'],
        root_path=str(config_folder),
        merge_enabled=True,
        validators=[
            Validator('dump.dir', default='.'),
            Validator('dump.verbose', cast=bool, default=False),
            Validator('logging.level', default='INFO'),
        ]
    )
    return settings
