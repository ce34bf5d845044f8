import dataclasses
import logging
from typing import Optional

import click
from pyhanko.config.errors import ConfigurationError
from pyhanko.config.logging import LogConfig, parse_logging_config

from pdfperm.cli._ctx import CLIContext
from pdfperm.cli.runtime import DEFAULT_CONFIG_FILE, logging_setup
from pdfperm.config.settings import (
    PermissionToolConfig,
    parse_config,
    parse_permission_spec,
)

__all__ = ['common_options', 'init_cli_context']


_COMMON_OPTIONS = (
    click.option(
        '--config',
        help=(
            'YAML file to load configuration from '
            f'[default: {DEFAULT_CONFIG_FILE}]'
        ),
        required=False,
        type=click.File('r'),
    ),
    click.option(
        '--verbose',
        help='Run in verbose mode',
        required=False,
        default=False,
        type=bool,
        is_flag=True,
    ),
    click.option(
        '--no-strict-syntax',
        help='Attempt to ignore syntactical problems in the input file',
        required=False,
        default=False,
        type=bool,
        is_flag=True,
    ),
    click.option(
        '--default-permissions',
        help=(
            'Short flags assumed for documents that are not encrypted '
            '[default: *]'
        ),
        required=False,
        type=str,
    ),
)


def common_options(f):
    """
    Options shared by all pdf-perm commands.
    """
    for option in reversed(_COMMON_OPTIONS):
        f = option(f)
    return f


def _read_config_text(config) -> Optional[str]:
    if config is None:
        try:
            with open(DEFAULT_CONFIG_FILE, 'r') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except IOError as e:
            raise click.ClickException(
                f"Failed to read {DEFAULT_CONFIG_FILE}: {str(e)}"
            )
    try:
        return config.read()
    except IOError as e:
        raise click.ClickException(
            f"Failed to read configuration: {str(e)}",
        )


def init_cli_context(
    config, verbose: bool, no_strict_syntax: bool, default_permissions
) -> CLIContext:
    """
    Process the common options: read the configuration, apply command
    line overrides and set up logging.
    """
    config_text = _read_config_text(config)
    try:
        if config_text is not None:
            root_config = parse_config(config_text)
            cfg = root_config.config
            log_config = dict(root_config.log_config)
        else:
            cfg = PermissionToolConfig()
            log_config = parse_logging_config({})
    except ConfigurationError as e:
        raise click.ClickException(f"Configuration problem: {e}")

    overrides = {}
    if no_strict_syntax:
        overrides['strict_syntax'] = False
    if default_permissions is not None:
        try:
            overrides['default_permissions'] = parse_permission_spec(
                default_permissions
            )
        except ConfigurationError as e:
            raise click.BadParameter(
                str(e), param_hint="'--default-permissions'"
            )
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)

    if verbose:
        # override the root logger's logging level, but preserve the output
        root_logger_config = log_config[None]
        log_config[None] = LogConfig(
            level=logging.DEBUG, output=root_logger_config.output
        )
    logging_setup(log_config, verbose)

    if verbose:
        logging.debug("Running with --verbose")
    if config_text is not None:
        logging.debug('Finished reading configuration.')
    else:
        logging.debug('There was no configuration to parse.')
    return CLIContext(config=cfg, verbose=verbose)
