from dataclasses import dataclass
from typing import Dict, Optional

import yaml
from pyhanko.config.api import ConfigurableMixin, check_config_keys
from pyhanko.config.errors import ConfigurationError
from pyhanko.config.logging import LogConfig, parse_logging_config

from ..document import DEFAULT_PERMISSIONS
from ..permissions import DocumentPermissions
from ..shortflags import UNSET_MARKER, IgnoredToken

__all__ = [
    'PermissionToolConfig',
    'PermissionToolRootConfig',
    'parse_config',
    'parse_permission_spec',
]


@dataclass(frozen=True)
class PermissionToolConfig(ConfigurableMixin):
    """
    Settings for the permission tool.
    """

    default_permissions: DocumentPermissions = DEFAULT_PERMISSIONS
    """
    Permissions assumed for documents that are not encrypted.
    Configured as a string of short flags, e.g. ``'*'`` or ``'pc'``.
    """

    strict_syntax: bool = True
    """
    Whether to parse input files in strict mode.
    """

    @classmethod
    def process_entries(cls, config_dict):
        super().process_entries(config_dict)
        try:
            spec = config_dict['default_permissions']
        except KeyError:
            pass
        else:
            config_dict['default_permissions'] = parse_permission_spec(spec)

        strict = config_dict.get('strict_syntax', True)
        if not isinstance(strict, bool):
            raise ConfigurationError("'strict-syntax' must be a boolean")


@dataclass(frozen=True)
class PermissionToolRootConfig:
    """
    Contents of a configuration file.
    """

    config: PermissionToolConfig
    """
    Settings for the permission tool.
    """

    log_config: Dict[Optional[str], LogConfig]
    """
    Per-module logging configuration, see
    :func:`pyhanko.config.logging.parse_logging_config`.
    The ``None`` key houses the configuration for the root logger.
    """


def parse_permission_spec(spec) -> DocumentPermissions:
    """
    Parse a permission setting given as short flags.

    Summaries are accepted as well, i.e. ``-`` characters are skipped.
    Unlike on the command line, unknown characters are an error here.
    """
    if not isinstance(spec, str):
        raise ConfigurationError(
            f"Permissions must be given as a string of short flags, "
            f"not {type(spec).__name__}"
        )

    def _reject(token: IgnoredToken):
        raise ConfigurationError(
            f"'{token.token}' in '{spec}' is not a valid permission flag"
        )

    return DocumentPermissions.from_str(
        spec.replace(UNSET_MARKER, ''), on_ignored=_reject
    )


def parse_config(yaml_str) -> PermissionToolRootConfig:
    try:
        config_dict = yaml.safe_load(yaml_str) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Configuration is not valid YAML: {e}")
    check_config_keys(
        'pdf-perm',
        {'default-permissions', 'strict-syntax', 'logging'},
        config_dict,
    )
    config_dict = dict(config_dict)
    log_config = parse_logging_config(config_dict.pop('logging', {}))
    return PermissionToolRootConfig(
        config=PermissionToolConfig.from_config(config_dict),
        log_config=log_config,
    )
