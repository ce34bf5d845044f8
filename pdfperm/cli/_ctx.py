from dataclasses import dataclass

from pdfperm.config.settings import PermissionToolConfig


@dataclass
class CLIContext:
    """
    Settings gathered from the configuration file and the command line
    during a CLI invocation.
    """

    config: PermissionToolConfig
    """
    Settings from the configuration file, with command line overrides
    applied.
    """

    verbose: bool = False
    """
    Whether the CLI runs in verbose mode.
    """
