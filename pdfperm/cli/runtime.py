import logging
import sys
from contextlib import contextmanager
from typing import Dict, Optional

import click
from pyhanko.config.errors import ConfigurationError
from pyhanko.config.logging import LogConfig, StdLogOutput
from pyhanko.pdf_utils import misc

from pdfperm.cli.utils import logger
from pdfperm.errors import AlreadyEncryptedError, PdfPermError

__all__ = [
    'DEFAULT_CONFIG_FILE',
    'LOG_FORMAT_STRING',
    'logging_setup',
    'pdfperm_exception_manager',
]


class NoStackTraceFormatter(logging.Formatter):
    def formatException(self, ei) -> str:
        return ""  # pragma: nocover


LOG_FORMAT_STRING = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# handlers installed by previous invocations, by logger name
_installed_handlers: Dict[Optional[str], logging.Handler] = {}


def logging_setup(log_configs: Dict[Optional[str], LogConfig], verbose: bool):
    log_config: LogConfig
    for module, log_config in log_configs.items():
        cur_logger = logging.getLogger(module)
        cur_logger.setLevel(log_config.level)
        handler: logging.StreamHandler
        if isinstance(log_config.output, StdLogOutput):
            if log_config.output == StdLogOutput.STDOUT:
                handler = logging.StreamHandler(sys.stdout)
            else:
                handler = logging.StreamHandler()
            # when logging to the console, don't output stack traces
            # unless in verbose mode
            if verbose:
                formatter = logging.Formatter(LOG_FORMAT_STRING)
            else:
                formatter = NoStackTraceFormatter(LOG_FORMAT_STRING)
        else:
            handler = logging.FileHandler(log_config.output)
            formatter = logging.Formatter(LOG_FORMAT_STRING)
        handler.setFormatter(formatter)
        previous = _installed_handlers.pop(module, None)
        if previous is not None:
            cur_logger.removeHandler(previous)
            previous.close()
        cur_logger.addHandler(handler)
        _installed_handlers[module] = handler
        if module is not None:
            # avoid duplicate output through the root logger
            cur_logger.propagate = False


@contextmanager
def pdfperm_exception_manager(
    infile: Optional[str] = None, outfile: Optional[str] = None
):
    in_ctx = f" {infile}" if infile else ""
    out_ctx = f" {outfile}" if outfile else ""
    msg = exception = None
    try:
        yield
    except click.ClickException:
        raise
    except misc.PdfStrictReadError as e:
        exception = e
        msg = (
            f"Failed to read PDF file{in_ctx} in strict mode; rerun with "
            "--no-strict-syntax to try again.\n"
            f"Error message: {e.msg}"
        )
    except misc.PdfReadError as e:
        exception = e
        msg = f"Failed to read PDF file{in_ctx}: {e.msg}"
    except misc.PdfWriteError as e:
        exception = e
        msg = f"Failed to write PDF file{out_ctx}: {e.msg}"
    except AlreadyEncryptedError as e:
        exception = e
        msg = (
            f"Failed to set permissions: {e.msg}. "
            f"Remove the encryption first, e.g. with pdf-desec."
        )
    except PdfPermError as e:
        exception = e
        msg = e.msg
    except ConfigurationError as e:
        exception = e
        msg = f"Configuration problem: {e}"
    except OSError as e:
        exception = e
        msg = f"I/O error: {e}"
    except Exception as e:
        exception = e
        msg = "Generic processing error."

    if exception is not None:
        logger.error(msg, exc_info=exception)
        raise click.ClickException(msg)


DEFAULT_CONFIG_FILE = 'pdfperm.yml'
