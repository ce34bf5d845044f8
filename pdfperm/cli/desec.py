from typing import Optional

import click

from pdfperm import __version__
from pdfperm.cli._ctx import CLIContext
from pdfperm.cli._options import common_options, init_cli_context
from pdfperm.cli.runtime import pdfperm_exception_manager
from pdfperm.cli.utils import logger, readable_file, writable_file
from pdfperm.document import PermissionDocument

__all__ = ['desec_root', 'run_desec']


def run_desec(ctx_obj: CLIContext, infile: str, outfile: Optional[str]):
    outfile = outfile or infile
    with pdfperm_exception_manager(infile, outfile):
        doc = PermissionDocument.load(
            infile, strict=ctx_obj.config.strict_syntax
        )
        if doc.encrypted:
            perms = doc.read_permissions()
            logger.info(f"Original permissions: {perms.summary()}")
        doc.decrypt()
        logger.info(f"Saving document to {outfile}")
        doc.save(outfile)


@click.command(
    name='pdf-desec',
    help=(
        'remove the encryption of PDF files that open without a password, '
        'which lifts all permission restrictions'
    ),
)
@click.version_option(prog_name='pdf-desec', version=__version__)
@common_options
@click.argument('infile', type=readable_file)
@click.argument('outfile', type=writable_file, required=False)
def desec_root(
    infile, outfile, config, verbose, no_strict_syntax, default_permissions
):
    ctx_obj = init_cli_context(
        config, verbose, no_strict_syntax, default_permissions
    )
    run_desec(ctx_obj, infile, outfile)
