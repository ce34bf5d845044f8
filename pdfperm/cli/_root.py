from typing import Optional, Sequence, Tuple

import click

from pdfperm import __version__
from pdfperm.cli._ctx import CLIContext
from pdfperm.cli._options import common_options, init_cli_context
from pdfperm.cli.desec import run_desec
from pdfperm.cli.runtime import pdfperm_exception_manager
from pdfperm.cli.utils import logger, readable_file, writable_file
from pdfperm.document import PermissionDocument
from pdfperm.permissions import DocumentPermissions
from pdfperm.shortflags import WILDCARD

__all__ = ['cli_root']

USAGE_METAVAR = '[PERMISSION] <INPUT> [OUTPUT]'


def _print_legend(ctx: click.Context):
    everything = DocumentPermissions.allow_everything()
    click.echo(ctx.get_usage() + '\n')
    click.echo(f"Supported permissions: {everything.summary()}")
    for short, flag, is_set in everything.legend():
        click.echo(f"{'+' if is_set else '-'} [{short}] {flag.name}")
    click.echo(f"\nYou can use {WILDCARD} to represent all permissions.")


def _interpret_args(
    args: Sequence[str],
) -> Tuple[Optional[str], str, str]:
    if len(args) == 1:
        # <INPUT>
        return None, args[0], args[0]
    elif len(args) == 2:
        # [PERMISSION] <INPUT>
        return args[0], args[1], args[1]
    elif len(args) == 3:
        # [PERMISSION] <INPUT> [OUTPUT]
        return args[0], args[1], args[2]
    raise click.UsageError("Too many arguments")


def _check_path(ctx: click.Context, path_type: click.Path, value, hint):
    try:
        return path_type.convert(value, None, ctx)
    except click.BadParameter as e:
        e.param_hint = hint
        raise


def run_modification(
    ctx_obj: CLIContext,
    perm_mod: Optional[str],
    infile: str,
    outfile: str,
    prompt: bool = False,
):
    cfg = ctx_obj.config
    with pdfperm_exception_manager(infile, outfile):
        doc = PermissionDocument.load(infile, strict=cfg.strict_syntax)

        logger.info("Reading original permissions")
        perms = doc.read_permissions(default=cfg.default_permissions)
        click.echo(f"Original permissions: {perms.summary()}")

        if perm_mod is None and prompt:
            perm_mod = click.prompt(
                'Permission modification (empty to skip)',
                default='',
                show_default=False,
            ) or None

        if perm_mod is None:
            logger.info("No modifications specified, exiting")
            return

        perms = perms.apply_modification(perm_mod)
        click.echo(f"Modified permissions: {perms.summary()}")

        doc.commit_permissions(perms)
        logger.info(f"Saving document to {outfile}")
        doc.save(outfile)


@click.command(
    name='pdf-perm',
    help=(
        'inspect and set the permissions of PDF files.\n\n'
        'PERMISSION is an operator (+ to allow, - to disallow, '
        '= to allow exactly) followed by short flags, e.g. +pc or =*. '
        'Without OUTPUT, INPUT is overwritten.'
    ),
    context_settings={'ignore_unknown_options': True},
)
@click.version_option(prog_name='pdf-perm', version=__version__)
@common_options
@click.option(
    '--desec',
    help='remove encryption from a file that opens without a password',
    required=False,
    default=False,
    type=bool,
    is_flag=True,
)
@click.option(
    '--prompt',
    help='ask for a permission modification if none is given',
    required=False,
    default=False,
    type=bool,
    is_flag=True,
)
@click.argument(
    'args', nargs=-1, type=click.UNPROCESSED, metavar=USAGE_METAVAR
)
@click.pass_context
def _root(
    ctx: click.Context,
    args,
    config,
    verbose,
    no_strict_syntax,
    default_permissions,
    desec,
    prompt,
):
    if not args:
        _print_legend(ctx)
        return

    ctx_obj = init_cli_context(
        config, verbose, no_strict_syntax, default_permissions
    )
    ctx.obj = ctx_obj

    if desec:
        if len(args) > 2:
            raise click.UsageError("--desec takes <INPUT> [OUTPUT]")
        infile = _check_path(ctx, readable_file, args[0], "'INPUT'")
        outfile = args[1] if len(args) == 2 else None
        run_desec(ctx_obj, infile, outfile)
        return

    perm_mod, infile, outfile = _interpret_args(args)
    if perm_mod is not None and not perm_mod:
        raise click.BadParameter(
            "modification must not be empty", param_hint="'PERMISSION'"
        )
    _check_path(ctx, readable_file, infile, "'INPUT'")
    _check_path(ctx, writable_file, outfile, "'OUTPUT'")
    run_modification(ctx_obj, perm_mod, infile, outfile, prompt=prompt)


cli_root: click.Command = _root
