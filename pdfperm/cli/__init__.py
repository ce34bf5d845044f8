from pdfperm.cli._root import cli_root
from pdfperm.cli.desec import desec_root

__all__ = ['launch', 'launch_desec', 'cli_root', 'desec_root']


def launch():
    cli_root(prog_name='pdf-perm')


def launch_desec():
    desec_root(prog_name='pdf-desec')
