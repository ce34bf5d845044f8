import logging

import pytest
from click.testing import CliRunner

from pdfperm.cli import runtime
from pdfperm.document import PermissionDocument
from pdfperm_tests.samples import MINIMAL

INPUT_PATH = 'input.pdf'
OUTPUT_PATH = 'output.pdf'


def _read_file(fname) -> bytes:
    with open(fname, 'rb') as inf:
        return inf.read()


def _summary_of(fname) -> str:
    return PermissionDocument.load(fname).read_permissions().summary()


# cli_runner is autouse to ensure it gets priority in the dependency graph
@pytest.fixture(scope="function", autouse=True)
def cli_runner():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open(INPUT_PATH, 'wb') as outf:
            outf.write(MINIMAL)
        yield runner
    for module, handler in runtime._installed_handlers.items():
        logging.getLogger(module).removeHandler(handler)
        handler.close()
    runtime._installed_handlers.clear()
