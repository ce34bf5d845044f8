import click
import pytest
from pyhanko.pdf_utils import misc

from pdfperm.cli.runtime import pdfperm_exception_manager


def test_read_error_names_input():
    with pytest.raises(click.ClickException) as exc_info:
        with pdfperm_exception_manager('in.pdf', 'out.pdf'):
            raise misc.PdfReadError("xref table not found")
    assert exc_info.value.message == (
        "Failed to read PDF file in.pdf: xref table not found"
    )


def test_strict_read_error_names_input():
    with pytest.raises(click.ClickException) as exc_info:
        with pdfperm_exception_manager('in.pdf', 'out.pdf'):
            raise misc.PdfStrictReadError("illegal token")
    assert exc_info.value.message.startswith(
        "Failed to read PDF file in.pdf in strict mode; rerun"
    )


def test_write_error_names_output():
    with pytest.raises(click.ClickException) as exc_info:
        with pdfperm_exception_manager('in.pdf', 'out.pdf'):
            raise misc.PdfWriteError("cannot serialise")
    assert exc_info.value.message == (
        "Failed to write PDF file out.pdf: cannot serialise"
    )


def test_read_error_without_path():
    with pytest.raises(click.ClickException) as exc_info:
        with pdfperm_exception_manager():
            raise misc.PdfReadError("xref table not found")
    assert exc_info.value.message == (
        "Failed to read PDF file: xref table not found"
    )

