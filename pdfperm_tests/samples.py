from io import BytesIO
from typing import Optional

from pyhanko.pdf_utils import generic, writer
from pyhanko.pdf_utils.font.basic import get_courier
from pyhanko.pdf_utils.generic import pdf_name
from pyhanko.pdf_utils.reader import PdfFileReader

from pdfperm.permissions import DocumentPermissions


def simple_page(pdf_out, ascii_text):
    # based on the minimal pdf file of
    # https://brendanzagaeski.appspot.com/0004.html
    resources = generic.DictionaryObject(
        {
            pdf_name('/Font'): generic.DictionaryObject(
                {pdf_name('/F1'): get_courier(pdf_out)}
            )
        }
    )
    media_box = generic.ArrayObject(
        map(generic.NumberObject, (0, 0, 300, 144))
    )
    stream = generic.StreamObject(
        stream_data=f'BT /F1 18 Tf 0 0 Td ({ascii_text}) Tj ET'.encode('ascii')
    )
    return writer.PageObject(
        contents=pdf_out.add_object(stream),
        media_box=media_box,
        resources=resources,
    )


def _minimal_pdf() -> bytes:
    w = writer.PdfFileWriter()
    w.insert_page(simple_page(w, 'Hello world'))
    out = BytesIO()
    w.write(out)
    return out.getvalue()


MINIMAL = _minimal_pdf()


def encrypted_sample(
    perms: DocumentPermissions,
    owner_pass: str = '',
    user_pass: Optional[str] = '',
) -> bytes:
    """
    Produce a copy of :data:`MINIMAL` encrypted with the given permissions.
    """
    w = writer.copy_into_new_writer(PdfFileReader(BytesIO(MINIMAL)))
    w.encrypt(owner_pass, user_pass, perms=perms.as_pdf_permissions())
    out = BytesIO()
    w.write(out)
    return out.getvalue()


def page_text(data: bytes, password: Optional[str] = None) -> bytes:
    r = PdfFileReader(BytesIO(data))
    if password is not None:
        r.decrypt(password)
    return r.root['/Pages']['/Kids'][0]['/Contents'].data
