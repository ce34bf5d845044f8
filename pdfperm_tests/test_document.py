from io import BytesIO

import pytest
from pyhanko.pdf_utils import misc
from pyhanko.pdf_utils.crypt import AuthStatus
from pyhanko.pdf_utils.reader import PdfFileReader

from pdfperm.document import DEFAULT_PERMISSIONS, PermissionDocument
from pdfperm.errors import AlreadyEncryptedError, PasswordRequiredError
from pdfperm.permissions import DocumentPermissions

from .samples import MINIMAL, encrypted_sample, page_text

P = DocumentPermissions


def _write(doc: PermissionDocument) -> bytes:
    out = BytesIO()
    doc.write(out)
    return out.getvalue()


def test_unencrypted_default():
    doc = PermissionDocument.load(MINIMAL)
    assert not doc.encrypted
    assert doc.read_permissions() == DEFAULT_PERMISSIONS
    assert DEFAULT_PERMISSIONS == P.allow_everything()
    assert doc.read_permissions(default=P.none()) == P.none()


@pytest.mark.parametrize('summary', ['pmcafxsq', 'p-c-----', '--------'])
def test_read_encrypted_permissions(summary):
    perms = P.from_str(summary.replace('-', ''))
    doc = PermissionDocument.load(encrypted_sample(perms))
    assert doc.encrypted
    assert doc.read_permissions().summary() == summary


def test_read_password_protected_permissions():
    # /P is readable without knowing the password
    perms = P.PRINTABLE | P.ANNOTABLE
    data = encrypted_sample(perms, 'ownersecret', 'usersecret')
    doc = PermissionDocument.load(data)
    assert doc.read_permissions() == perms


def test_end_to_end():
    doc = PermissionDocument.load(MINIMAL)
    perms = doc.read_permissions(default=P.none())
    assert perms == P.none()
    perms = perms.apply_modification('=pma')
    assert perms == P.PRINTABLE | P.MODIFIABLE | P.ANNOTABLE
    assert perms.summary() == 'pm-a----'
    doc.commit_permissions(perms)
    assert doc.encrypted

    data = _write(doc)
    reloaded = PermissionDocument.load(data)
    assert reloaded.encrypted
    assert reloaded.read_permissions() == perms

    r = PdfFileReader(BytesIO(data))
    assert r.decrypt('').status != AuthStatus.FAILED
    assert b'Hello world' in page_text(data, password='')


def test_commit_to_encrypted_document_fails():
    original = encrypted_sample(P.PRINTABLE)
    doc = PermissionDocument.load(original)
    with pytest.raises(AlreadyEncryptedError):
        doc.commit_permissions(P.allow_everything())
    assert doc.read_permissions() == P.PRINTABLE


def test_commit_twice_fails():
    doc = PermissionDocument.load(MINIMAL)
    doc.commit_permissions(P.PRINTABLE)
    with pytest.raises(AlreadyEncryptedError):
        doc.commit_permissions(P.COPYABLE)


def test_failed_commit_leaves_file_untouched(tmp_path):
    path = tmp_path / 'encrypted.pdf'
    original = encrypted_sample(P.COPYABLE)
    path.write_bytes(original)
    doc = PermissionDocument.load(path)
    with pytest.raises(AlreadyEncryptedError):
        doc.commit_permissions(P.none())
    assert path.read_bytes() == original


def test_save_in_place(tmp_path):
    path = tmp_path / 'doc.pdf'
    path.write_bytes(MINIMAL)
    doc = PermissionDocument.load(path)
    assert doc.name == str(path)
    doc.commit_permissions(P.FILLABLE | P.ASSEMBLABLE)
    doc.save(path)
    reloaded = PermissionDocument.load(path)
    assert reloaded.read_permissions().summary() == '----f-s-'


def test_load_garbage():
    with pytest.raises(misc.PdfReadError):
        PermissionDocument.load(b'this is not a PDF file')


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        PermissionDocument.load(tmp_path / 'nope.pdf')


def test_decrypt():
    doc = PermissionDocument.load(encrypted_sample(P.none()))
    doc.decrypt()
    data = _write(doc)
    reloaded = PermissionDocument.load(data)
    assert not reloaded.encrypted
    assert reloaded.read_permissions() == P.allow_everything()
    assert b'Hello world' in page_text(data)


def test_decrypt_requires_empty_user_password():
    data = encrypted_sample(P.none(), 'ownersecret', 'usersecret')
    doc = PermissionDocument.load(data)
    with pytest.raises(PasswordRequiredError):
        doc.decrypt()


def test_decrypt_unencrypted_copies():
    doc = PermissionDocument.load(MINIMAL)
    doc.decrypt()
    data = _write(doc)
    assert not PermissionDocument.load(data).encrypted


def test_decrypt_then_commit():
    doc = PermissionDocument.load(encrypted_sample(P.none()))
    doc.decrypt()
    assert not doc.encrypted
    doc.commit_permissions(P.COPYABLE)
    assert doc.encrypted
    reloaded = PermissionDocument.load(_write(doc))
    assert reloaded.read_permissions() == P.COPYABLE
