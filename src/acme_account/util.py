"""Utilities for all acme-account."""
import email.utils
import logging
import os
import re
import tempfile
from typing import Optional

from acme_account import errors

logger = logging.getLogger(__name__)

DOMAIN_REGEX = re.compile(r"[\w-]+(\.[\w-]+)*$")


def validate_email(address: Optional[str]) -> str:
    """Check that an email address is usable as an ACME contact.

    The address must parse as an RFC 5322 address; a display name
    (``Ops <ops@example.com>``) is accepted and dropped. The local part is
    taken as parsed, so ``o'brien@example.com`` is accepted.

    :param str address: Email address supplied by the caller.

    :raises .InputError: if the address is empty or malformed.

    :returns: The bare ``local@domain`` address.
    :rtype: str

    """
    if not address or not address.strip():
        raise errors.InputError("The email address is empty.", address)
    _, parsed = email.utils.parseaddr(address.strip())
    if parsed.count("@") != 1:
        raise errors.InputError("The email address is invalid.", address)
    local, domain = parsed.split("@")
    if not local or DOMAIN_REGEX.match(domain) is None:
        raise errors.InputError("The email address is invalid.", address)
    if parsed.startswith(".") or ".." in parsed:
        raise errors.InputError("The email address is invalid.", address)
    return parsed


def atomic_write(path: str, data: bytes, chmod: int = 0o600) -> None:
    """Write data to path so that readers see either all of it or nothing.

    The data goes to a temporary file in the destination directory which
    then replaces `path`.

    :param str path: Destination path.
    :param bytes data: File contents.
    :param int chmod: Permissions of the resulting file.

    :raises OSError: if the file cannot be written.

    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-')
    try:
        with os.fdopen(fd, 'wb') as tmp_file:
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        os.chmod(tmp_path, chmod)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            logger.debug('Unable to remove temporary file %s', tmp_path, exc_info=True)
        raise
    logger.debug('Wrote %d bytes to %s', len(data), path)
