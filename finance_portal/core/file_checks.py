"""
Upload file checks
Extension rules and encryption sniffing run before anything is sent to the backend.
These are UX pre-checks only; the backend does the real decryption.
"""
import io
import logging
import math
import struct

from PyPDF2 import PdfReader
from PyPDF2.errors import DependencyError, PdfReadError

from finance_portal.config.settings import PortalConfig

logger = logging.getLogger(__name__)

ZIP_LOCAL_HEADER_SIGNATURE = 0x04034b50
ZIP_LOCAL_HEADER_SIZE = 30
ZIP_FLAG_ENCRYPTED = 0x0001


def is_valid_file(filename, mode):
    """Check a filename against the accepted extensions for a file mode"""
    name = (filename or '').lower()
    return any(name.endswith(ext) for ext in PortalConfig.get_accepted_extensions(mode))


def file_kind(filename):
    """Classify an upload by extension: zip, pdf, excel or other"""
    name = (filename or '').lower()
    if name.endswith('.zip'):
        return 'zip'
    if name.endswith('.pdf'):
        return 'pdf'
    if name.endswith('.xlsx') or name.endswith('.xls'):
        return 'excel'
    return 'other'


def check_zip_encryption(data):
    """Return True if any local file header in the archive has the encrypted flag set

    Walks local file headers from the start of the buffer and stops at the first
    record that is not a local header (normally the central directory).
    Malformed archives are reported as not encrypted.
    """
    try:
        offset = 0
        length = len(data)
        while offset < length - ZIP_LOCAL_HEADER_SIZE:
            signature, = struct.unpack_from('<I', data, offset)
            if signature != ZIP_LOCAL_HEADER_SIGNATURE:
                break

            flags, = struct.unpack_from('<H', data, offset + 6)
            if flags & ZIP_FLAG_ENCRYPTED:
                logger.info("ZIP archive is encrypted (entry at offset %d)", offset)
                return True

            compressed_size, = struct.unpack_from('<I', data, offset + 18)
            name_length, extra_length = struct.unpack_from('<HH', data, offset + 26)
            offset += ZIP_LOCAL_HEADER_SIZE + name_length + extra_length + compressed_size
        return False
    except (struct.error, TypeError) as e:
        logger.warning("Error checking ZIP encryption: %s", e)
        return False


def _is_password_error(exc):
    message = str(exc).lower()
    return 'password' in message or 'decrypt' in message


def check_pdf_encryption(data):
    """Return True if the PDF cannot be opened without a user password"""
    try:
        reader = PdfReader(io.BytesIO(data))
        if not reader.is_encrypted:
            return False
        # Owner-password-only documents open with an empty user password
        return not reader.decrypt('')
    except PdfReadError as e:
        if _is_password_error(e):
            return True
        logger.warning("PDF check error: %s", e)
        return False
    except DependencyError:
        # AES documents need the optional crypto backend just to try the empty password
        return True
    except Exception as e:
        logger.warning("Error checking PDF: %s", e)
        return False


def verify_pdf_password(data, password):
    """Return True only if the password opens the PDF"""
    try:
        reader = PdfReader(io.BytesIO(data))
        if not reader.is_encrypted:
            return True
        return bool(reader.decrypt(password))
    except Exception as e:
        logger.warning("PDF verify error: %s", e)
        return False


def format_file_size(num_bytes):
    """Format a byte count as e.g. '1.5 KB'"""
    if not num_bytes:
        return '0 Bytes'
    k = 1024
    sizes = ['Bytes', 'KB', 'MB', 'GB']
    i = min(int(math.floor(math.log(num_bytes) / math.log(k))), len(sizes) - 1)
    value = round(num_bytes / math.pow(k, i), 2)
    if value == int(value):
        value = int(value)
    return f'{value} {sizes[i]}'
