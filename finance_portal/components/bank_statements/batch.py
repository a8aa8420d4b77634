"""
Bank statement upload batches
The pending-upload list for one parse run: which files are queued, which of
them are encrypted, and which passwords the user has confirmed so far.
"""
import json
import logging
import mimetypes
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass

from finance_portal.config.settings import PortalConfig
from finance_portal.core.file_checks import (
    check_pdf_encryption,
    check_zip_encryption,
    file_kind,
    format_file_size,
    is_valid_file,
)

logger = logging.getLogger(__name__)

FILE_MODES = ('excel', 'pdf', 'zip')


@dataclass
class PendingFile:
    name: str
    data: bytes

    @property
    def size(self):
        return len(self.data)

    @property
    def kind(self):
        return file_kind(self.name)

    @property
    def mimetype(self):
        return mimetypes.guess_type(self.name)[0] or 'application/octet-stream'


def password_prompt(file_name, file_type):
    return {'action': 'password', 'fileName': file_name, 'fileType': file_type}


def analyze_prompt(file_name):
    return {'action': 'analyze_zip', 'fileName': file_name, 'fileType': 'zip'}


class UploadBatch:
    """Files selected for one parse run and their password state"""

    def __init__(self, mode=PortalConfig.DEFAULT_FILE_MODE, batch_id=None):
        if mode not in FILE_MODES:
            raise ValueError(f"Unknown file mode: {mode}")
        self.id = batch_id or uuid.uuid4().hex
        self.mode = mode
        self.lock = threading.Lock()
        self._reset()

    def _reset(self):
        self.files = OrderedDict()
        self.encrypted_pdfs = {}
        self.encrypted_zips = {}
        self.pdf_passwords = {}
        self.zip_passwords = {}
        self.zip_pdf_passwords = {}
        self.pending_zips = []
        self.prompt = None

    # -- file list -------------------------------------------------------

    def add_files(self, uploads):
        """Add (name, bytes) uploads

        Files with an extension not accepted in the current mode are rejected
        and never enter the list; names already queued are skipped. New ZIPs
        (and PDFs in pdf mode) are sniffed one after another.
        """
        accepted, rejected, duplicates = [], [], []
        for name, data in uploads:
            if not is_valid_file(name, self.mode):
                rejected.append(name)
            elif name in self.files:
                duplicates.append(name)
            else:
                self.files[name] = PendingFile(name, data)
                accepted.append(name)

        if rejected:
            logger.info("Rejected files for %s mode: %s", self.mode, ', '.join(rejected))

        self._sniff_zips([n for n in accepted if file_kind(n) == 'zip'])
        if self.mode == 'pdf':
            self._sniff_pdfs([n for n in accepted if file_kind(n) == 'pdf'])

        return {
            'accepted': accepted,
            'rejected': rejected,
            'duplicates': duplicates,
            'allowed_extensions': PortalConfig.get_accepted_extensions(self.mode),
            'prompt': self.prompt,
        }

    def _sniff_zips(self, names):
        if not names:
            return
        first_encrypted = None
        unencrypted = []
        for name in names:
            encrypted = check_zip_encryption(self.files[name].data)
            self.encrypted_zips[name] = encrypted
            if encrypted and first_encrypted is None:
                first_encrypted = name
            elif not encrypted:
                unencrypted.append(name)

        if first_encrypted:
            # unencrypted archives wait until the password is sorted out
            self.pending_zips = unencrypted
            self.prompt = password_prompt(first_encrypted, 'zip')
        elif unencrypted:
            self.pending_zips = unencrypted[1:]
            self.prompt = analyze_prompt(unencrypted[0])

    def _sniff_pdfs(self, names):
        first_encrypted = None
        for name in names:
            encrypted = check_pdf_encryption(self.files[name].data)
            self.encrypted_pdfs[name] = encrypted
            if encrypted and first_encrypted is None:
                first_encrypted = name

        if first_encrypted and not (self.prompt and self.prompt['action'] == 'password'):
            if self.prompt:
                # the archive analysis resumes once the PDF passwords are in
                self.pending_zips.insert(0, self.prompt['fileName'])
            self.prompt = password_prompt(first_encrypted, 'pdf')

    def remove_file(self, name):
        """Drop a file and every bit of password state tied to it"""
        if name not in self.files:
            return False
        del self.files[name]
        for state in (self.encrypted_pdfs, self.encrypted_zips, self.pdf_passwords, self.zip_passwords):
            state.pop(name, None)
        if file_kind(name) == 'zip':
            # inner PDF passwords are not tracked per archive
            self.zip_pdf_passwords = {}
        self.pending_zips = [n for n in self.pending_zips if n != name]
        if self.prompt and self.prompt['fileName'] == name:
            self.prompt = None
        return True

    def set_mode(self, mode):
        """Switching mode starts over with an empty list"""
        if mode not in FILE_MODES:
            raise ValueError(f"Unknown file mode: {mode}")
        if mode != self.mode:
            self.mode = mode
            self._reset()

    def clear(self):
        self._reset()

    # -- passwords -------------------------------------------------------

    def file_type_for(self, name):
        kind = file_kind(name)
        return kind if kind in ('zip', 'pdf') else None

    def confirm_password(self, name, password):
        """Store a verified password and work out what to ask next"""
        if file_kind(name) == 'zip':
            self.zip_passwords[name] = password
            remaining = [n for n in self.files
                         if self.encrypted_zips.get(n) and n not in self.zip_passwords and n != name]
            self.pending_zips = remaining + [n for n in self.pending_zips if n not in remaining]
            self.prompt = analyze_prompt(name)
        else:
            self.pdf_passwords[name] = password
            next_pdf = next((n for n in self.files
                             if self.encrypted_pdfs.get(n) and n not in self.pdf_passwords), None)
            if next_pdf:
                self.prompt = password_prompt(next_pdf, 'pdf')
            else:
                self.advance_zip_queue()
        return self.prompt

    def merge_zip_pdf_passwords(self, passwords):
        """Record passwords for encrypted PDFs inside archives and move to the next ZIP"""
        self.zip_pdf_passwords.update({k: v for k, v in (passwords or {}).items() if v})
        return self.advance_zip_queue()

    def advance_zip_queue(self):
        self.prompt = None
        while self.pending_zips:
            next_zip = self.pending_zips.pop(0)
            if next_zip not in self.files:
                continue
            if self.encrypted_zips.get(next_zip) and next_zip not in self.zip_passwords:
                self.prompt = password_prompt(next_zip, 'zip')
            else:
                self.prompt = analyze_prompt(next_zip)
            break
        return self.prompt

    def close_zip_analysis(self):
        self.pending_zips = []
        self.prompt = None

    def missing_password(self):
        """First encrypted file that still has no password, as a prompt"""
        for name in self.files:
            if self.encrypted_zips.get(name) and name not in self.zip_passwords:
                return password_prompt(name, 'zip')
        if self.mode == 'pdf':
            for name in self.files:
                if self.encrypted_pdfs.get(name) and name not in self.pdf_passwords:
                    return password_prompt(name, 'pdf')
        return None

    # -- upload ----------------------------------------------------------

    def file_names(self):
        return list(self.files)

    def total_bytes(self):
        return sum(f.size for f in list(self.files.values()))

    def build_upload(self, project_uuid=None):
        """Multipart files and form fields for the parse request

        Password lists are comma separated and line up positionally with the
        PDF (or ZIP) files in upload order; files without a password get an
        empty slot. A list is only sent when at least one password exists.
        """
        files = [('files', (f.name, f.data, f.mimetype)) for f in self.files.values()]
        data = {}

        pdf_names = [n for n in self.files if file_kind(n) == 'pdf']
        if self.mode == 'pdf' and self.pdf_passwords and pdf_names:
            data['passwords'] = ','.join(self.pdf_passwords.get(n, '') for n in pdf_names)

        zip_names = [n for n in self.files if file_kind(n) == 'zip']
        if self.zip_passwords and zip_names:
            data['zip_passwords'] = ','.join(self.zip_passwords.get(n, '') for n in zip_names)

        if self.zip_pdf_passwords:
            data['zip_pdf_passwords'] = json.dumps(self.zip_pdf_passwords)

        if project_uuid:
            data['project_uuid'] = project_uuid
        return files, data

    def to_dict(self):
        return {
            'id': self.id,
            'mode': self.mode,
            'allowed_extensions': PortalConfig.get_accepted_extensions(self.mode),
            'files': [
                {
                    'name': f.name,
                    'size': f.size,
                    'size_text': format_file_size(f.size),
                    'type': f.kind,
                    'encrypted': bool(self.encrypted_pdfs.get(f.name) or self.encrypted_zips.get(f.name)),
                    'has_password': f.name in self.pdf_passwords or f.name in self.zip_passwords,
                }
                for f in self.files.values()
            ],
            'zip_pdf_password_count': len(self.zip_pdf_passwords),
            'pending_zips': list(self.pending_zips),
            'prompt': self.prompt,
        }


class BatchStore:
    """Process-local registry of upload batches

    Least recently used batches are evicted once there are more than
    max_batches of them or their queued files add up to more than max_bytes.
    """

    def __init__(self, max_batches=100, max_bytes=None):
        self.max_batches = max_batches
        self.max_bytes = max_bytes
        self._batches = OrderedDict()
        self._lock = threading.Lock()

    def create(self, mode=PortalConfig.DEFAULT_FILE_MODE):
        batch = UploadBatch(mode)
        with self._lock:
            self._batches[batch.id] = batch
            self._trim(keep=batch.id)
        return batch

    def get(self, batch_id):
        with self._lock:
            batch = self._batches.get(batch_id)
            if batch is not None:
                self._batches.move_to_end(batch_id)
            return batch

    def delete(self, batch_id):
        with self._lock:
            return self._batches.pop(batch_id, None) is not None

    def total_bytes(self):
        with self._lock:
            return sum(b.total_bytes() for b in self._batches.values())

    def trim(self, keep=None):
        """Evict old batches until the store is within its limits; never evicts keep"""
        with self._lock:
            return self._trim(keep)

    def _trim(self, keep):
        evicted = []
        total = sum(b.total_bytes() for b in self._batches.values())
        for batch_id in list(self._batches):
            over_count = len(self._batches) > self.max_batches
            over_bytes = self.max_bytes is not None and total > self.max_bytes
            if not (over_count or over_bytes):
                break
            if batch_id == keep:
                continue
            total -= self._batches.pop(batch_id).total_bytes()
            evicted.append(batch_id)
        if evicted:
            logger.info("Evicted %d upload batch(es), %s queued", len(evicted), format_file_size(total))
        return evicted
