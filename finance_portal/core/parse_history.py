"""
Local bank statement parse history
A convenience list of recent parse runs kept on the portal host. It is not
synced with the backend and can go stale or be deleted without harm.
"""
import json
import logging
import os
import threading
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


class ParseHistoryStore:
    """JSON-file backed history, newest first, capped and deduplicated by session id"""

    def __init__(self, path, limit=20):
        self.path = path
        self.limit = limit
        self._lock = threading.Lock()

    def load(self):
        """Read the history file; a missing or corrupt file is an empty history"""
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                entries = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error loading parse history: %s", e)
            return []
        if not isinstance(entries, list):
            return []
        return [entry for entry in entries if isinstance(entry, dict)][:self.limit]

    def entries(self):
        with self._lock:
            return self.load()

    def _save(self, entries):
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(entries, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error("Error saving parse history: %s", e)

    def record(self, result, mode, file_names):
        """Add a parse result to the history

        Returns the stored entry, or None when the result has no session id
        or the session is already recorded.
        """
        session_id = (result or {}).get('session_id')
        if not session_id:
            return None

        entry = {
            'id': session_id,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'mode': mode,
            'summary': result.get('summary'),
            'download_url': result.get('download_url'),
            'fileNames': list(file_names),
        }

        with self._lock:
            history = self.load()
            if any(h.get('id') == session_id for h in history):
                return None
            history = [entry] + history
            self._save(history[:self.limit])
        return entry

    def remove(self, entry_id):
        """Remove one entry; returns True if something was removed"""
        with self._lock:
            history = self.load()
            remaining = [h for h in history if h.get('id') != entry_id]
            if len(remaining) == len(history):
                return False
            self._save(remaining)
            return True

    def clear(self):
        with self._lock:
            try:
                os.remove(self.path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error("Error clearing parse history: %s", e)
