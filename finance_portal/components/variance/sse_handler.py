"""
Variance SSE Handler
Relays the backend's analysis log stream to the browser
"""
import json
import logging

from flask import Response

from finance_portal.core import BackendError
from finance_portal.core.api_client import error_message

logger = logging.getLogger(__name__)

# Event types after which the backend closes the session stream
FINAL_EVENTS = ('complete', 'error')


def _event_type(payload):
    try:
        return json.loads(payload).get('type')
    except (ValueError, AttributeError):
        return None


class VarianceLogStream:
    """Handle SSE streaming for AI variance analysis sessions"""

    @staticmethod
    def relay(session_id, lines):
        """Re-emit backend `data:` lines as SSE events until a final event arrives

        lines is an already opened iterator of backend text lines.
        """
        def generate():
            try:
                for line in lines:
                    if not line:
                        continue
                    if line.startswith(':'):
                        yield ": heartbeat\n\n"
                        continue
                    if not line.startswith('data:'):
                        continue
                    payload = line[len('data:'):].strip()
                    yield f"data: {payload}\n\n"
                    if _event_type(payload) in FINAL_EVENTS:
                        break
            except BackendError as e:
                logger.error("Log stream for session %s failed: %s", session_id, e)
                message = error_message(e, 'Log stream interrupted')
                yield f"data: {json.dumps({'type': 'error', 'message': message})}\n\n"

        return Response(
            generate(),
            mimetype="text/event-stream",
            headers={
                'Cache-Control': 'no-cache',
                'X-Accel-Buffering': 'no'
            }
        )
