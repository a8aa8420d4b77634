"""
Project bank statement history filters
"""
from datetime import datetime, timedelta, timezone

TIME_WINDOWS = {
    '24h': timedelta(hours=24),
    'week': timedelta(days=7),
}


def extract_sessions(payload):
    """Normalise the backend history payload to a list of sessions"""
    if isinstance(payload, dict):
        for key in ('sessions', 'bank_statements', 'cases'):
            if key in payload:
                payload = payload[key]
                break
    return payload if isinstance(payload, list) else []


def parse_timestamp(value):
    """Parse an ISO timestamp; naive values are UTC"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _names(items):
    return [(item.get('file_name') or '').lower() for item in items or [] if isinstance(item, dict)]


def session_file_types(session):
    """Which file types (zip, pdf, excel) a session involved"""
    uploaded = session.get('uploaded_files') or []
    parsed = session.get('files') or []
    uploaded_names = _names(uploaded)
    # parsed files come back either as dicts or as bare names
    parsed_names = [name.lower() for name in parsed if isinstance(name, str)] + _names(parsed)

    def extracted(key):
        return any(((f.get('metadata') or {}).get(key) or 0) > 0
                   for f in uploaded if isinstance(f, dict))

    types = set()
    if any(name.endswith('.zip') for name in uploaded_names):
        types.add('zip')
    if any(name.endswith('.pdf') for name in uploaded_names + parsed_names) or extracted('extracted_pdf_count'):
        types.add('pdf')
    if (any(name.endswith(('.xlsx', '.xls')) for name in uploaded_names + parsed_names)
            or extracted('extracted_excel_count')):
        types.add('excel')
    return types


def filter_sessions(sessions, time_filter='all', bank_filter='all', file_type_filter='all', now=None):
    """Apply the history filters; with every filter at 'all' the input comes back unchanged"""
    now = now or datetime.now(timezone.utc)
    window = TIME_WINDOWS.get(time_filter)

    result = []
    for session in sessions:
        if window is not None:
            # undated sessions are never outside a time window
            processed_at = parse_timestamp(session.get('processed_at'))
            if processed_at is not None and processed_at < now - window:
                continue

        if bank_filter and bank_filter != 'all':
            if bank_filter not in (session.get('banks') or []):
                continue

        if file_type_filter and file_type_filter != 'all':
            if file_type_filter not in session_file_types(session):
                continue

        result.append(session)
    return result


def unique_banks(sessions):
    banks = set()
    for session in sessions:
        banks.update(session.get('banks') or [])
    return sorted(banks)


def history_totals(sessions):
    """Files, transactions and latest processing time over a session list"""
    totals = {'files': 0, 'transactions': 0, 'latest': None}
    latest = None
    for session in sessions:
        uploaded_count = len(session.get('uploaded_files') or [])
        parsed_count = len(session.get('files') or [])
        totals['files'] += session.get('file_count') or max(uploaded_count, parsed_count)
        totals['transactions'] += session.get('total_transactions') or 0

        processed_at = parse_timestamp(session.get('processed_at'))
        if processed_at and (latest is None or processed_at > latest):
            latest = processed_at
    totals['latest'] = latest.isoformat() if latest else None
    return totals
