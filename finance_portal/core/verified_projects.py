"""
Verified projects cache
Remembers, for the current browser session, which protected projects already
passed a backend password check. A UX cache only - the backend still
validates every data request.
"""
from flask import session

SESSION_KEY = 'verified_projects'


def _cache():
    return session.get(SESSION_KEY) or {}


def is_verified(project_uuid):
    """Has this project's password been confirmed in this session"""
    return bool(project_uuid) and bool(_cache().get(project_uuid))


def mark_verified(project_uuid):
    """Cache a successful backend verification"""
    cache = dict(_cache())
    cache[project_uuid] = True
    session[SESSION_KEY] = cache


def forget(project_uuid):
    """Drop a project from the cache so the next visit prompts again"""
    cache = dict(_cache())
    if cache.pop(project_uuid, None) is not None:
        session[SESSION_KEY] = cache


def needs_password(project):
    """True when a fetched project is protected and not yet verified"""
    if not project or not project.get('is_protected'):
        return False
    return not is_verified(project.get('uuid'))


def verified_uuids():
    return [uuid for uuid, ok in _cache().items() if ok]
