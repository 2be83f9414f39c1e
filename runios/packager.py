"""Probe whether the JS development server (packager) is already listening.

Uses the standard-library HTTP client; the probe is a single GET against the
packager's `/status` endpoint and never raises.
"""

from __future__ import annotations

import urllib.error
import urllib.request

RUNNING = "running"
NOT_RUNNING = "not_running"
UNRECOGNIZED = "unrecognized"

_RUNNING_BODY = "packager-status:running"


def packager_status(url: str = "http://localhost:8081/status", timeout: float = 2.0) -> str:
    """Return RUNNING, NOT_RUNNING or UNRECOGNIZED for the server at `url`.

    RUNNING: the server answered with the packager status body.
    UNRECOGNIZED: something answered, but not a packager.
    NOT_RUNNING: nothing accepted the connection.
    """
    req = urllib.request.Request(url, method="GET")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except urllib.error.HTTPError:
        return UNRECOGNIZED
    except (urllib.error.URLError, OSError):
        return NOT_RUNNING

    body = raw.decode("utf-8", errors="replace") if raw else ""
    return RUNNING if body == _RUNNING_BODY else UNRECOGNIZED
