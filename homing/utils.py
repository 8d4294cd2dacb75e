"""
Small stateless helpers: host/domain parsing and deadline arithmetic.
"""

import time


def hostname_from_host(host: str) -> str:
    """Strip a trailing ':port' from *host*, if present."""
    name, sep, _ = host.rpartition(":")
    return name if sep else host


def domain_from_hostname(hostname: str) -> str:
    """Return the last two dot-separated labels, e.g. 'a.b.example.com' -> 'example.com'."""
    labels = hostname.split(".")
    return ".".join(labels[max(0, len(labels) - 2):])


def deadline_in(seconds: float) -> float:
    """Absolute deadline *seconds* from now, as a time.time() timestamp."""
    return time.time() + seconds


def remaining(deadline: float) -> float:
    """Seconds left until *deadline*.  Zero or negative once it has passed."""
    return deadline - time.time()
