"""Human-readable messages for listener errors."""
from __future__ import annotations

import errno as errno_mod

try:  # Optional dependency
    import psutil  # type: ignore

    HAS_PSUTIL = True
except ImportError:  # pragma: no cover - handled at runtime
    HAS_PSUTIL = False

_SERVER_ERROR_MESSAGES: dict[int, str] = {
    errno_mod.EACCES: "You don't have access to bind the server to port {port}.",
    errno_mod.EADDRINUSE: "There is already a process listening on port {port}.",
}


def find_port_owner(port: int) -> tuple[int, str] | None:
    """Best-effort lookup of the process listening on ``port``.

    Returns ``(pid, name)`` or ``None`` when psutil is missing, the platform
    denies the connection table, or nothing is found.
    """
    if not HAS_PSUTIL:
        return None
    try:
        connections = psutil.net_connections(kind="tcp")
    except (psutil.AccessDenied, PermissionError, OSError):
        return None

    for conn in connections:
        laddr = conn.laddr
        if not laddr or conn.status != psutil.CONN_LISTEN or laddr.port != port:
            continue
        if conn.pid is None:
            return None
        try:
            return conn.pid, psutil.Process(conn.pid).name()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return conn.pid, "unknown"
    return None


def describe_server_error(err: BaseException, port: int | None) -> str:
    """Describe a bind/listen error, naming the port that was attempted."""
    code = getattr(err, "errno", None)
    template = _SERVER_ERROR_MESSAGES.get(code) if isinstance(code, int) else None
    if template is not None:
        message = template.format(port=port)
        if code == errno_mod.EADDRINUSE and port:
            owner = find_port_owner(port)
            if owner is not None:
                message = f"{message[:-1]} (pid {owner[0]}: {owner[1]})."
        return message

    if isinstance(code, int):
        name = errno_mod.errorcode.get(code, str(code))
    else:
        name = type(err).__name__
    return f"Error: {name} occurred while setting up server on port {port}."


__all__ = ["describe_server_error", "find_port_owner", "HAS_PSUTIL"]
