from pathlib import Path


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


def is_sqlite_url(url: str) -> bool:
    """Return ``True`` when ``url`` targets the SQLite dialect."""
    return url.split(":", 1)[0].split("+", 1)[0] == "sqlite"
