import os
from pathlib import Path

ENV_FILE_VARIABLE = "PAYEE_ML_ENV_FILE"


def project_root() -> Path:
    """Nearest ancestor holding pyproject.toml or .git, else the package parent."""
    package_dir = Path(__file__).resolve().parents[1]
    for candidate in package_dir.parents:
        if (candidate / "pyproject.toml").is_file() or (candidate / ".git").is_dir():
            return candidate
    return package_dir.parent


def resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. PAYEE_ML_ENV_FILE env var (absolute, or relative to the project root)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    root = project_root()
    candidates: list[Path] = []

    explicit = os.environ.get(ENV_FILE_VARIABLE)
    if explicit:
        path = Path(explicit).expanduser()
        candidates.append(path if path.is_absolute() else root / path)

    candidates += [root / "config" / ".env.dev", root / "config" / ".env"]
    return next((path for path in candidates if path.is_file()), None)
