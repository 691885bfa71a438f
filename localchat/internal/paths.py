import os
from pathlib import Path


def get_app_data_dir() -> Path:
    """
    Returns the application data directory.

    - Windows: %APPDATA%\\localchat
    - Linux/macOS: ~/.localchat
    """
    if os.name == "nt":  # Windows
        base = os.environ.get("APPDATA", str(Path.home()))
        path = Path(base) / "localchat"
    else:  # Linux / macOS
        path = Path.home() / ".localchat"

    path.mkdir(parents=True, exist_ok=True)
    return path


def get_models_dir() -> Path:
    """
    Directory watched for model artifacts.
    Not created here: a missing directory simply means "no model yet".
    """
    return get_app_data_dir() / "models"


def get_data_dir() -> Path:
    path = get_app_data_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_users_file(data_dir: Path | None = None) -> Path:
    from localchat.internal.constants import USERS_FILE_NAME
    return Path(data_dir or get_data_dir()) / USERS_FILE_NAME


def get_log_file() -> Path:
    log_dir = get_app_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "localchat.log.json"


if __name__ == "__main__":
    print("App Data Dir:", get_app_data_dir())
    print("Models Dir:", get_models_dir())
    print("Data Dir:", get_data_dir())
    print("Users File:", get_users_file())
    print("Log File:", get_log_file())
