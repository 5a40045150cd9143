"""
Config file loading for nvcheckup.

Reads ~/.config/nvcheckup/config.toml and returns structured config.
Never raises — always returns a valid dict with sensible defaults.

    journal_dir = "~/nvcheckup"   # where nvcheckup-changes.json lives
    dry_run = false               # simulate fixes by default
"""

from pathlib import Path

_CONFIG_PATH = Path.home() / ".config" / "nvcheckup" / "config.toml"


def _defaults() -> dict:
    return {"journal_dir": Path("."), "dry_run": False}


def load_config(path: Path | None = None) -> dict:
    """
    Load and return nvcheckup config from TOML file.

    Returns {"journal_dir": Path, "dry_run": bool} — always valid, never raises.
    Missing file or parse errors return the defaults; a key with a bad shape
    falls back to its own default without discarding the others.
    """
    config_path = path or _CONFIG_PATH
    config = _defaults()

    if not config_path.is_file():
        return config

    try:
        raw = config_path.read_bytes()
    except OSError:
        return config

    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore[no-redef]
        except ModuleNotFoundError:
            return config

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except Exception:
        return config

    journal_dir = data.get("journal_dir")
    if isinstance(journal_dir, str) and journal_dir.strip():
        config["journal_dir"] = Path(journal_dir).expanduser()

    dry_run = data.get("dry_run")
    if isinstance(dry_run, bool):
        config["dry_run"] = dry_run

    return config
