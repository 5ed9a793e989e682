"""Shared utilities for CLI commands."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, Tuple

from ..core.config import CONFIG_DIR_ENV, DEFAULT_CONFIG_DIR, ENV_FILE_NAME

Validator = Callable[[str], Tuple[bool, str]]


def get_env_file_path(config_dir: str | Path | None = None) -> Path:
    """Location of the .env file; the directory does not need to exist yet."""
    raw = config_dir or os.getenv(CONFIG_DIR_ENV)
    root = Path(raw).expanduser() if raw else DEFAULT_CONFIG_DIR
    return root / ENV_FILE_NAME


def prompt_with_validation(prompt_text: str, validator: Validator, required: bool = True) -> str:
    """Prompt user for input until the validator accepts it."""
    prompt_text = f"{prompt_text}: "

    while True:
        try:
            user_input = input(prompt_text).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nSetup cancelled.")
            raise SystemExit(0)

        if required and not user_input:
            print("Error: This field is required.\n")
            continue

        if not required and not user_input:
            return user_input

        is_valid, error_msg = validator(user_input)
        if is_valid:
            return user_input
        print(f"Error: {error_msg}\n")


def mask_secret(value: str) -> str:
    if len(value) <= 12:
        return "*" * len(value)
    return f"{value[:8]}...{value[-4:]}"


def update_env_values(env_file: Path, section: str, values: Mapping[str, str]) -> None:
    """
    Update or add ``KEY=value`` lines in a .env file.

    Existing assignments (including commented-out ones) are replaced in place.
    New keys go under the ``# <section>`` header, which is created at the end
    of the file when missing. The file is written with 0600 permissions.
    """
    if env_file.exists():
        lines = env_file.read_text(encoding="utf-8").splitlines()
    else:
        lines = [
            "# Coffee Chat Configuration",
            "# Generated by coffee-chat config",
            "",
        ]

    header = f"# {section}"
    for name, value in values.items():
        assignment = f"{name}={value}"
        index = _find_assignment(lines, name)
        if index is not None:
            lines[index] = assignment
            continue

        if header not in lines:
            if lines and lines[-1].strip():
                lines.append("")
            lines.append(header)
        insert_at = lines.index(header) + 1
        while insert_at < len(lines) and lines[insert_at].strip() and not lines[insert_at].startswith("# "):
            insert_at += 1
        lines.insert(insert_at, assignment)

    env_file.parent.mkdir(parents=True, exist_ok=True)
    env_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
    env_file.chmod(0o600)


def _find_assignment(lines: list[str], name: str) -> int | None:
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith(f"{name}=") or stripped.startswith(f"# {name}="):
            return i
    return None
