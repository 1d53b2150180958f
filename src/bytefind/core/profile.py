"""Registration profiles: which SQL functions to expose, and how.

A profile is a small YAML document:

    deterministic: true
    functions:
      - { name: instr, direction: forward, encoding: utf-8 }
      - { name: rinstr, direction: backward, encoding: utf-8 }
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from bytefind.core.buffer import Encoding, normalize_encoding

DIRECTIONS = ("forward", "backward")

_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

DEFAULT_PROFILE_TEXT = """\
# SQL functions registered by bytefind
deterministic: true
functions:
  - { name: instr, direction: forward, encoding: utf-8 }
  - { name: rinstr, direction: backward, encoding: utf-8 }
  - { name: instr16, direction: forward, encoding: utf-16 }
  - { name: rinstr16, direction: backward, encoding: utf-16 }
"""


class ProfileError(Exception):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class FunctionSpec:
    name: str
    direction: str  # "forward" or "backward"
    encoding: Encoding


@dataclass(frozen=True)
class Profile:
    functions: tuple[FunctionSpec, ...]
    deterministic: bool = True

    def names(self) -> list[str]:
        return [f.name for f in self.functions]


def load_profile(text: str) -> Profile:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ProfileError([f"YAML parse error: {e}"]) from None

    if not isinstance(data, dict):
        raise ProfileError(["Top-level YAML must be a mapping (use 'functions')."])

    errors: list[str] = []
    deterministic = data.get("deterministic", True)
    if not isinstance(deterministic, bool):
        errors.append("deterministic must be true or false")

    raw_functions = data.get("functions")
    if not isinstance(raw_functions, list) or not raw_functions:
        errors.append("functions must be a non-empty list")
        raise ProfileError(errors)

    specs: list[FunctionSpec] = []
    seen: set[str] = set()
    for i, item in enumerate(raw_functions):
        where = f"functions[{i}]"
        if not isinstance(item, dict):
            errors.append(f"{where} must be a mapping with name/direction/encoding")
            continue
        name = item.get("name")
        if not isinstance(name, str) or not _IDENT.fullmatch(name):
            errors.append(f"{where}.name must be a SQL identifier, got {name!r}")
            name = None
        elif name.lower() in seen:
            # SQLite function names are case-insensitive
            errors.append(f"{where}.name duplicates '{name}'")
        else:
            seen.add(name.lower())
        direction = item.get("direction")
        if direction not in DIRECTIONS:
            errors.append(f"{where}.direction must be 'forward' or 'backward'")
        raw_enc = item.get("encoding", "utf-8")
        try:
            encoding = normalize_encoding(str(raw_enc))
        except ValueError:
            encoding = None
        if encoding is None or not encoding.is_text:
            errors.append(f"{where}.encoding must be 'utf-8' or 'utf-16'")
            encoding = None
        unknown = sorted(set(item) - {"name", "direction", "encoding"})
        if unknown:
            errors.append(f"{where} has unknown keys: {', '.join(unknown)}")
        if name and direction in DIRECTIONS and encoding is not None:
            specs.append(FunctionSpec(name, direction, encoding))

    if errors:
        raise ProfileError(errors)
    return Profile(tuple(specs), deterministic)


def load_profile_file(path: str | Path) -> Profile:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ProfileError([f"Profile not found: {path}"]) from None
    return load_profile(text)


def get_user_profile_path() -> Path:
    """Platform-appropriate location of the user's registration profile."""
    if os.name == "nt":  # Windows
        base = os.environ.get("APPDATA", os.path.expanduser("~"))
        return Path(base) / "bytefind" / "profile.yaml"
    return Path.home() / ".config" / "bytefind" / "profile.yaml"


def resolve_profile(path: str | Path | None = None) -> Profile:
    """Load `path`, else the user profile if present, else the built-in default."""
    if path is not None:
        return load_profile_file(path)
    user = get_user_profile_path()
    if user.is_file():
        return load_profile_file(user)
    return DEFAULT_PROFILE


DEFAULT_PROFILE = load_profile(DEFAULT_PROFILE_TEXT)
