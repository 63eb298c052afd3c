"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import InterdocConfig


def load_config(cli_path: str | None = None) -> InterdocConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./interdoc.yaml"),
        Path.home() / ".interdoc" / "config.yaml",
    ]

    if cli_path and not config_paths[0].exists():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                if not isinstance(raw, dict):
                    raise ValueError(f"Invalid config in {path}: top level must be a mapping")
                raw = _expand_env_vars(raw)
                return InterdocConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return InterdocConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `interdoc config init`
DEFAULT_CONFIG_TEMPLATE = """\
# interdoc.yaml

# Plain text
text:
  encoding: "utf-8"
  line_ending: "lf"            # lf | crlf

# HTML
html:
  strict: true                 # false repairs broken markup instead of failing
  encoding: "utf-8"
  # title: "Converted document"

# RTF
rtf:
  font: "Calibri"
  font_size: 11                # points
  codepage: 1252

# PDF (needs the pdf extra: pip install interdoc[pdf])
pdf:
  page_size: "a4"              # a4 | letter
  margin: 56                   # points
  font_size: 11

# Codec plugins (entry point group "interdoc.codecs")
plugins:
  enabled: true
  disabled: []
  required: []

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
