# src/midi2sheet/config.py
from __future__ import annotations
import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

log = logging.getLogger(__name__)

# package root: .../src/midi2sheet
PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "config.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "midi2sheet" / "config.yaml"

def _safe_load(path: Path) -> Dict[str, Any]:
    """YAML mapping from `path`; a missing, unreadable or malformed file counts as empty."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        log.warning("ignoring config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        if data is not None:
            log.warning("ignoring config %s: top level is not a mapping", path)
        return {}
    return data

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out

def load_config(
    user_path: Optional[Path] = None,
    default_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Packaged defaults deep-merged with the user's overrides.
    Sections: 'sheet' (layout), 'tracks' (selection, mute, instruments),
    'playback' (tempo).
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    defaults = _safe_load(dpath)
    user = _safe_load(upath)
    cfg = _deep_merge(defaults, user)

    for section in ("sheet", "tracks", "playback"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}
    log.debug("config: defaults=%s user=%s", dpath, upath if upath.exists() else "-")
    return cfg
