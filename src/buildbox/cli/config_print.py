"""Effective configuration printing for the buildbox CLI.

Merges sources and prints values with redaction and provenance.
"""

from __future__ import annotations

import argparse
import json
import os
from typing import Any, Dict

from rich.console import Console

from ..config import (
    get_default_config,
    load_dotenv_config,
    load_env_config,
    load_global_config,
    load_yaml_config,
    merge_config,
)
from ..exceptions import ValidationError
from ..utils.redaction import REDACTED

__all__ = ["run_config_print"]


def _flat(d: Dict[str, Any] | None, p: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in (d or {}).items():
        kk = f"{p}.{k}" if p else str(k)
        if isinstance(v, dict) and v:
            out.update(_flat(v, kk))
        else:
            out[kk] = v
    return out


_SECRET_SUFFIXES = ("token", "secret", "password", "api_key")


def _redact(allow_unred: bool, k: str, v: Any) -> Any:
    if allow_unred or v is None:
        return v
    name = k.rsplit(".", 1)[-1].lower()
    if name.endswith(_SECRET_SUFFIXES):
        return REDACTED
    return v


async def run_config_print(console: Console, args: argparse.Namespace) -> int:
    try:
        env = load_env_config()
        dotenv = load_dotenv_config()
        defaults = get_default_config()
        global_cfg = load_global_config()
        project_cfg = load_yaml_config(getattr(args, "config", None))
    except ValidationError as e:
        console.print(str(e), style="red", markup=False)
        return 1
    merged = merge_config(
        {},
        env,
        dotenv,
        project_cfg,
        merge_config({}, {}, {}, global_cfg or {}, defaults),
    )
    allow_unred = (
        os.environ.get("BUILDBOX_ALLOW_UNREDACTED") == "1"
        and str(getattr(args, "redact", "true")).lower() == "false"
    )

    sources = {
        "env": _flat(env),
        "dotenv": _flat(dotenv),
        "project": _flat(project_cfg),
        "global": _flat(global_cfg or {}),
        "defaults": _flat(defaults),
    }
    flat = _flat(merged)

    def _src_for(k: str) -> str:
        for name in ("env", "dotenv", "project", "global", "defaults"):
            if k in sources[name]:
                return name
        return "defaults"

    if getattr(args, "json", False):
        out = {
            k: {"value": _redact(allow_unred, k, v), "source": _src_for(k)}
            for k, v in flat.items()
        }
        print(json.dumps(out, indent=2, default=str))
        return 0
    for k in sorted(flat.keys()):
        print(f"{k}: {_redact(allow_unred, k, flat[k])}  ({_src_for(k)})")
    return 0
