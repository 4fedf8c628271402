"""运行配置：环境变量为主，命令行参数可覆盖。"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .constants import DEFAULT_BRANCH, DEFAULT_EXCLUDED_NAMESPACES, DEFAULT_TARGET_TYPES
from .errors import ConfigError

ENV_MODEL_ROOT = "PROPFIX_MODEL_ROOT"
ENV_BRANCH = "PROPFIX_BRANCH"
ENV_TARGET_TYPES = "PROPFIX_TARGET_TYPES"
ENV_EXCLUDED_NAMESPACES = "PROPFIX_EXCLUDED_NAMESPACES"
ENV_TOKEN = "PROPFIX_TOKEN"


@dataclass(frozen=True)
class Settings:
    model_root: Path
    branch: str
    target_types: frozenset[str]
    excluded_namespaces: frozenset[str]
    token: str = ""


def split_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings(environ: Mapping[str, str], args: argparse.Namespace) -> Settings:
    """合并环境变量与命令行参数。

    必填项缺失时抛出 ConfigError，调用方须在访问模型之前终止。
    """

    missing: list[str] = []

    model_root_raw = (args.model_root or environ.get(ENV_MODEL_ROOT, "")).strip()
    if not model_root_raw:
        missing.append(f"{ENV_MODEL_ROOT}（或 --model-root）")

    branch = (args.branch or environ.get(ENV_BRANCH, "")).strip() or DEFAULT_BRANCH

    types_raw = args.target_types or environ.get(ENV_TARGET_TYPES, "")
    target_types = split_list(types_raw) or list(DEFAULT_TARGET_TYPES)

    excluded_raw = environ.get(ENV_EXCLUDED_NAMESPACES)
    excluded = (
        split_list(excluded_raw) if excluded_raw is not None else list(DEFAULT_EXCLUDED_NAMESPACES)
    )

    token = environ.get(ENV_TOKEN, "").strip()
    if args.push and not token:
        missing.append(f"{ENV_TOKEN}（--push 需要）")

    if missing:
        raise ConfigError("缺少必要配置: " + ", ".join(missing))

    return Settings(
        model_root=Path(model_root_raw),
        branch=branch,
        target_types=frozenset(target_types),
        excluded_namespaces=frozenset(excluded),
        token=token,
    )
