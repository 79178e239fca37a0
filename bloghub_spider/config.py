"""配置加载器：从 YAML 加载数据目录、超时、博客源等运行时配置。

提供 `load_config(path)`、`load_default_config()` 和 `settings(cfg)`。
默认的本地配置位于项目根的 `config/local_config.yaml`。
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from bloghub_spider.spider import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

DEFAULTS: Dict[str, Any] = {
    "data_dir": "data",
    "timeout": DEFAULT_TIMEOUT,
    "user_agent": DEFAULT_USER_AGENT,
    "sources": [],
    "max_workers": None,
    "deadline": None,
    "log_level": "INFO",
}


def _default_config_path() -> Path:
    # 相对于包目录的项目根 config/local_config.yaml
    pkg_root = Path(__file__).parent.parent
    return pkg_root / "config" / "local_config.yaml"


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """从给定路径加载 YAML 配置，返回 dict；文件不存在时返回空 dict。"""
    p = Path(path) if path else _default_config_path()
    if not p.exists():
        return {}
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"配置文件顶层必须是映射: {p}")
    return data


def load_default_config() -> Dict[str, Any]:
    return load_config(str(_default_config_path()))


def settings(cfg: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """合并默认值，未知键原样保留。"""
    merged = dict(DEFAULTS)
    merged.update({k: v for k, v in (cfg or {}).items() if v is not None})
    return merged
