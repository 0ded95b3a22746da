"""小鹤双拼声母/韵母/零声母映射表，以及从 YAML 加载自定义方案的工具。"""  # 模块说明。
from __future__ import annotations  # 启用延迟求值的注解语义。

from dataclasses import dataclass  # 导入 dataclass 封装方案结构。
from pathlib import Path  # 导入 Path 处理方案文件路径。
from types import MappingProxyType  # 导入只读映射包装器。
from typing import Any, Dict, List, Mapping

import yaml  # 导入 PyYAML 读取方案文件。
from jsonschema import ValidationError  # 导入校验异常以转换为 SchemeError。

from src.utils.errors import SchemeError
from src.utils.schema import validate_scheme

# 普通话声母全集，y/w 在非严格拆分下也作为声母出现。
MANDARIN_INITIALS = (
    "b", "p", "m", "f", "d", "t", "n", "l", "g", "k", "h",
    "j", "q", "x", "zh", "ch", "sh", "r", "z", "c", "s", "y", "w",
)

# 非严格拆分下可与声母组合出现的韵母全集。
MANDARIN_FINALS = (
    "a", "o", "e", "i", "u", "v",
    "ai", "ei", "ao", "ou", "an", "en", "ang", "eng", "ong",
    "ia", "ie", "iao", "iu", "ian", "in", "iang", "ing", "iong",
    "ua", "uo", "uai", "ui", "uan", "un", "uang", "ue",
    "ve", "van", "vn",
)

# 可独立成音节的零声母音节。
MANDARIN_ZERO_INITIALS = (
    "a", "o", "e", "ai", "ei", "ao", "ou", "an", "en", "ang", "eng", "er",
)

XIAOHE_INITIALS = {
    "b": "b", "p": "p", "m": "m", "f": "f",
    "d": "d", "t": "t", "n": "n", "l": "l",
    "g": "g", "k": "k", "h": "h",
    "j": "j", "q": "q", "x": "x",
    "zh": "v", "ch": "i", "sh": "u", "r": "r",
    "z": "z", "c": "c", "s": "s",
    "y": "y", "w": "w",
}

XIAOHE_FINALS = {
    "a": "a", "o": "o", "e": "e", "i": "i", "u": "u", "v": "v",
    "ai": "d", "ei": "w", "ao": "c", "ou": "z",
    "an": "j", "en": "f", "ang": "h", "eng": "g", "ong": "s", "iong": "s",
    "ia": "x", "ie": "p", "iao": "n", "iu": "q", "iou": "q",
    "ian": "m", "in": "b", "iang": "l", "ing": "k",
    "ua": "x", "uo": "o", "uai": "k", "ui": "v", "uei": "v",
    "uan": "r", "van": "r", "un": "y", "uen": "y", "vn": "y", "uang": "l",
    "ue": "t", "ve": "t",
}

XIAOHE_ZERO_INITIALS = {
    "a": "aa", "o": "oo", "e": "ee",
    "ai": "ai", "ei": "ei", "ao": "ao", "ou": "ou",
    "an": "an", "en": "en", "ang": "ah", "eng": "eg", "er": "er",
    "ng": "eg", "m": "mm", "n": "nn", "hng": "hg",
}


@dataclass(frozen=True)
class ShuangpinScheme:
    """一套双拼方案：名称与三张只读映射表。"""

    name: str
    initials: Mapping[str, str]
    finals: Mapping[str, str]
    zero_initials: Mapping[str, str]

    @classmethod
    def from_tables(
        cls,
        name: str,
        initials: Mapping[str, str],
        finals: Mapping[str, str],
        zero_initials: Mapping[str, str],
    ) -> "ShuangpinScheme":
        """复制传入的表并冻结为只读映射。"""
        return cls(
            name=name,
            initials=MappingProxyType(dict(initials)),
            finals=MappingProxyType(dict(finals)),
            zero_initials=MappingProxyType(dict(zero_initials)),
        )

    def missing_entries(self) -> Dict[str, List[str]]:
        """列出方案相对普通话声母/韵母/零声母全集缺失的条目。"""
        return {
            "initials": [item for item in MANDARIN_INITIALS if item not in self.initials],
            "finals": [item for item in MANDARIN_FINALS if item not in self.finals],
            "zero_initials": [item for item in MANDARIN_ZERO_INITIALS if item not in self.zero_initials],
        }


XIAOHE = ShuangpinScheme.from_tables("xiaohe", XIAOHE_INITIALS, XIAOHE_FINALS, XIAOHE_ZERO_INITIALS)

# 内置方案注册表。
BUILTIN_SCHEMES: Dict[str, ShuangpinScheme] = {
    XIAOHE.name: XIAOHE,
}


def scheme_from_mapping(data: Dict[str, Any], default_name: str = "custom") -> ShuangpinScheme:
    """校验 YAML 解析出的字典并构造方案。"""
    try:
        validate_scheme(data)
    except ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise SchemeError(f"Invalid scheme at {location}: {exc.message}") from exc
    return ShuangpinScheme.from_tables(
        data.get("name") or default_name,
        data["initials"],
        data["finals"],
        data["zero_initials"],
    )


def load_scheme(name_or_path: str) -> ShuangpinScheme:
    """按名称返回内置方案，或从 YAML 文件加载自定义方案。"""
    key = name_or_path.strip()
    if key.lower() in BUILTIN_SCHEMES:
        return BUILTIN_SCHEMES[key.lower()]
    path = Path(key)
    if path.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError(
            f"Unsupported scheme '{name_or_path}'. Available options: {', '.join(BUILTIN_SCHEMES)} or a .yaml file"
        )
    if not path.exists():
        raise SchemeError(f"Scheme file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise SchemeError(f"Scheme file is not valid YAML: {path}") from exc
    if not isinstance(data, dict):
        raise SchemeError(f"Scheme file must contain a mapping: {path}")
    return scheme_from_mapping(data, default_name=path.stem)
