"""配置系统：默认→用户→Profile→环境→CLI 的分层加载、校验与快照导出。"""  # 模块说明。
from __future__ import annotations  # 启用前向注解以提升类型兼容性。

import copy  # 导入 copy 以执行深拷贝避免引用共享。
import os  # 导入 os 以访问环境变量与路径扩展。
from dataclasses import dataclass  # 导入 dataclass 以封装结果结构。
from datetime import datetime, timezone  # 导入 datetime 用于生成时间戳。
from pathlib import Path  # 导入 Path 统一路径处理。
from typing import Any, Dict, Iterable, Mapping  # 导入类型注解辅助代码可读性。

import yaml  # 导入 PyYAML 以读取/写出 YAML 文件。

from src.utils.io import atomic_write_text  # 复用原子写入工具以保存配置快照。

ENV_PREFIX = "PINYINIFY_"  # 所有环境变量需以此前缀开头才会被解析。
ALLOWED_SOURCES = {"pypinyin", "table"}  # 可选的音节来源后端。
ALLOWED_LOG_FORMATS = {"human", "jsonl"}
ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
CONVERT_FLAGS = ("initials", "xiaohe", "only", "punct")  # convert 节点下的布尔开关。


@dataclass
class ConfigBundle:
    """封装配置加载结果，包含配置体、来源映射与激活的 Profile。"""  # 数据类说明。

    config: Dict[str, Any]  # 最终合并并经过规范化的配置字典。
    sources: Dict[str, Any]  # 与 config 对应的来源追踪树，叶子为字符串。
    profile: str | None  # 当前生效的 profile 名称，若未选择则为 None。
    profile_source: str | None  # profile 由哪一层触发，例如 "profile:xiaohe"。


class ConfigError(ValueError):
    """对外统一的配置异常类型，包含来源链路信息。"""  # 自定义异常说明。


def _project_root() -> Path:
    """返回仓库根目录，基于当前文件路径推断。"""  # 工具函数说明。

    return Path(__file__).resolve().parents[2]  # config.py 位于 src/utils，下两级即仓库根。


def _load_yaml(path: Path) -> Dict[str, Any]:
    """读取 YAML 文件并返回字典结构，若为空则返回空字典。"""  # 工具函数说明。

    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)  # 使用 safe_load 避免执行任意代码。
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config file is not valid YAML: {path}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return data


def _build_source_tree(node: Any, label: str) -> Any:
    """构造与配置同结构的来源树，叶子为来源标签。"""  # 工具函数说明。

    if isinstance(node, dict):
        return {key: _build_source_tree(value, label) for key, value in node.items()}
    return label


def _deep_merge(base: Dict[str, Any], incoming: Dict[str, Any], sources: Dict[str, Any], incoming_sources: Any) -> None:
    """递归地将 incoming 合并进 base，并同步更新来源信息。"""  # 工具函数说明。

    for key, value in incoming.items():
        source_info = incoming_sources.get(key) if isinstance(incoming_sources, dict) else incoming_sources
        if isinstance(value, dict):  # 嵌套字典递归合并。
            base_child = base.get(key)
            source_child = sources.get(key)
            if not isinstance(base_child, dict):
                base_child = {}
            if not isinstance(source_child, dict):
                source_child = {}
            base[key] = base_child
            sources[key] = source_child
            if isinstance(source_info, str):  # 来源只是标签时扩展为整棵树。
                source_info = _build_source_tree(value, source_info)
            _deep_merge(base_child, value, source_child, source_info)
            continue
        if value is None and base.get(key) is not None:  # None 不会覆盖已有非空值。
            continue
        base[key] = copy.deepcopy(value)
        sources[key] = source_info


def deep_merge_dicts(base: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """对外暴露的深度合并助手，仅返回新的合并结果。"""  # 公共函数说明。

    result = copy.deepcopy(base)
    _deep_merge(result, incoming, _build_source_tree(result, "base"), _build_source_tree(incoming, "incoming"))
    return result


def _parse_scalar(value: str) -> Any:
    """将字符串尝试解析为布尔、整数或浮点类型，失败时返回原字符串。"""  # 工具函数说明。

    stripped = value.strip()
    lowered = stripped.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"null", "none"}:
        return None
    # 以 0 开头的多位数字保持字符串，避免误判。
    if lowered.startswith("0") and lowered not in {"0", "0.0"} and not lowered.startswith("0."):
        return stripped
    for caster in (int, float):
        try:
            return caster(lowered)
        except ValueError:
            continue
    return stripped


def _keypath_to_tree(keypath: Iterable[str], value: Any) -> Dict[str, Any]:
    """根据层级列表生成嵌套字典，用于 --set 与环境变量合并。"""  # 工具函数说明。

    components = list(keypath)
    tree: Any = value
    for part in reversed(components):  # 由内向外逐层包裹。
        tree = {part: tree}
    return tree


def _collect_env_from_mapping(env: Mapping[str, str], source_prefix: str) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """从映射中提取 PINYINIFY_* 变量并构造值树与来源树。"""  # 工具函数说明。

    values: Dict[str, Any] = {}
    value_sources: Dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        # 双下划线表示层级，统一转小写。
        path = [segment.lower() for segment in key[len(ENV_PREFIX):].split("__") if segment]
        if not path:
            continue
        tree = _keypath_to_tree(path, _parse_scalar(raw_value))
        _deep_merge(values, tree, value_sources, _keypath_to_tree(path, f"env:{source_prefix}{key}"))
    return values, value_sources


def _parse_dotenv_file(path: Path) -> Dict[str, str]:
    """解析 .env 文件，仅返回键值对字典。"""  # 工具函数说明。

    result: Dict[str, str] = {}
    if not path.exists():
        return result
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or "=" not in stripped:
                continue
            key, _, raw_value = stripped.partition("=")
            result[key.strip()] = raw_value.strip().strip("\"'")  # 去除包裹的引号。
    return result


def _normalize_path(value: str) -> str:
    """展开用户目录与环境变量，并清理尾部斜杠。"""  # 工具函数说明。

    expanded = os.path.expanduser(os.path.expandvars(value.strip()))
    if expanded not in {"/", ""}:
        expanded = expanded.rstrip("/\\")
    return expanded


def _looks_like_path(value: str) -> bool:
    """判断方案参数是文件路径还是内置方案名。"""
    return "/" in value or "\\" in value or value.lower().endswith((".yaml", ".yml"))


def _normalize_config(config: Dict[str, Any]) -> None:
    """对配置进行就地规范化，例如统一大小写与路径形态。"""  # 工具函数说明。

    convert = config.setdefault("convert", {})
    source = convert.get("source")
    if isinstance(source, str):
        convert["source"] = source.strip().lower()
    scheme = convert.get("scheme")
    if isinstance(scheme, str):
        scheme = scheme.strip()
        convert["scheme"] = _normalize_path(scheme) if _looks_like_path(scheme) else scheme.lower()
    for key in ("log_format",):
        value = config.get(key)
        if isinstance(value, str):
            config[key] = value.strip().lower()
    level = config.get("log_level")
    if isinstance(level, str):
        config["log_level"] = level.strip().upper()
    if config.get("verbose"):  # verbose 模式强制输出调试日志。
        config["log_level"] = "DEBUG"
    path_like_keys = [
        ["input"],
        ["output"],
        ["log_file"],
        ["metrics_file"],
        ["convert", "table_file"],
    ]
    for path in path_like_keys:
        parent: Any = config
        for part in path[:-1]:
            parent = parent.get(part) if isinstance(parent, dict) else None
        if not isinstance(parent, dict):
            continue
        value = parent.get(path[-1])
        if isinstance(value, str) and value.strip() and value.strip() != "-":
            parent[path[-1]] = _normalize_path(value)
    log_sample = config.get("log_sample_rate")
    if isinstance(log_sample, (int, float)) and not isinstance(log_sample, bool):
        config["log_sample_rate"] = max(min(float(log_sample), 1.0), 1e-6)  # 限制在 (0,1] 范围。


def _source_for_path(path: Iterable[str], sources: Dict[str, Any]) -> str:
    """根据键路径在来源树中查找对应标签。"""  # 工具函数说明。

    cursor: Any = sources
    for part in path:
        if not isinstance(cursor, dict):
            return "unknown"
        cursor = cursor.get(part)
        if cursor is None:
            return "unknown"
    return cursor if isinstance(cursor, str) else "unknown"


def _assert_condition(condition: bool, path: Iterable[str], message: str, value: Any, sources: Dict[str, Any]) -> None:
    """若条件不成立则抛出包含来源信息的配置异常。"""  # 工具函数说明。

    if condition:
        return
    path = list(path)
    dotted = ".".join(path)
    origin = _source_for_path(path, sources)
    raise ConfigError(f"Invalid value for {dotted}: {message} (value={value!r}, source={origin})")


def _validate_config(config: Dict[str, Any], sources: Dict[str, Any]) -> None:
    """执行语义校验，确保关键字段满足约束。"""  # 工具函数说明。

    convert = config.get("convert", {})
    for flag in CONVERT_FLAGS:
        value = convert.get(flag)
        _assert_condition(isinstance(value, bool), ["convert", flag], "must be true or false", value, sources)
    source = convert.get("source")
    _assert_condition(
        source in ALLOWED_SOURCES,
        ["convert", "source"],
        f"source must be one of {sorted(ALLOWED_SOURCES)}",
        source,
        sources,
    )
    if source == "table":  # 离线读音表后端必须提供表文件。
        table_file = convert.get("table_file")
        _assert_condition(
            isinstance(table_file, str) and bool(table_file.strip()),
            ["convert", "table_file"],
            "table_file is required when source is 'table'",
            table_file,
            sources,
        )
    scheme = convert.get("scheme")
    _assert_condition(
        isinstance(scheme, str) and bool(scheme),
        ["convert", "scheme"],
        "scheme must be a built-in name or a YAML file path",
        scheme,
        sources,
    )
    log_format = config.get("log_format")
    _assert_condition(
        log_format in ALLOWED_LOG_FORMATS,
        ["log_format"],
        "log_format must be one of {'human','jsonl'}",
        log_format,
        sources,
    )
    log_level = config.get("log_level")
    _assert_condition(
        log_level in ALLOWED_LOG_LEVELS,
        ["log_level"],
        "log_level must be DEBUG/INFO/WARNING/ERROR/CRITICAL",
        log_level,
        sources,
    )
    log_sample = config.get("log_sample_rate")
    _assert_condition(
        isinstance(log_sample, (int, float)) and 0.0 < float(log_sample) <= 1.0,
        ["log_sample_rate"],
        "log_sample_rate must be within (0, 1]",
        log_sample,
        sources,
    )


def parse_cli_set_items(items: Iterable[str]) -> Dict[str, Any]:
    """将 --set KEY=VALUE 形式的列表解析为嵌套字典。"""  # 公共函数说明。

    overrides: Dict[str, Any] = {}
    for raw in items:
        if "=" not in raw:
            raise ConfigError(f"Invalid --set entry '{raw}', expected KEY=VALUE")
        key, value = raw.split("=", 1)  # 仅拆分首个等号以允许值中包含等号。
        path = [segment.strip().lower() for segment in key.split(".") if segment.strip()]
        if not path:
            continue
        tree = _keypath_to_tree(path, _parse_scalar(value))
        _deep_merge(overrides, tree, {}, tree)
    return overrides


def load_and_merge_config(
    cli_overrides: Dict[str, Any] | None = None,
    cli_set_overrides: Dict[str, Any] | None = None,
    config_path: str | None = None,
    profile_name: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConfigBundle:
    """按照默认→用户→profile→环境→CLI→--set 顺序加载配置并返回结果。"""  # 主函数说明。

    root = _project_root()
    default_path = root / "config" / "default.yaml"
    if not default_path.exists():
        raise FileNotFoundError(f"Default config not found: {default_path}")
    config = copy.deepcopy(_load_yaml(default_path))
    sources = _build_source_tree(config, f"default:{default_path}")
    user_path = Path(config_path) if config_path else root / "config" / "user.yaml"
    if config_path and not user_path.exists():  # 显式指定的配置文件必须存在。
        raise ConfigError(f"Config file not found: {user_path}")
    user_config: Dict[str, Any] = {}
    if user_path.exists():
        user_config = _load_yaml(user_path)
        _deep_merge(config, user_config, sources, _build_source_tree(user_config, f"user:{user_path}"))
    effective_profile = (
        profile_name
        or (user_config.get("meta") or {}).get("profile")
        or (config.get("meta") or {}).get("profile")
    )
    profile_source = None
    profiles = config.get("profiles") or {}
    if effective_profile:
        profile_data = profiles.get(effective_profile)
        if profile_data is None:
            raise ConfigError(f"Unknown profile '{effective_profile}'. Available: {', '.join(sorted(profiles))}")
        profile_source = f"profile:{effective_profile}"
        _deep_merge(config, profile_data, sources, _build_source_tree(profile_data, profile_source))
    environ = os.environ if environ is None else environ
    env_layers: list[tuple[Dict[str, Any], Dict[str, Any]]] = []
    dotenv_candidates = [root / ".env"]
    if user_path.exists():
        dotenv_candidates.append(user_path.parent / ".env")
    for dotenv_path in dotenv_candidates:
        env_map = _parse_dotenv_file(dotenv_path)
        if env_map:
            env_layers.append(_collect_env_from_mapping(env_map, f"{dotenv_path}:"))
    env_layers.append(_collect_env_from_mapping(environ, ""))  # 真实环境变量最后应用。
    for values, source_tree in env_layers:
        if values:
            _deep_merge(config, values, sources, source_tree)
    if cli_overrides:
        _deep_merge(config, cli_overrides, sources, _build_source_tree(cli_overrides, "cli:args"))
    if cli_set_overrides:
        _deep_merge(config, cli_set_overrides, sources, _build_source_tree(cli_set_overrides, "cli:set"))
    _normalize_config(config)
    _validate_config(config, sources)
    meta = config.setdefault("meta", {})
    meta_sources = sources.setdefault("meta", {})
    if not isinstance(meta_sources, dict):
        meta_sources = {}
        sources["meta"] = meta_sources
    meta["profile"] = effective_profile
    if effective_profile is not None:
        meta_sources["profile"] = profile_source or "profile:derived"
    meta["config_generated_at"] = datetime.now(timezone.utc).isoformat()
    meta_sources["config_generated_at"] = "runtime:generated"
    return ConfigBundle(config=config, sources=sources, profile=effective_profile, profile_source=profile_source)


def render_effective_config(bundle: ConfigBundle, include_sources: bool = True) -> str:
    """将配置与来源以 YAML 文本渲染，可附带来源注释。"""  # 导出函数说明。

    def _render(node: Any, source_node: Any, indent: int) -> list[str]:
        lines: list[str] = []
        for key in sorted(node.keys()):  # 排序以稳定输出。
            value = node[key]
            child_source = source_node.get(key) if isinstance(source_node, dict) else source_node
            prefix = " " * indent
            if isinstance(value, dict):
                header = f"{prefix}{key}:"
                if include_sources and isinstance(child_source, str):
                    header += f"  # {child_source}"
                lines.append(header)
                lines.extend(_render(value, child_source, indent + 2))
                continue
            rendered = yaml.safe_dump(value, default_flow_style=True, allow_unicode=True).strip()
            if rendered.endswith("\n..."):
                rendered = rendered[: -len("\n...")]
            elif rendered.endswith("..."):
                rendered = rendered[:-3].strip()
            line = f"{prefix}{key}: {rendered}"
            if include_sources and isinstance(child_source, str):
                line += f"  # {child_source}"
            lines.append(line)
        return lines

    return "\n".join(_render(bundle.config, bundle.sources, 0)) + "\n"


def save_config(bundle: ConfigBundle, path: str | os.PathLike[str], include_sources: bool = True) -> None:
    """将配置快照写入目标路径，使用原子写入避免半成品。"""  # 导出函数说明。

    atomic_write_text(path, render_effective_config(bundle, include_sources=include_sources))
