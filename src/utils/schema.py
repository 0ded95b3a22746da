"""提供 JSON Schema 加载、缓存与双拼方案文件校验的工具函数。"""  # 模块文档说明。
# 导入 json 以解析 schema 文件内容。
import json
# 导入 pathlib.Path 以定位仓库中的 schemas 目录。
from pathlib import Path
# 导入 typing.Dict 以标注缓存字典类型。
from typing import Dict

# 从 jsonschema 导入校验器与格式检查器。
from jsonschema import Draft202012Validator, FormatChecker

# 预先解析 schema 目录，避免每次调用都重新计算。
SCHEMA_DIR = Path(__file__).resolve().parents[2] / "schemas"
# 定义支持的 schema 名称到文件名的映射，便于统一管理。
SCHEMA_FILES = {
    "scheme": "scheme.schema.json",
}
# 使用字典缓存已加载的 schema，避免重复读取磁盘。
_SCHEMA_CACHE: Dict[str, dict] = {}
# 缓存编译后的 jsonschema 校验器，进一步减少初始化开销。
_VALIDATOR_CACHE: Dict[str, Draft202012Validator] = {}
# 初始化格式检查器。
_FORMAT_CHECKER = FormatChecker()


def load_schema(name: str) -> dict:
    """加载指定名称的 JSON Schema，并在内存中缓存。"""  # 函数文档说明。

    # 标准化 schema 名称。
    key = name.strip().lower()
    # 确认名称受支持，否则抛出直观的错误提示。
    if key not in SCHEMA_FILES:
        raise KeyError(f"Unknown schema: {name}")
    # 若缓存已存在则直接返回，避免重复读取文件。
    if key in _SCHEMA_CACHE:
        return _SCHEMA_CACHE[key]
    # 拼接 schema 文件的绝对路径并读取。
    schema_path = SCHEMA_DIR / SCHEMA_FILES[key]
    with schema_path.open("r", encoding="utf-8") as handle:
        schema = json.load(handle)
    # 将解析结果写入缓存，供后续复用。
    _SCHEMA_CACHE[key] = schema
    return schema


def _get_validator(name: str) -> Draft202012Validator:
    """获取编译后的 Draft2020-12 校验器实例并缓存。"""  # 内部工具函数说明。

    key = name.strip().lower()
    load_schema(key)
    if key in _VALIDATOR_CACHE:
        return _VALIDATOR_CACHE[key]
    validator = Draft202012Validator(_SCHEMA_CACHE[key], format_checker=_FORMAT_CHECKER)
    _VALIDATOR_CACHE[key] = validator
    return validator


def validate_scheme(payload: dict) -> None:
    """校验双拼方案字典，失败时抛出 jsonschema.ValidationError。"""  # 函数文档说明。

    validator = _get_validator("scheme")
    validator.validate(payload)
