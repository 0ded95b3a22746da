"""提供全角→半角的逐字符规范化与空白折叠工具。"""  # 模块文档说明。
# 导入 re 正则库以实现空白折叠。
import re
# 导入 MappingProxyType 以只读方式暴露映射表。
from types import MappingProxyType
# 导入 typing 中的 Dict、Mapping 提供类型注释。
from typing import Dict, Mapping

# 定义常见的全角标点与半角符号映射表，左右引号统一折叠为 ASCII 引号。
PUNCT_MAP = {  # noqa: RUF012
    "，": ",",  # 中文逗号映射为英文逗号。
    "。": ".",  # 中文句号映射为英文句号。
    "！": "!",  # 中文感叹号映射为英文感叹号。
    "？": "?",  # 中文问号映射为英文问号。
    "：": ":",  # 中文冒号映射为英文冒号。
    "；": ";",  # 中文分号映射为英文分号。
    "（": "(",  # 中文左括号映射为英文左括号。
    "）": ")",  # 中文右括号映射为英文右括号。
    "【": "[",  # 方头括号左映射为英文左中括号。
    "】": "]",  # 方头括号右映射为英文右中括号。
    "「": "\"",  # 直角引号左映射为英文双引号。
    "」": "\"",  # 直角引号右映射为英文双引号。
    "『": "\"",  # 双直角引号左映射为英文双引号。
    "』": "\"",  # 双直角引号右映射为英文双引号。
    "“": "\"",  # 中文左双引号。
    "”": "\"",  # 中文右双引号。
    "‘": "'",  # 中文左单引号。
    "’": "'",  # 中文右单引号。
    "．": ".",  # 全角句点映射为半角。
    "～": "~",  # 全角波浪线映射为半角。
    "＂": "\"",  # 全角双引号映射为半角。
    "＇": "'",  # 全角单引号映射为半角。
    "％": "%",  # 全角百分号映射为半角。
    "＋": "+",  # 全角加号映射为半角。
    "－": "-",  # 全角减号映射为半角。
    "＝": "=",  # 全角等号映射为半角。
    "＆": "&",  # 全角与符映射为半角。
    "＊": "*",  # 全角星号映射为半角。
    "＠": "@",
    "＃": "#",
    "＄": "$",
    "／": "/",
    "＼": "\\",
    "＜": "<",
    "＞": ">",
    "［": "[",
    "］": "]",
    "｛": "{",
    "｝": "}",
    "＿": "_",
    "｜": "|",
    "＾": "^",
    "｀": "`",
}

# 全角空格单独列出，便于调用方引用。
FULLWIDTH_SPACE = "　"


def _build_code_point_map() -> Dict[str, str]:
    """组合字母、数字、标点与全角空格，生成完整的全角→半角映射。"""  # 函数说明。
    mapping: Dict[str, str] = {}  # 初始化结果字典。
    # 全角大写字母 U+FF21..FF3A 与 ASCII A..Z 一一对应。
    for offset in range(26):
        mapping[chr(0xFF21 + offset)] = chr(ord("A") + offset)
        mapping[chr(0xFF41 + offset)] = chr(ord("a") + offset)
    # 全角数字 U+FF10..FF19。
    for offset in range(10):
        mapping[chr(0xFF10 + offset)] = chr(ord("0") + offset)
    mapping.update(PUNCT_MAP)  # 合并标点映射。
    mapping[FULLWIDTH_SPACE] = " "  # 全角空格映射为普通空格。
    return mapping  # 返回可变字典，由调用方冻结。


# 进程级只读映射表，在导入时构造一次，之后不再修改。
CODE_POINT_MAP: Mapping[str, str] = MappingProxyType(_build_code_point_map())

# 匹配两个及以上连续空白字符。
_SPACE_COLLAPSE_RE = re.compile(r"\s{2,}")


def normalize_fullwidth(text: str) -> str:
    """将文本中位于映射表内的全角字符替换为半角形式，其余字符原样保留。"""  # 函数说明。
    # 若输入为空字符串，则直接返回。
    if not text:
        return text
    # 逐字符查表替换。
    return "".join(CODE_POINT_MAP.get(char, char) for char in text)


def collapse_whitespace(text: str) -> str:
    """将连续空白折叠为单个空格，并去除首尾空白。"""  # 函数说明。
    return _SPACE_COLLAPSE_RE.sub(" ", text).strip()
