"""基于 pypinyin 的音节来源实现，负责读音查询与声韵拆分。"""  # 模块说明。
from __future__ import annotations  # 启用延迟求值的注解语义。

import logging  # 导入 logging 记录后端初始化信息。
from typing import Any, List

from src.utils.errors import SourceUnavailableError

from .base import ISyllableSource, PinyinStyle, unique_in_order

# 模块级日志器。
LOGGER = logging.getLogger(__name__)

PYPINYIN_NAME = "pypinyin"


def _no_pinyin(_: str) -> list:
    """无读音字符不产生任何候选。"""
    return []


class PypinyinSource(ISyllableSource):
    """调用 pypinyin 获取读音，声韵拆分使用非严格模式（y/w 视为声母）。"""

    name = PYPINYIN_NAME

    def __init__(self, **kwargs: Any) -> None:
        """延迟导入 pypinyin，缺失时抛出 SourceUnavailableError。"""
        super().__init__(**kwargs)
        # 延迟导入 pypinyin，以便捕获 ImportError 并提示用户安装依赖。
        try:
            from pypinyin import Style, pinyin
        except ImportError as exc:
            raise SourceUnavailableError(
                "pypinyin is not installed. Install it with: pip install pypinyin"
            ) from exc
        self._style = Style  # 保存风格枚举。
        self._pinyin = pinyin  # 保存转换函数。
        LOGGER.debug("pypinyin syllable source ready")

    def _first(self, char: str, style: Any) -> str:
        """取单字在给定风格下的首选结果，无结果时返回空串。"""
        result = self._pinyin(char, style=style, strict=False, errors=_no_pinyin)
        if not result or not result[0]:
            return ""
        return result[0][0]

    def pronunciations(self, char: str) -> List[str]:
        """返回去重后的多音字候选列表。"""
        result = self._pinyin(char, style=self._style.NORMAL, heteronym=True, errors=_no_pinyin)
        if not result:
            return []
        return unique_in_order(list(result[0]))

    def initial(self, char: str) -> str:
        return self._first(char, self._style.INITIALS)

    def final(self, char: str) -> str:
        return self._first(char, self._style.FINALS)

    def styled(self, text: str, style: PinyinStyle) -> List[str]:
        """整段转换，借助 pypinyin 的词组匹配得到每个字的首选读音。"""
        if style is PinyinStyle.FIRST_LETTER:
            target = self._style.FIRST_LETTER
        else:
            target = self._style.NORMAL
        # 无读音字符按 pypinyin 默认策略原样保留。
        result = self._pinyin(text, style=target, heteronym=False)
        return [item[0] for item in result if item and item[0]]
