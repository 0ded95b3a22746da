"""将单个汉字的首选读音编码为双拼按键。

编码顺序：

1. 通过音节来源取首选读音 ``p``（多音字只取第一个候选）；
2. ``p`` 若为零声母音节，直接查零声母表得到两键编码；
3. 否则分别查询来源给出的声母、韵母，两者都命中时拼接按键；
4. 任一查表失败时退回原始拼音 ``p``（仅声母模式下取其首字母）。

仅声母模式只输出编码的第一个字符。
"""
from __future__ import annotations  # 启用延迟求值的注解语义。

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

from .scheme import XIAOHE, ShuangpinScheme
from .segment import is_han
from .sources.base import ISyllableSource

if TYPE_CHECKING:
    from src.utils.logging import StructuredLogger


@dataclass(frozen=True)
class ShuangpinCode:
    """单字编码结果，fallback 表示退回了原始拼音。"""

    char: str
    pinyin: str
    code: str
    fallback: bool = False


@dataclass(frozen=True)
class EncodedText:
    """一段文本的编码结果：输出项与退回原始拼音的次数。"""

    tokens: Tuple[str, ...]
    fallbacks: int = 0


class ShuangpinEncoder:
    """基于只读双拼方案与音节来源的单字编码器，不保存任何逐行状态。"""

    def __init__(
        self,
        source: ISyllableSource,
        scheme: ShuangpinScheme = XIAOHE,
        logger: "StructuredLogger | None" = None,
    ) -> None:
        self.source = source
        self.scheme = scheme
        self.logger = logger

    def lookup(self, char: str, initials_only: bool = False) -> ShuangpinCode | None:
        """返回单字的完整编码结果，无读音时返回 None。"""
        p = self.source.canonical(char)
        if not p:
            return None
        zero = self.scheme.zero_initials.get(p)
        if zero is not None:
            return ShuangpinCode(char, p, zero[:1] if initials_only else zero)
        initial = self.source.initial(char)
        final = self.source.final(char)
        mapped_initial = self.scheme.initials.get(initial)
        mapped_final = self.scheme.finals.get(final)
        if mapped_initial is not None and mapped_final is not None:
            code = mapped_initial if initials_only else mapped_initial + mapped_final
            return ShuangpinCode(char, p, code)
        # 方案表缺项：退回原始拼音。
        if self.logger is not None:
            self.logger.debug(
                "shuangpin fallback",
                char=char,
                pinyin=p,
                initial=initial,
                final=final,
                scheme=self.scheme.name,
            )
        return ShuangpinCode(char, p, p[:1] if initials_only else p, fallback=True)

    def encode(self, char: str, initials_only: bool = False) -> str:
        """返回单字编码字符串，无读音时返回空串。"""
        result = self.lookup(char, initials_only=initials_only)
        return result.code if result is not None else ""

    def encode_text(self, text: str, initials_only: bool = False) -> EncodedText:
        """逐字编码一段文本；非汉字原样透传，无读音的汉字不产生输出。"""
        tokens: List[str] = []
        fallbacks = 0
        for char in text:
            if not is_han(char):
                tokens.append(char)
                continue
            result = self.lookup(char, initials_only=initials_only)
            if result is None:
                continue
            tokens.append(result.code)
            fallbacks += int(result.fallback)
        return EncodedText(tuple(tokens), fallbacks)
