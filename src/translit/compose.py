"""逐行组装转写结果：片段替换、空白折叠与输出格式选择。"""
from __future__ import annotations  # 启用延迟求值的注解语义。

from dataclasses import dataclass
from typing import List, Tuple

from src.utils.textnorm import collapse_whitespace, normalize_fullwidth

from .segment import is_han, split_segments
from .shuangpin import ShuangpinEncoder
from .sources.base import ISyllableSource, PinyinStyle


@dataclass(frozen=True)
class ComposeOptions:
    """输出模式开关，四种 initials/xiaohe 组合均合法，only 可与之任意组合。"""

    initials: bool = False  # 仅输出首字母或声母键。
    xiaohe: bool = False  # 使用小鹤双拼而非完整拼音。
    only: bool = False  # 只输出转换结果，不附带原文。
    punct: bool = True  # 中文标点并入汉字片段。

    @classmethod
    def from_config(cls, convert_cfg: dict) -> "ComposeOptions":
        """从配置中的 convert 节点构造选项。"""
        return cls(
            initials=bool(convert_cfg.get("initials", False)),
            xiaohe=bool(convert_cfg.get("xiaohe", False)),
            only=bool(convert_cfg.get("only", False)),
            punct=bool(convert_cfg.get("punct", True)),
        )


@dataclass(frozen=True)
class LineResult:
    """单行处理结果，供管线统计指标使用。"""

    original: str
    converted: str
    output: str
    runs: int = 0
    han_chars: int = 0
    fallbacks: int = 0

    @property
    def changed(self) -> bool:
        return self.converted != self.original


class LineComposer:
    """将一行文本中的汉字片段替换为拼音或双拼，行与行之间互不影响。"""

    def __init__(
        self,
        source: ISyllableSource,
        encoder: ShuangpinEncoder | None = None,
        options: ComposeOptions | None = None,
    ) -> None:
        self.source = source
        self.encoder = encoder or ShuangpinEncoder(source)
        self.options = options or ComposeOptions()

    def _han_tokens(self, text: str) -> Tuple[List[str], int]:
        """转换一段纯汉字，返回 (输出项列表, 退回原始拼音的次数)。"""
        if not self.options.xiaohe:
            style = PinyinStyle.FIRST_LETTER if self.options.initials else PinyinStyle.NORMAL
            return self.source.styled(text, style), 0
        encoded = self.encoder.encode_text(text, initials_only=self.options.initials)
        return list(encoded.tokens), encoded.fallbacks

    def _run_tokens(self, run: str) -> Tuple[List[str], int, int]:
        """将含汉字的片段拆为汉字子段与标点，返回 (输出项, 汉字数, 退回次数)。"""
        tokens: List[str] = []
        han_chars = 0
        fallbacks = 0
        for piece in split_segments(run, include_punct=False):
            if piece.run:
                piece_tokens, piece_fallbacks = self._han_tokens(piece.text)
                tokens.extend(piece_tokens)
                han_chars += len(piece.text)
                fallbacks += piece_fallbacks
            else:
                # 片段内的标点逐个规范化后作为独立输出项。
                tokens.extend(normalize_fullwidth(char) for char in piece.text)
        return tokens, han_chars, fallbacks

    def process(self, line: str) -> LineResult:
        """完成单行转换并按输出模式生成最终文本。"""
        parts: List[str] = []
        runs = han_chars = fallbacks = 0
        for segment in split_segments(line, include_punct=self.options.punct):
            if segment.run and any(is_han(char) for char in segment.text):
                tokens, run_chars, run_fallbacks = self._run_tokens(segment.text)
                runs += 1
                han_chars += run_chars
                fallbacks += run_fallbacks
                # 前后补空格，保证与相邻非汉字文本分隔。
                parts.append(" " + " ".join(tokens) + " ")
            else:
                # 间隙文本与纯标点片段原地规范化。
                parts.append(normalize_fullwidth(segment.text))
        converted = collapse_whitespace("".join(parts))
        if self.options.only:
            output = converted
        elif converted != line:
            output = f"{line}\t{converted}"
        else:
            output = line
        return LineResult(
            original=line,
            converted=converted,
            output=output,
            runs=runs,
            han_chars=han_chars,
            fallbacks=fallbacks,
        )

    def convert(self, line: str) -> str:
        """返回转换后的文本（不含原文）。"""
        return self.process(line).converted

    def compose(self, line: str) -> str:
        """返回按输出模式组装好的一行（不含换行符）。"""
        return self.process(line).output
