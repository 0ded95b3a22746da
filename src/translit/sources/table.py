"""提供基于静态读音表的离线音节来源实现。"""
# 导入 re 以按空白或逗号拆分读音列表。
import re
# 导入 pathlib.Path 便于处理文件路径。
from pathlib import Path
# 导入 typing 类型用于注释。
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from src.utils.errors import SourceUnavailableError

# 从同目录的 base 模块导入接口基类。
from .base import ISyllableSource, PinyinStyle, unique_in_order

# 定义表格后端的常量名称。
TABLE_NAME = "table"

# 按长度降序排列的声母清单，保证 zh/ch/sh 先于 z/c/s 匹配。
_INITIALS_LONGEST_FIRST = (
    "zh", "ch", "sh",
    "b", "p", "m", "f", "d", "t", "n", "l", "g", "k", "h",
    "j", "q", "x", "r", "z", "c", "s", "y", "w",
)


def split_syllable(syllable: str) -> Tuple[str, str]:
    """按最长声母匹配将无调拼音拆分为 (声母, 韵母)，零声母返回空声母。"""
    for initial in _INITIALS_LONGEST_FIRST:
        # 声母之后必须仍有韵母，避免把 m/n 等成音节辅音误当声母。
        if syllable.startswith(initial) and len(syllable) > len(initial):
            return initial, syllable[len(initial):]
    return "", syllable


def load_table_file(path: str) -> Dict[str, List[str]]:
    """读取“字: 读音1 读音2”格式的文本文件，返回字到读音列表的映射。"""
    entries: Dict[str, List[str]] = {}
    table_path = Path(path)
    if not table_path.exists():
        raise SourceUnavailableError(f"Pronunciation table not found: {table_path}")
    with table_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            # 跳过空行与注释行。
            if not line or line.startswith("#"):
                continue
            char, sep, rest = line.partition(":")
            char = char.strip()
            if not sep or len(char) != 1:
                continue
            readings = [item.lower() for item in re.split(r"[\s,]+", rest.strip()) if item]
            # 同一字可出现在多行，读音按出现顺序累加。
            entries.setdefault(char, []).extend(readings)
    return entries


class TableSyllableSource(ISyllableSource):
    """根据内存映射或读音表文件返回读音，不依赖第三方库。"""

    name = TABLE_NAME

    def __init__(
        self,
        entries: Mapping[str, Sequence[str]] | None = None,
        table_file: str | None = None,
        **kwargs: Any,
    ) -> None:
        """合并文件与内存两类读音来源，内存条目优先。"""
        super().__init__(**kwargs)
        table: Dict[str, List[str]] = {}
        if table_file:
            table.update(load_table_file(table_file))
        for char, readings in (entries or {}).items():
            table[char] = list(readings)
        # 构造完成后不再修改。
        self._table: Dict[str, Tuple[str, ...]] = {
            char: tuple(unique_in_order(list(readings))) for char, readings in table.items()
        }

    def __len__(self) -> int:
        return len(self._table)

    def pronunciations(self, char: str) -> List[str]:
        return list(self._table.get(char, ()))

    def initial(self, char: str) -> str:
        canonical = self.canonical(char)
        if canonical is None:
            return ""
        return split_syllable(canonical)[0]

    def final(self, char: str) -> str:
        canonical = self.canonical(char)
        if canonical is None:
            return ""
        return split_syllable(canonical)[1]

    def styled(self, text: str, style: PinyinStyle) -> List[str]:
        """逐字查表，未收录的字符原样保留。"""
        result: List[str] = []
        for char in text:
            canonical = self.canonical(char)
            if canonical is None:
                result.append(char)
            elif style is PinyinStyle.FIRST_LETTER:
                result.append(canonical[0])
            else:
                result.append(canonical)
        return result
