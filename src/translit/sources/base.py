"""定义所有音节来源后端共同遵循的抽象接口。"""
# 导入 abc 模块中的 ABC 与 abstractmethod，用于声明抽象基类。
from abc import ABC, abstractmethod
# 导入 enum 定义拼音输出风格。
import enum
# 导入 typing 的 Any、Dict、List 用于类型注释。
from typing import Any, Dict, List


class PinyinStyle(enum.Enum):
    """非双拼模式下的拼音输出风格。"""

    NORMAL = "normal"  # 完整音节，不带声调。
    FIRST_LETTER = "first_letter"  # 仅保留首字母。


def unique_in_order(items: List[str]) -> List[str]:
    """去除重复项并保留首次出现的顺序，同时丢弃空串。"""
    seen = set()
    result: List[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


# 定义统一的抽象基类，所有具体后端都应继承该类。
class ISyllableSource(ABC):
    """约定单字读音查询、声韵拆分与整段风格化转换的抽象基类。"""

    # 后端名称，子类覆盖。
    name = "abstract"

    # 定义初始化函数，保存额外配置。
    def __init__(self, **kwargs: Any) -> None:
        """存储后端实例初始化所需的公共属性。"""
        # 将额外的关键字参数保存为字典，便于扩展更多选项。
        self.extra_options: Dict[str, Any] = dict(kwargs)

    @abstractmethod
    def pronunciations(self, char: str) -> List[str]:
        """返回单个汉字的候选读音（多音字按来源顺序），无读音时返回空列表。"""
        raise NotImplementedError

    @abstractmethod
    def initial(self, char: str) -> str:
        """返回首选读音的声母，零声母返回空串。"""
        raise NotImplementedError

    @abstractmethod
    def final(self, char: str) -> str:
        """返回首选读音的韵母。"""
        raise NotImplementedError

    @abstractmethod
    def styled(self, text: str, style: PinyinStyle) -> List[str]:
        """按给定风格转换一段汉字，每个输入汉字对应一个输出项。"""
        raise NotImplementedError

    def canonical(self, char: str) -> str | None:
        """返回首选读音，不存在时返回 None。"""
        candidates = self.pronunciations(char)
        return candidates[0] if candidates else None
