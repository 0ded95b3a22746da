"""音节来源注册表，用于根据名称返回具体实现。"""
# 导入 typing.TYPE_CHECKING 用于仅在类型检查时导入接口。
from typing import TYPE_CHECKING, Dict, Type
# 导入 pypinyin 后端以注册（pypinyin 本身在实例化时才导入）。
from .pypinyin_source import PypinyinSource
# 导入离线读音表后端以注册。
from .table import TableSyllableSource
# 如果处于类型检查阶段，导入接口定义以提供准确提示。
if TYPE_CHECKING:
    from .base import ISyllableSource

# 定义一个字典，映射后端名称到具体类，后续新增后端时在此注册。
SOURCES: Dict[str, Type["ISyllableSource"]] = {
    # pypinyin 名称对应默认的在线词典实现。
    "pypinyin": PypinyinSource,
    # table 名称对应静态读音表实现。
    "table": TableSyllableSource,
}


# 提供工厂函数，根据名称创建后端实例并透传额外参数。
def create_source(name: str, **kwargs) -> "ISyllableSource":
    """根据后端名称返回对应的音节来源实例。"""
    # 尝试在注册表中查找给定名称。
    if name not in SOURCES:
        # 若不存在，抛出带详细信息的错误，提示如何扩展。
        raise ValueError(
            f"Unsupported syllable source '{name}'. Available options: {', '.join(SOURCES)}"
        )
    # 找到对应类后实例化并返回，kwargs 可包含读音表路径等配置。
    return SOURCES[name](**kwargs)
