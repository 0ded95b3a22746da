"""测试公共夹具：离线读音表来源，避免单元测试依赖 pypinyin 词典。"""
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.translit.sources.table import TableSyllableSource  # noqa: E402

# 覆盖测试用例所需的常用字读音，多音字按常见读音优先排列。
TABLE_ENTRIES = {
    "你": ["ni"],
    "好": ["hao"],
    "世": ["shi"],
    "界": ["jie"],
    "中": ["zhong"],
    "文": ["wen"],
    "爱": ["ai"],
    "鹅": ["e"],
    "一": ["yi"],
    "行": ["xing", "hang"],
    "长": ["chang", "zhang"],
    "嗯": ["ng", "n"],
    "姆": ["mu"],
}

TABLE_TEXT = "\n".join(f"{char}: {' '.join(readings)}" for char, readings in TABLE_ENTRIES.items()) + "\n"


@pytest.fixture
def table_source() -> TableSyllableSource:
    """返回内存读音表来源。"""
    return TableSyllableSource(entries=TABLE_ENTRIES)


@pytest.fixture
def table_file(tmp_path: Path) -> Path:
    """将读音表写入临时文件，供配置层与 CLI 测试使用。"""
    path = tmp_path / "table.txt"
    path.write_text("# 测试读音表\n" + TABLE_TEXT, encoding="utf-8")
    return path
