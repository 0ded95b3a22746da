"""实现逐行转写的计数器、观测统计与 CSV/JSONL 导出。"""  # 模块文档说明。
import csv  # 导入 csv 以便导出表格格式指标。
import io  # 导入 io 以创建内存中的字符串缓冲区。
import json  # 导入 json 以序列化标签。
from dataclasses import dataclass  # 导入 dataclass 简化统计结构定义。
from pathlib import Path  # 导入 Path 处理文件路径。
from typing import Any, Dict, Iterable, Tuple  # 导入类型注释提高可读性。

from src.utils.io import atomic_write_text, jsonl_append, safe_mkdirs  # 复用已有 I/O 工具。

_LabelKey = Tuple[Tuple[str, Any], ...]

# summary() 汇总的计数器名称。
SUMMARY_COUNTERS = (
    "lines_total",
    "lines_converted",
    "han_runs",
    "han_chars",
    "shuangpin_fallbacks",
    "read_errors",
)


@dataclass
class _SummaryStats:
    """用于观测指标的摘要统计结构。"""  # 类说明。

    count: int = 0
    total: float = 0.0
    minimum: float | None = None
    maximum: float | None = None

    def update(self, value: float) -> None:
        """使用新的观测值更新统计信息。"""
        self.count += 1
        self.total += value
        self.minimum = value if self.minimum is None else min(self.minimum, value)
        self.maximum = value if self.maximum is None else max(self.maximum, value)

    def as_record(self) -> Dict[str, Any]:
        average = self.total / self.count if self.count else 0.0
        return {"count": self.count, "sum": self.total, "min": self.minimum, "max": self.maximum, "avg": average}


class MetricsSink:
    """收集计数器与观测值，并支持导出到 CSV/JSONL。"""  # 类说明。

    def __init__(self) -> None:
        self._counters: Dict[Tuple[str, _LabelKey], float] = {}  # 存储计数器值。
        self._summaries: Dict[Tuple[str, _LabelKey], _SummaryStats] = {}  # 存储观测统计。

    @staticmethod
    def _normalize_labels(labels: Dict[str, Any] | None) -> _LabelKey:
        """将标签字典转换为排序后的不可变元组，便于用作字典键。"""
        if not labels:
            return tuple()
        return tuple(sorted((str(key), labels[key]) for key in labels))

    def inc(self, name: str, value: float = 1.0, labels: Dict[str, Any] | None = None) -> None:
        """将指定计数器增加给定数值。"""
        key = (name, self._normalize_labels(labels))
        self._counters[key] = self._counters.get(key, 0.0) + value

    def observe(self, name: str, value: float, labels: Dict[str, Any] | None = None) -> None:
        """记录一个观测指标的数值。"""
        key = (name, self._normalize_labels(labels))
        self._summaries.setdefault(key, _SummaryStats()).update(value)

    def _iter_counters(self) -> Iterable[Dict[str, Any]]:
        for (name, labels), value in self._counters.items():
            yield {"type": "counter", "metric": name, "value": value, "labels": dict(labels)}

    def _iter_summaries(self) -> Iterable[Dict[str, Any]]:
        for (name, labels), stats in self._summaries.items():
            record = {"type": "summary", "metric": name, "labels": dict(labels)}
            record.update(stats.as_record())
            yield record

    def export_jsonl(self, path: str) -> None:
        """将所有指标以 JSONL 格式写入指定文件（覆盖旧内容）。"""
        target = Path(path)
        safe_mkdirs(target.parent)
        target.unlink(missing_ok=True)  # 为避免重复内容，先删除旧文件。
        for record in [*self._iter_counters(), *self._iter_summaries()]:
            jsonl_append(path, record)

    def export_csv(self, path: str) -> None:
        """将指标导出为 CSV 文件。"""
        buffer = io.StringIO()
        fieldnames = ["type", "metric", "value", "count", "sum", "min", "max", "avg", "labels"]
        writer = csv.DictWriter(buffer, fieldnames=fieldnames)
        writer.writeheader()
        for record in [*self._iter_counters(), *self._iter_summaries()]:
            row = dict(record)
            row["labels"] = json.dumps(record.get("labels", {}), ensure_ascii=False)
            writer.writerow(row)
        atomic_write_text(path, buffer.getvalue())

    def export(self, path: str) -> None:
        """按扩展名选择导出格式：.csv 导出 CSV，其余导出 JSONL。"""
        if Path(path).suffix.lower() == ".csv":
            self.export_csv(path)
        else:
            self.export_jsonl(path)

    def get_counter(self, name: str, labels: Dict[str, Any] | None = None) -> float:
        """读取指定计数器的累计值，若不存在则返回 0。"""
        return self._counters.get((name, self._normalize_labels(labels)), 0.0)

    def summary(self, labels: Dict[str, Any] | None = None) -> Dict[str, Any]:
        """生成概览性指标摘要，供日志打印与返回值使用。"""
        label_dict = dict(self._normalize_labels(labels))
        result: Dict[str, Any] = {name: int(self.get_counter(name, label_dict)) for name in SUMMARY_COUNTERS}
        elapsed_stats = self._summaries.get(("elapsed_total_sec", self._normalize_labels(labels)))
        result["elapsed_sec"] = elapsed_stats.total if elapsed_stats else 0.0
        return result
