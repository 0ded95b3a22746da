"""提供结构化日志与汇总打印的工具集合；控制台输出走标准错误，标准输出只承载转写数据。"""  # 模块文档说明。
from __future__ import annotations  # 启用延迟求值的注解语义以支持联合类型语法。
import json  # 导入 json 以在 JSONL 格式下序列化日志记录。
import logging  # 导入 logging 以兼容旧接口并处理回退输出。
import os
import sys  # 导入 sys 以访问标准错误流对象。
import traceback
import uuid  # 导入 uuid 以生成高熵的 TraceID。
from datetime import datetime, timezone  # 导入 datetime 以生成 UTC 时间戳。
from pathlib import Path  # 导入 Path 便于处理日志文件路径。
from typing import Any, Dict, Optional, TextIO  # 导入类型注释以提升可读性。

from src.utils.io import jsonl_append, safe_mkdirs, with_file_lock  # 导入 I/O 工具用于安全追加。

_LEVELS = {  # 定义日志等级到数值的映射，兼容 logging 模块的约定。
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def new_trace_id() -> str:
    """生成 12 字符长度的短 TraceID，用于贯穿一次运行。"""  # 函数说明。
    return uuid.uuid4().hex[:12]


def _normalize_level(level: str) -> str:
    """将外部传入的日志等级规范化为大写并验证合法性。"""  # 函数说明。
    upper = level.upper()
    if upper not in _LEVELS:  # 检查是否为已知等级。
        raise ValueError(f"Unsupported log level: {level}")
    return upper


def _append_text_atomic(path: Path, text: str, *, force_flush: bool = False) -> None:
    """以锁保护的方式向纯文本日志追加一行。"""  # 函数说明。
    safe_mkdirs(path.parent)
    lock_path = path.with_suffix(path.suffix + ".lock")
    with with_file_lock(lock_path, timeout_sec=30):
        with path.open("a", encoding="utf-8") as handle:
            handle.write(text)
            handle.write("\n")
            handle.flush()
            if force_flush:
                os.fsync(handle.fileno())


class _LoggerCore:
    """封装日志格式化与写入细节的内部核心类。"""  # 类说明。

    def __init__(
        self,
        log_format: str,
        level: str,
        log_file: str | None,
        sample_rate: float,
        quiet: bool,
        *,
        force_flush: bool = False,
        console: TextIO | None = None,
    ) -> None:
        """初始化日志核心，保存格式、等级与输出目标。"""  # 方法说明。
        normalized = log_format.lower()
        if normalized not in {"human", "jsonl"}:  # 校验格式是否受支持。
            raise ValueError(f"Unsupported log format: {log_format}")
        self.format = normalized
        self.level = _LEVELS[_normalize_level(level)]  # 将等级转换为数值阈值。
        self.log_file = Path(log_file) if log_file else None
        self.sample_rate = max(min(sample_rate, 1.0), 0.0)  # 对采样率进行截断，确保在 [0,1] 内。
        self.quiet = quiet
        self._sample_counter = 0  # 采样计数器，用于确定是否输出。
        self._console = console  # None 表示写入时再取当前的 sys.stderr。
        self._force_flush = force_flush
        if self.log_file is not None:
            safe_mkdirs(self.log_file.parent)

    @property
    def console(self) -> TextIO:
        return self._console if self._console is not None else sys.stderr

    def _should_emit(self, level_value: int) -> bool:
        """根据等级与采样策略判断是否输出日志。"""  # 方法说明。
        if level_value < self.level:
            return False
        if level_value <= _LEVELS["INFO"] and self.sample_rate < 1.0:  # 对 INFO 及以下日志应用采样。
            period = max(1, int(round(1.0 / self.sample_rate))) if self.sample_rate > 0 else 0
            if period == 0:
                return False
            keep = self._sample_counter % period == 0  # 仅在周期的第一个事件保留日志。
            self._sample_counter += 1
            if not keep:
                return False
        return True

    def _timestamp(self) -> str:
        """返回带毫秒精度的 UTC ISO8601 时间戳。"""  # 方法说明。
        now = datetime.now(timezone.utc)
        return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def _render_human(self, record: Dict[str, Any]) -> str:
        """将日志记录渲染为人类易读的字符串。"""  # 方法说明。
        parts = [f"[{record['level']}]", record["ts"]]
        trace_id = record.get("trace_id")
        if trace_id:
            parts.append(f"trace={trace_id}")
        line_number = record.get("line_number")
        if line_number is not None:  # 逐行处理时附带行号。
            parts.append(f"line={line_number}")
        parts.append(record["msg"])
        base = " ".join(parts)

        # 若存在错误字段，则在基础行后追加详细信息，便于快速定位问题。
        extra_lines: list[str] = []
        error_fields: list[str] = []
        error_type = record.get("error_type")
        if error_type:
            error_fields.append(f"error_type={error_type}")
        error_message = record.get("error")
        if error_message:
            error_fields.append(f"error={error_message}")
        if error_fields:
            extra_lines.append("    " + " ".join(error_fields))

        trace_text = record.get("trace")
        if isinstance(trace_text, str) and trace_text.strip():
            for line in trace_text.rstrip().splitlines():
                extra_lines.append("    " + line)

        if extra_lines:
            return "\n".join([base, *extra_lines])
        return base

    def emit(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        """根据配置输出一条日志记录。"""  # 方法说明。
        normalized = _normalize_level(level)
        if not self._should_emit(_LEVELS[normalized]):
            return
        record: Dict[str, Any] = {
            "ts": self._timestamp(),
            "level": normalized,
            "msg": message,
        }
        record.update(fields)  # 合并调用方提供的扩展字段。
        if self.format == "human":
            rendered = self._render_human(record)
            if not self.quiet:
                self.console.write(rendered + "\n")
                self.console.flush()
            if self.log_file is not None:
                _append_text_atomic(self.log_file, rendered, force_flush=self._force_flush)
        else:  # JSONL 模式下直接写入结构化数据。
            if not self.quiet:
                json.dump(record, self.console, ensure_ascii=False)
                self.console.write("\n")
                self.console.flush()
            if self.log_file is not None:
                jsonl_append(str(self.log_file), record, force_flush=self._force_flush)


class StructuredLogger:
    """对外暴露的结构化日志器，支持上下文绑定与多格式输出。"""  # 类说明。

    def __init__(self, core: _LoggerCore, context: Optional[Dict[str, Any]] = None, parent: "StructuredLogger" | None = None) -> None:
        """创建日志器实例，可选地继承父级上下文。"""  # 方法说明。
        self._core = core
        self._context = context or {}
        self._parent = parent

    @property
    def level(self) -> int:
        """当前生效的数值阈值。"""
        return self._core.level

    def _collect_context(self) -> Dict[str, Any]:
        """递归合并父级上下文并返回总上下文字典。"""  # 方法说明。
        aggregated: Dict[str, Any] = {}
        if self._parent is not None:
            aggregated.update(self._parent._collect_context())
        aggregated.update(self._context)
        return aggregated

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """基于当前实例追加上下文字段并返回新的子日志器。"""  # 方法说明。
        return StructuredLogger(self._core, context=kwargs, parent=self)

    def log(self, level: str, message: str, **fields: Any) -> None:
        """记录一条带指定等级的日志，可附带额外字段。"""  # 方法说明。
        payload = self._collect_context()
        payload.update(fields)
        self._core.emit(level, message, payload)

    def debug(self, message: str, **fields: Any) -> None:
        """输出 DEBUG 级日志。"""
        self.log("DEBUG", message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        """输出 INFO 级日志。"""
        self.log("INFO", message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        """输出 WARNING 级日志。"""
        self.log("WARNING", message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        """输出 ERROR 级日志。"""
        self.log("ERROR", message, **fields)

    def exception(self, message: str, exc: BaseException | None = None, **fields: Any) -> None:
        """输出包含异常堆栈的 ERROR 级日志。"""  # 方法说明。
        exception_obj = exc
        if exception_obj is None:
            _, exception_obj, _ = sys.exc_info()
        if exception_obj is not None:
            fields.setdefault("error", str(exception_obj))
            fields.setdefault("error_type", exception_obj.__class__.__name__)
            trace_text = "".join(
                traceback.format_exception(
                    exception_obj.__class__, exception_obj, exception_obj.__traceback__
                )
            )
            fields.setdefault("trace", trace_text)
        self.log("ERROR", message, **fields)


def get_logger(
    format: str = "human",
    level: str = "INFO",
    log_file: str | None = None,
    sample_rate: float = 1.0,
    quiet: bool = False,
    *,
    force_flush: bool = False,
    console: TextIO | None = None,
) -> StructuredLogger:
    """创建并返回结构化日志器，支持 human/jsonl 两种模式。"""  # 函数说明。
    core = _LoggerCore(
        format,
        level,
        log_file,
        sample_rate,
        quiet,
        force_flush=force_flush,
        console=console,
    )
    return StructuredLogger(core)


def bind_context(logger: StructuredLogger, **kwargs: Any) -> StructuredLogger:
    """为现有日志器绑定额外上下文并返回新的实例。"""  # 函数说明。
    return logger.bind(**kwargs)


def print_summary(summary: dict, logger: StructuredLogger | logging.Logger | None = None) -> None:
    """输出一次运行的逐行处理汇总，既支持结构化日志也兼容标准 logging。"""  # 函数说明。
    lines_total = int(summary.get("lines_total", 0))
    lines_converted = int(summary.get("lines_converted", 0))
    fallbacks = int(summary.get("shuangpin_fallbacks", 0))
    read_errors = int(summary.get("read_errors", 0))
    elapsed = float(summary.get("elapsed_sec", 0.0))
    throughput = (lines_total / elapsed) if elapsed > 0 else 0.0  # 每秒处理行数。
    message = (
        "Summary lines={lines} converted={converted} fallbacks={fallbacks} "
        "read_errors={errors} elapsed={elapsed:.3f}s throughput={throughput:.1f}/s"
    ).format(
        lines=lines_total,
        converted=lines_converted,
        fallbacks=fallbacks,
        errors=read_errors,
        elapsed=elapsed,
        throughput=throughput,
    )
    if isinstance(logger, StructuredLogger):
        payload = dict(summary)
        payload["lines_per_sec"] = throughput
        logger.info("run summary", summary=payload, text=message)
    elif isinstance(logger, logging.Logger):
        logger.info(message)
    else:
        logging.getLogger("pinyinify").info(message)
