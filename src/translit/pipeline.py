"""逐行转写管线：读取输入、调用行组装器、写出结果并汇总指标。"""  # 模块说明。
from __future__ import annotations  # 启用延迟求值的注解语义。

import time  # 导入 time 以测量耗时。
from typing import IO, Any, Dict, Iterator, TextIO, Tuple

from src.translit.compose import ComposeOptions, LineComposer
from src.translit.scheme import load_scheme
from src.translit.shuangpin import ShuangpinEncoder
from src.translit.sources import create_source
from src.translit.sources.base import ISyllableSource
from src.utils.errors import InputReadError, classify_read_error
from src.utils.io import open_input, open_text_output
from src.utils.logging import StructuredLogger, bind_context, get_logger, new_trace_id, print_summary
from src.utils.metrics import MetricsSink


def _iter_lines(stream: IO) -> Iterator[Tuple[int, str]]:
    """逐行产出 (行号, 去除行尾换行的文本)，读取或解码失败时抛出 InputReadError。

    二进制流按行单独解码，坏字节只影响所在行，之前的行已经交给调用方处理。
    """
    iterator = iter(stream)
    line_number = 0
    while True:
        try:
            raw = next(iterator)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError) as exc:
            raise InputReadError(f"reading line {line_number + 1} failed: {exc}", line_number + 1) from exc
        line_number += 1
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InputReadError(f"line {line_number} is not valid UTF-8: {exc}", line_number) from exc
        # 与按行扫描一致：去掉 \n 及其前面的 \r。
        if raw.endswith("\n"):
            raw = raw[:-1]
        if raw.endswith("\r"):
            raw = raw[:-1]
        yield line_number, raw


def build_composer(
    config: Dict[str, Any],
    logger: StructuredLogger | None = None,
    source: ISyllableSource | None = None,
) -> LineComposer:
    """根据配置构造音节来源、双拼方案、编码器与行组装器。"""
    convert_cfg = config.get("convert", {})
    if source is None:
        source_name = convert_cfg.get("source", "pypinyin")
        kwargs: Dict[str, Any] = {}
        if source_name == "table":
            kwargs["table_file"] = convert_cfg.get("table_file")
        source = create_source(source_name, **kwargs)
    scheme = load_scheme(convert_cfg.get("scheme") or "xiaohe")
    encoder = ShuangpinEncoder(source, scheme, logger=logger)
    return LineComposer(source, encoder, ComposeOptions.from_config(convert_cfg))


def run(
    config: Dict[str, Any],
    *,
    logger: StructuredLogger | None = None,
    input_stream: IO | None = None,
    output_stream: TextIO | None = None,
    source: ISyllableSource | None = None,
) -> Dict[str, Any]:
    """执行一次完整的逐行转写，返回包含 exit_code 的汇总字典。"""
    if logger is None:
        logger = get_logger(
            format=config.get("log_format", "human"),
            level=config.get("log_level", "WARNING"),
            log_file=config.get("log_file"),
            sample_rate=float(config.get("log_sample_rate", 1.0)),
            quiet=bool(config.get("quiet", False)),
        )
    run_logger = bind_context(logger, trace_id=new_trace_id())
    metrics = MetricsSink()
    composer = build_composer(config, logger=run_logger, source=source)
    options = composer.options
    run_logger.debug(
        "run started",
        source=composer.source.name,
        scheme=composer.encoder.scheme.name,
        initials=options.initials,
        xiaohe=options.xiaohe,
        only=options.only,
        punct=options.punct,
    )
    exit_code = 0
    started = time.perf_counter()
    with open_input(config.get("input"), input_stream) as reader, open_text_output(
        config.get("output"), output_stream
    ) as writer:
        try:
            for line_number, line in _iter_lines(reader):
                result = composer.process(line)
                writer.write(result.output + "\n")
                metrics.inc("lines_total")
                metrics.observe("line_chars", float(len(line)))
                if result.changed:
                    metrics.inc("lines_converted")
                metrics.inc("han_runs", result.runs)
                metrics.inc("han_chars", result.han_chars)
                if result.fallbacks:
                    metrics.inc("shuangpin_fallbacks", result.fallbacks)
                    run_logger.debug("line used fallback pinyin", line_number=line_number, fallbacks=result.fallbacks)
        except InputReadError as exc:
            # 读取失败只终止读取循环，已写出的结果保留。
            cause = exc.__cause__ or exc
            metrics.inc("read_errors")
            run_logger.error(
                "reading input failed",
                line_number=exc.line_number,
                error=str(cause),
                error_type=classify_read_error(cause),
            )
            exit_code = 1
        finally:
            writer.flush()
    metrics.observe("elapsed_total_sec", time.perf_counter() - started)
    metrics_file = config.get("metrics_file")
    if metrics_file:
        metrics.export(metrics_file)
        run_logger.debug("metrics exported", path=metrics_file)
    summary = metrics.summary()
    print_summary(summary, run_logger)
    summary["exit_code"] = exit_code
    return summary
