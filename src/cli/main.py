"""命令行入口，负责解析参数、加载分层配置并调用逐行转写管线。"""  # 模块说明。
import argparse  # 导入 argparse 以解析命令行参数。
import logging
import sys  # 导入 sys 以访问标准流并支持 python -m 调用。
from pathlib import Path

from src.translit.pipeline import run  # 导入 pipeline.run 执行核心逻辑。
from src.utils.config import (  # 导入配置工具以支持分层加载与快照。
    ALLOWED_SOURCES,
    ConfigError,
    load_and_merge_config,
    parse_cli_set_items,
    render_effective_config,
    save_config,
)
from src.utils.errors import NonRetryableError
from src.utils.logging import get_logger  # 导入日志工具创建结构化日志器。

EXIT_CONFIG_ERROR = 2  # 配置错误的退出码，与 argparse 用法错误一致。


def parse_bool(value: str) -> bool:
    """将传入值解析为布尔类型，仅接受 true/false。"""  # 函数说明。

    if isinstance(value, bool):
        return value
    normalized = value.lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    raise argparse.ArgumentTypeError("Expected 'true' or 'false'")


def build_parser() -> argparse.ArgumentParser:
    """创建参数解析器并声明所有可用选项。"""  # 函数说明。

    parser = argparse.ArgumentParser(
        prog="pinyinify",
        description="Reads from standard input and converts Chinese characters to Pinyin.",
    )
    # 兼容单横线写法（-initials / -xiaohe / -only）。
    parser.add_argument("--initials", "-initials", action="store_true", default=None, help="Convert to Pinyin initials")
    parser.add_argument("--xiaohe", "-xiaohe", action="store_true", default=None, help="Convert to Xiaohe Shuangpin")
    parser.add_argument(
        "--only", "-only", action="store_true", default=None, help="Print only converted text, not original text"
    )
    parser.add_argument(
        "--punct",
        type=parse_bool,
        default=None,
        help="中文全角标点是否并入汉字片段 (true/false)",
    )
    parser.add_argument("--source", choices=sorted(ALLOWED_SOURCES), default=None, help="音节来源后端")
    parser.add_argument("--table-file", default=None, help="source=table 时使用的读音表文件")
    parser.add_argument("--scheme", default=None, help="双拼方案：内置名称（xiaohe）或 YAML 方案文件路径")
    parser.add_argument("--input", default=None, help="输入文件，默认读取标准输入")
    parser.add_argument("--output", default=None, help="输出文件，默认写入标准输出")
    parser.add_argument("--config", default=None, help="可选用户配置 YAML 路径，默认查找 config/user.yaml")
    parser.add_argument("--profile", dest="profile_name", default=None, help="选择预设 profile 名称")
    parser.add_argument(
        "--set",
        dest="set_items",
        action="append",
        default=[],
        help="通过 KEY=VALUE 覆盖任意配置，可重复使用",
    )
    parser.add_argument(
        "--print-config",
        type=parse_bool,
        nargs="?",
        const=True,
        default=False,
        help="打印最终配置快照后退出",
    )
    parser.add_argument("--save-config", default=None, help="保存最终配置快照到指定路径后退出")
    parser.add_argument(
        "--verbose",
        type=parse_bool,
        nargs="?",
        const=True,
        default=None,
        help="输出详细日志 (可省略值以启用 true/false)",
    )
    parser.add_argument("--log-format", choices=["human", "jsonl"], default=None, help="日志格式")
    parser.add_argument("--log-level", default=None, help="日志等级（DEBUG/INFO/WARNING/ERROR）")
    parser.add_argument("--log-file", default=None, help="可选日志文件路径，追加写入")
    parser.add_argument("--log-sample-rate", type=float, default=None, help="信息级日志采样率 (0-1]")
    parser.add_argument("--quiet", type=parse_bool, default=None, help="静默模式，控制台不输出日志 (true/false)")
    parser.add_argument("--force-flush", action="store_true", help="每条日志写入文件后立即 fsync")
    parser.add_argument("--metrics-file", default=None, help="若提供则导出指标到指定 CSV/JSONL")
    return parser


def _build_cli_overrides(args: argparse.Namespace) -> dict:
    """根据解析结果构造 CLI 覆盖字典，仅包含显式传入的键。"""  # 工具函数说明。

    overrides: dict[str, object] = {}
    for key in ("input", "output", "verbose", "log_format", "log_level", "log_file", "quiet", "metrics_file"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value
    if args.log_sample_rate is not None:
        overrides["log_sample_rate"] = max(min(float(args.log_sample_rate), 1.0), 1e-6)
    if args.force_flush:
        overrides["force_flush"] = True
    convert_overrides: dict[str, object] = {}  # 收集 convert 子配置。
    for key in ("initials", "xiaohe", "only", "punct", "source", "table_file", "scheme"):
        value = getattr(args, key)
        if value is not None:
            convert_overrides[key] = value
    if convert_overrides:
        overrides["convert"] = convert_overrides
    return overrides


def _configure_stdio() -> None:
    """标准输出统一使用 UTF-8 并按行缓冲；标准输入由管线按字节逐行解码。"""
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:  # 测试中被替换的流可能不支持 reconfigure。
        reconfigure(encoding="utf-8", line_buffering=True)


def main(argv: list[str] | None = None) -> int:
    """解析参数并调用管线，返回退出状态码。"""  # 函数说明。

    parser = build_parser()
    args = parser.parse_args(argv)
    # 标准 logging 仅用于 CLI 自身消息，统一写到标准错误。
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    cli_logger = logging.getLogger("src.cli.main")
    try:
        cli_set_overrides = parse_cli_set_items(args.set_items) if args.set_items else {}
        bundle = load_and_merge_config(
            cli_overrides=_build_cli_overrides(args),
            cli_set_overrides=cli_set_overrides,
            config_path=args.config,
            profile_name=args.profile_name,
        )
    except ConfigError as exc:
        cli_logger.error("configuration error: %s", exc)
        return EXIT_CONFIG_ERROR
    config = bundle.config
    if args.print_config:
        # 快照属于用户请求的数据，写入标准输出。
        sys.stdout.write(render_effective_config(bundle, include_sources=True))
        sys.stdout.flush()
        if args.save_config:
            save_config(bundle, args.save_config)
        return 0
    if args.save_config:
        save_config(bundle, args.save_config)
        cli_logger.info("configuration saved to %s", Path(args.save_config))
        return 0
    logger = get_logger(
        format=config.get("log_format", "human"),
        level=config.get("log_level", "WARNING"),
        log_file=config.get("log_file"),
        sample_rate=float(config.get("log_sample_rate", 1.0)),
        quiet=bool(config.get("quiet", False)),
        force_flush=bool(config.get("force_flush", False)),
    )
    logger.debug("effective profile", profile=bundle.profile or "default", convert=config.get("convert"))
    _configure_stdio()
    try:
        summary = run(config=config, logger=logger)
    except (NonRetryableError, ValueError, OSError) as exc:  # 来源、方案或输入输出文件不可用。
        logger.error("cannot start conversion", error=str(exc), error_type=exc.__class__.__name__)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("fatal pipeline error")
        return 1
    return int(summary.get("exit_code", 0))


if __name__ == "__main__":  # 允许脚本直接运行。
    sys.exit(main())
