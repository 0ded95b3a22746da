#!/usr/bin/env python3  # 指定解释器为 Python 3，方便跨平台执行。
"""环境体检脚本：检查依赖、打印生效配置并核对双拼方案覆盖范围。"""  # 描述脚本用途。
import argparse  # 解析命令行参数。
import platform  # 获取平台与 Python 版本信息。
import sys  # 控制脚本退出码并访问解释器信息。
from pathlib import Path  # 优雅地处理路径。
from typing import Iterable, List, Optional, Tuple  # 提供类型注解。

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # 直接执行脚本时也能导入 src.*。

from src.translit.scheme import load_scheme  # noqa: E402  # 加载方案以检查缺项。
from src.translit.sources import create_source  # noqa: E402  # 试探性构造音节来源。
from src.utils.config import ConfigError, load_and_merge_config  # noqa: E402  # 导入配置加载器。
from src.utils.errors import NonRetryableError  # noqa: E402

REQUIRED_PACKAGES = [  # 定义必须存在的 Python 包。
    ("yaml", "PyYAML"),  # 配置与方案解析库。
    ("jsonschema", "jsonschema"),  # 方案文件校验库。
]
OPTIONAL_PACKAGES = [  # 可选包列表。
    ("pypinyin", "pypinyin"),  # 默认音节来源；改用 table 来源时可缺省。
    ("pytest", "pytest"),  # 运行测试所需。
]
SAMPLE_TEXT = "你好世界"  # 用于试转换的样例文本。


def print_section(title: str) -> None:
    """打印带分隔线的章节标题。"""  # 函数说明。
    print()
    print(f"=== {title} ===")


def print_kv(label: str, value: str) -> None:
    print(f"{label}: {value}")


def evaluate_python_version() -> Tuple[str, str]:
    """返回 Python 版本状态与建议。"""  # 函数说明。
    version = platform.python_version()
    if sys.version_info < (3, 10):  # 若版本过低。
        return "需升级", f"检测到 Python {version} 低于 3.10，建议升级。"
    return "良好", f"当前 Python 版本为 {version}，满足 3.10+ 要求。"


def read_package_version(module_name: str) -> Optional[str]:
    """尝试导入模块并返回版本号，失败时返回 None。"""  # 函数说明。
    try:
        module = __import__(module_name)
    except ImportError:
        return None
    version = getattr(module, "__version__", None)
    return str(version) if version is not None else "已安装，版本未知"


def evaluate_packages(packages: Iterable[Tuple[str, str]]) -> List[str]:
    """检查包是否已安装并返回状态字符串。"""  # 函数说明。
    reports: List[str] = []
    for module_name, display_name in packages:
        version = read_package_version(module_name)
        if version is None:
            reports.append(f"WARNING: {display_name} 未安装")
        else:
            reports.append(f"OK: {display_name} {version}")
    return reports


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="检查依赖、配置与双拼方案完整性。")
    parser.add_argument("--config", default=None, help="可选用户配置 YAML 路径。")
    parser.add_argument("--profile", default=None, help="可选 profile 名称，用于演示配置覆盖效果。")
    parser.add_argument("--scheme", default=None, help="覆盖待检查的双拼方案名称或路径。")
    return parser


def main() -> int:
    """脚本主入口，输出完整体检报告；发现阻塞问题时返回 1。"""  # 函数说明。
    args = build_parser().parse_args()
    problems = 0
    print_section("Python 版本")
    status, advice = evaluate_python_version()
    print_kv("STATUS", status)
    print(advice)

    print_section("核心依赖检测")
    required_reports = evaluate_packages(REQUIRED_PACKAGES)
    for report in required_reports:
        print(report)
    problems += sum(report.startswith("WARNING") for report in required_reports)
    print_section("可选组件检测")
    for report in evaluate_packages(OPTIONAL_PACKAGES):
        print(report)

    print_section("配置快照")
    overrides = {"convert": {"scheme": args.scheme}} if args.scheme else None
    try:
        bundle = load_and_merge_config(cli_overrides=overrides, config_path=args.config, profile_name=args.profile)
    except ConfigError as exc:
        print(f"WARNING: 无法解析配置 -> {exc}")
        return 1
    convert = bundle.config.get("convert", {})
    print_kv("PROFILE", bundle.profile or "<default>")
    print_kv("SOURCE", str(convert.get("source")))
    print_kv("TABLE FILE", str(convert.get("table_file") or "<未提供>"))
    print_kv("SCHEME", str(convert.get("scheme")))
    print_kv("MODE", f"initials={convert.get('initials')} xiaohe={convert.get('xiaohe')} only={convert.get('only')}")

    print_section("双拼方案检查")
    try:
        scheme = load_scheme(str(convert.get("scheme") or "xiaohe"))
    except (NonRetryableError, ValueError) as exc:
        print(f"WARNING: 方案加载失败 -> {exc}")
        return 1
    missing = scheme.missing_entries()
    for table, entries in missing.items():
        if entries:
            # 缺项会在转换时退回原始拼音，不阻塞运行。
            print(f"INFO: {table} 缺少 {', '.join(entries)}")
        else:
            print(f"OK: {table} 完整")

    print_section("音节来源检查")
    source_name = str(convert.get("source") or "pypinyin")
    kwargs = {"table_file": convert.get("table_file")} if source_name == "table" else {}
    try:
        source = create_source(source_name, **kwargs)
    except NonRetryableError as exc:
        print(f"WARNING: 音节来源不可用 -> {exc}")
        problems += 1
    else:
        readings = [source.canonical(char) or "-" for char in SAMPLE_TEXT]
        print_kv(SAMPLE_TEXT, " ".join(readings))

    print_section("环境小结")
    if problems:
        print("WARNING: 仍有阻塞问题，请根据上方提示处理。")
        return 1
    print("OK: 环境就绪。")
    return 0


if __name__ == "__main__":  # 当脚本直接执行时。
    sys.exit(main())
