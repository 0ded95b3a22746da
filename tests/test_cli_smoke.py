"""通过 CLI 执行离线读音表来源的冒烟测试。"""
# 导入 os 以操作环境变量（如 PYTHONPATH）。
import os
# 导入 subprocess 以运行 python -m 命令。
import subprocess
# 导入 sys 以获取当前解释器路径。
import sys
# 导入 pathlib.Path 以构造输入与输出路径。
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.cli.main import build_parser, main  # noqa: E402


# 定义辅助函数，包装对 CLI 的调用，减少重复样板代码。
def _run_cli(args: list[str], stdin_data: str | bytes, cwd: Path) -> subprocess.CompletedProcess:
    """使用当前 Python 解释器运行 CLI 并返回进程结果。"""

    # 构造环境变量，显式设置 PYTHONPATH 指向仓库根目录。
    env = {key: value for key, value in os.environ.items() if not key.startswith("PINYINIFY_")}
    env["PYTHONPATH"] = str(ROOT)
    # 组合命令行参数，使用 python -m src.cli.main 形式。
    command = [sys.executable, "-m", "src.cli.main", *args]
    # 文本按 UTF-8 编码后传入标准输入，字节原样传入。
    result = subprocess.run(
        command,
        cwd=cwd,
        env=env,
        check=False,
        input=stdin_data.encode("utf-8") if isinstance(stdin_data, str) else stdin_data,
        capture_output=True,
    )
    return result


def test_cli_default_mode_reads_stdin(tmp_path: Path, table_file: Path) -> None:
    """默认模式下输出原文与拼音，以制表符分隔。"""
    result = _run_cli(
        ["--source", "table", "--table-file", str(table_file)],
        "你好\nNo Chinese here\n你好，world！\n",
        tmp_path,
    )
    assert result.returncode == 0, result.stderr.decode("utf-8", "replace")
    assert result.stdout.decode("utf-8").splitlines() == [
        "你好\tni hao",
        "No Chinese here",
        "你好，world！\tni hao , world!",
    ]


def test_cli_single_dash_flags(tmp_path: Path, table_file: Path) -> None:
    """兼容 -xiaohe -initials -only 单横线写法。"""
    result = _run_cli(
        ["-xiaohe", "-initials", "-only", "--source", "table", "--table-file", str(table_file)],
        "你好世界\n",
        tmp_path,
    )
    assert result.returncode == 0, result.stderr.decode("utf-8", "replace")
    assert result.stdout.decode("utf-8") == "n h u j\n"


BAD_UTF8_INPUT = "你好\nabc\n".encode("utf-8") + b"\xff\xfe\n" + "世界\n".encode("utf-8")


def test_cli_invalid_utf8_keeps_earlier_lines(tmp_path: Path, table_file: Path) -> None:
    """非法 UTF-8 行之前的行全部输出，错误在标准错误报告，退出码为 1。"""
    result = _run_cli(["--source", "table", "--table-file", str(table_file)], BAD_UTF8_INPUT, tmp_path)
    assert result.returncode == 1
    assert result.stdout.decode("utf-8") == "你好\tni hao\nabc\n"
    assert b"reading input failed" in result.stderr
    assert b"line=3" in result.stderr
    assert b"error_type=decode" in result.stderr


def test_cli_invalid_utf8_in_input_file(tmp_path: Path, table_file: Path) -> None:
    """--input 读取文件时与标准输入行为一致。"""
    input_path = tmp_path / "bad.txt"
    input_path.write_bytes(BAD_UTF8_INPUT)
    output_path = tmp_path / "out.txt"
    result = _run_cli(
        [
            "--source",
            "table",
            "--table-file",
            str(table_file),
            "--input",
            str(input_path),
            "--output",
            str(output_path),
        ],
        b"",
        tmp_path,
    )
    assert result.returncode == 1
    assert output_path.read_text(encoding="utf-8") == "你好\tni hao\nabc\n"
    assert b"error_type=decode" in result.stderr


def test_cli_config_error_exits_with_two(tmp_path: Path) -> None:
    result = _run_cli(["--source", "table"], "你好\n", tmp_path)
    assert result.returncode == 2
    assert b"table_file" in result.stderr
    assert result.stdout == b""


def test_cli_print_config(capsys: pytest.CaptureFixture[str]) -> None:
    """--print-config 打印最终配置快照后直接退出。"""
    exit_code = main(["--profile", "xiaohe", "--print-config", "true"])
    assert exit_code == 0
    captured = capsys.readouterr()
    assert "xiaohe: true  # profile:xiaohe" in captured.out


def test_cli_save_config(tmp_path: Path) -> None:
    target = tmp_path / "effective.yaml"
    exit_code = main(["--initials", "--save-config", str(target)])
    assert exit_code == 0
    assert "initials: true  # cli:args" in target.read_text(encoding="utf-8")


def test_parser_rejects_bad_boolean() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--punct", "maybe"])
