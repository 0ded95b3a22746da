"""配置系统的层级合并与校验测试集合。"""  # 模块说明。
from __future__ import annotations  # 启用前向注解支持类型提示。

from pathlib import Path  # 导入 Path 以构造临时配置文件与输出路径。

import sys  # 导入 sys 以动态调整模块搜索路径。

sys.path.append(str(Path(__file__).resolve().parents[1]))  # 将仓库根目录加入 sys.path 以导入 src.* 模块。

import pytest  # 导入 pytest 以使用夹具与断言辅助。

from src.utils.config import (  # 导入配置工具函数以供测试使用。
    ConfigError,
    deep_merge_dicts,
    load_and_merge_config,
    parse_cli_set_items,
    render_effective_config,
    save_config,
)


def _write_yaml(path: Path, text: str) -> None:
    """辅助函数：将 YAML 字符串写入指定路径。"""  # 函数说明。
    path.write_text(text, encoding="utf-8")  # 以 UTF-8 写出文本。


def test_defaults() -> None:
    """默认配置输出完整拼音，使用 pypinyin 与小鹤方案。"""
    bundle = load_and_merge_config(environ={})
    convert = bundle.config["convert"]
    assert convert == {
        "initials": False,
        "xiaohe": False,
        "only": False,
        "punct": True,
        "source": "pypinyin",
        "table_file": None,
        "scheme": "xiaohe",
    }
    assert bundle.config["log_level"] == "WARNING"
    assert bundle.profile is None


def test_layer_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """验证默认→用户→ENV→CLI→--set 的覆盖顺序。"""  # 测试说明。
    user_cfg = tmp_path / "user.yaml"  # 用户配置路径。
    _write_yaml(
        user_cfg,
        """convert:
  initials: true
  scheme: XIAOHE
log_level: info
""",
    )  # 写入用户层配置。
    monkeypatch.setenv("PINYINIFY_CONVERT__XIAOHE", "true")  # 环境层开启双拼。
    monkeypatch.setenv("PINYINIFY_LOG_FORMAT", "jsonl")  # 环境层切换日志格式。
    cli_overrides = {"convert": {"only": True}, "log_format": "human"}  # CLI 显式覆盖。
    cli_sets = parse_cli_set_items(["convert.initials=false", "log_sample_rate=0.5"])  # --set 拥有最高优先级。
    bundle = load_and_merge_config(
        cli_overrides=cli_overrides,
        cli_set_overrides=cli_sets,
        config_path=str(user_cfg),
    )  # 加载并合并配置。
    convert = bundle.config["convert"]
    assert convert["xiaohe"] is True  # 环境变量覆盖默认值。
    assert convert["only"] is True  # CLI 覆盖生效。
    assert convert["initials"] is False  # --set 覆盖用户层。
    assert convert["scheme"] == "xiaohe"  # 内置方案名统一小写。
    assert bundle.config["log_level"] == "INFO"  # 日志等级统一大写。
    assert bundle.config["log_format"] == "human"  # CLI 覆盖环境变量。
    assert bundle.config["log_sample_rate"] == 0.5
    assert bundle.sources["convert"]["xiaohe"] == "env:PINYINIFY_CONVERT__XIAOHE"
    assert bundle.sources["convert"]["initials"] == "cli:set"


def test_profile_application_and_override() -> None:
    """验证 profile 预设能生效且后续 --set 可继续覆盖。"""  # 测试说明。
    bundle = load_and_merge_config(
        cli_set_overrides=parse_cli_set_items(["convert.only=true"]),
        profile_name="xiaohe-initials",
        environ={},
    )
    convert = bundle.config["convert"]
    assert convert["xiaohe"] is True
    assert convert["initials"] is True
    assert convert["only"] is True
    assert bundle.config["meta"]["profile"] == "xiaohe-initials"  # meta 中记录生效的 profile 名称。
    assert bundle.sources["meta"]["profile"] == "profile:xiaohe-initials"


def test_unknown_profile() -> None:
    with pytest.raises(ConfigError) as exc:
        load_and_merge_config(profile_name="wubi", environ={})
    assert "Available" in str(exc.value)


def test_env_file_support(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """验证同目录 .env 会被解析并应用。"""  # 测试说明。
    config_dir = tmp_path / "cfg"  # 创建配置目录。
    config_dir.mkdir()  # 创建目录。
    user_cfg = config_dir / "user.yaml"  # 用户配置路径。
    _write_yaml(user_cfg, "convert:\n  only: false\n")  # 写入最简配置。
    env_file = config_dir / ".env"  # 同目录 .env。
    env_file.write_text("PINYINIFY_CONVERT__INITIALS='true'\n# comment\n", encoding="utf-8")
    monkeypatch.delenv("PINYINIFY_CONVERT__INITIALS", raising=False)  # 确保真实环境中无同名变量。
    bundle = load_and_merge_config(config_path=str(user_cfg))  # 加载配置。
    assert bundle.config["convert"]["initials"] is True  # .env 覆盖生效。


def test_table_source_requires_table_file(table_file: Path) -> None:
    """source=table 时必须提供读音表，错误消息包含来源层。"""
    with pytest.raises(ConfigError) as exc:
        load_and_merge_config(cli_overrides={"convert": {"source": "table"}}, environ={})
    assert "convert.table_file" in str(exc.value)
    bundle = load_and_merge_config(
        cli_overrides={"convert": {"source": "TABLE", "table_file": str(table_file)}},
        environ={},
    )
    assert bundle.config["convert"]["source"] == "table"


@pytest.mark.parametrize(
    ("items", "field"),
    [
        (["convert.source=opencc"], "convert.source"),
        (["convert.initials=maybe"], "convert.initials"),
        (["log_format=xml"], "log_format"),
        (["log_level=loud"], "log_level"),
    ],
)
def test_validation_failure(items: list[str], field: str) -> None:
    """非法取值应抛出 ConfigError 并包含字段与来源信息。"""  # 测试说明。
    with pytest.raises(ConfigError) as exc:  # 期待抛出配置异常。
        load_and_merge_config(cli_set_overrides=parse_cli_set_items(items), environ={})
    assert field in str(exc.value)  # 异常消息包含字段名。
    assert "source=cli:set" in str(exc.value)


def test_invalid_set_item() -> None:
    with pytest.raises(ConfigError):
        parse_cli_set_items(["convert.initials"])


def test_missing_or_broken_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_and_merge_config(config_path=str(tmp_path / "absent.yaml"), environ={})
    broken = tmp_path / "broken.yaml"
    _write_yaml(broken, "convert: [oops\n")
    with pytest.raises(ConfigError):
        load_and_merge_config(config_path=str(broken), environ={})


def test_scheme_path_is_kept_as_path(tmp_path: Path) -> None:
    scheme_path = tmp_path / "Layouts" / "Custom.yaml"
    bundle = load_and_merge_config(cli_overrides={"convert": {"scheme": str(scheme_path)}}, environ={})
    assert bundle.config["convert"]["scheme"] == str(scheme_path)  # 路径不做大小写转换。


def test_verbose_forces_debug() -> None:
    bundle = load_and_merge_config(cli_overrides={"verbose": True}, environ={})
    assert bundle.config["log_level"] == "DEBUG"


def test_render_and_save_snapshot(tmp_path: Path) -> None:
    """render_effective_config 与 save_config 应生成 YAML 文本。"""  # 测试说明。
    bundle = load_and_merge_config(profile_name="xiaohe", environ={})  # 选择 xiaohe profile。
    snapshot = render_effective_config(bundle, include_sources=True)  # 渲染配置。
    assert "xiaohe: true  # profile:xiaohe" in snapshot  # 输出附带来源注释。
    assert "..." not in snapshot
    target_path = tmp_path / "snapshot.yaml"  # 快照文件路径。
    save_config(bundle, target_path)  # 保存配置快照。
    saved_text = target_path.read_text(encoding="utf-8")  # 读取文件内容。
    assert "profile" in saved_text  # 保存的文件同样包含 profile 字段。


def test_deep_merge_dicts_keeps_inputs() -> None:
    base = {"convert": {"initials": False, "source": "pypinyin"}}
    merged = deep_merge_dicts(base, {"convert": {"initials": True, "table_file": None}})
    assert merged == {"convert": {"initials": True, "source": "pypinyin", "table_file": None}}
    assert base["convert"]["initials"] is False
