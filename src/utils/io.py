"""提供跨平台的 I/O 工具，包括文本流打开、原子写入与文件锁。"""  # 模块说明。
# 导入 json 以支持 JSON 序列化。
import json
# 导入 os 模块以执行文件系统操作与原子替换。
import os
# 导入 stat 用于设置锁文件权限（可选优化）。
import stat
# 导入 sys 以访问标准输入输出。
import sys
# 导入 time 以在等待文件锁时休眠与处理超时逻辑。
import time
# 导入 contextlib.contextmanager 以实现 with 语句上下文管理器。
from contextlib import contextmanager
# 导入 pathlib.Path 统一处理路径对象。
from pathlib import Path
# 导入 typing 以进行类型注释。
from typing import IO, Iterator, TextIO

# POSIX 平台使用 fcntl.flock，其余平台退化为 O_EXCL 锁文件。
try:
    import fcntl  # type: ignore
except ImportError:
    fcntl = None

# 定义安全创建目录的函数，确保重复调用也不会抛异常。
def safe_mkdirs(path: str | os.PathLike[str]) -> None:
    """创建目标目录及其父级目录，目录已存在时静默跳过。"""  # 函数说明。
    # 将输入路径转换为 Path 对象以便后续调用 mkdir。
    target = Path(path)
    # 调用 mkdir 并启用 parents/exist_ok，保证并发场景也安全。
    target.mkdir(parents=True, exist_ok=True)

# 定义以原子方式写入文本的函数。
def atomic_write_text(path: str | os.PathLike[str], text: str) -> None:
    """通过临时文件写入文本内容，并以原子方式替换目标文件。"""  # 函数说明。
    # 将目标路径转换为 Path 对象，便于处理父目录与临时文件。
    target_path = Path(path)
    # 获取父目录并确保其存在。
    parent_dir = target_path.parent
    safe_mkdirs(parent_dir)
    # 构造临时文件路径，追加 .tmp 后缀以便后续清理。
    tmp_path = target_path.with_name(f"{target_path.name}.tmp")
    # 使用 try/finally 确保临时文件在异常时被删除。
    try:
        # 以 UTF-8 打开临时文件并写入完整文本。
        with open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(text)
        # 调用 atomic_replace 将临时文件原子替换为目标文件。
        atomic_replace(tmp_path, target_path)
    finally:
        # 如果临时文件仍然存在（替换失败），进行清理。
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


# 定义原子替换函数，封装 os.replace 并确保目录存在。
def atomic_replace(tmp_path: str | os.PathLike[str], final_path: str | os.PathLike[str]) -> None:
    """使用 os.replace 将临时文件移动到目标位置，确保父目录存在。"""  # 函数说明。
    # 将输入转换为 Path 对象。
    tmp = Path(tmp_path)
    final = Path(final_path)
    # 在替换前确保目标父目录存在。
    safe_mkdirs(final.parent)
    # 调用 os.replace 完成原子替换，可覆盖旧文件。
    os.replace(tmp, final)


# 定义文件锁上下文管理器，日志与指标追加写入共用。
@contextmanager
def with_file_lock(lock_path: str | os.PathLike[str], timeout_sec: float) -> Iterator[None]:
    """在指定路径获取独占锁，超时则抛出 TimeoutError；退出时释放并删除锁文件。"""  # 函数说明。
    path = Path(lock_path)
    safe_mkdirs(path.parent)
    deadline = time.monotonic() + timeout_sec
    while True:
        if fcntl is not None:
            # POSIX：flock 非阻塞独占锁。
            fd = os.open(path, os.O_RDWR | os.O_CREAT, stat.S_IRUSR | stat.S_IWUSR)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                os.close(fd)
        else:
            # 其他平台：以 O_EXCL 创建锁文件。
            try:
                fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
                break
            except FileExistsError:
                pass
        if time.monotonic() >= deadline:
            raise TimeoutError(f"Timed out acquiring lock: {path}")
        time.sleep(0.05)
    try:
        yield
    finally:
        try:
            if fcntl is not None:
                fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)
        finally:
            path.unlink(missing_ok=True)


# 定义追加 JSON 行到 JSONL 文件的函数。
def jsonl_append(path: str | os.PathLike[str], record: dict, *, force_flush: bool = False) -> None:
    """在文件锁保护下向 JSONL 文件追加一行记录。"""  # 函数说明。
    # 将路径转换为 Path 对象并确保父目录存在。
    target = Path(path)
    safe_mkdirs(target.parent)
    # 为 JSONL 文件单独创建锁文件避免并发写入。
    lock_path = target.with_suffix(target.suffix + ".lock")
    with with_file_lock(lock_path, timeout_sec=30):
        with target.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")
            if force_flush:
                handle.flush()
                os.fsync(handle.fileno())


@contextmanager
def open_input(path: str | None, fallback: IO | None = None) -> Iterator[IO]:
    """以二进制方式打开输入，由读取循环逐行解码；未指定路径时使用 fallback（默认标准输入的底层缓冲），且不关闭它。"""  # 函数说明。
    if not path or path == "-":
        # 标准输入由进程持有，仅借用不关闭。
        yield fallback if fallback is not None else sys.stdin.buffer
        return
    # 按字节读取，非法 UTF-8 只影响所在的那一行。
    with open(path, "rb") as handle:
        yield handle


@contextmanager
def open_text_output(path: str | None, fallback: TextIO | None = None) -> Iterator[TextIO]:
    """打开 UTF-8 文本输出；未指定路径时使用 fallback（默认标准输出），且不关闭它。"""  # 函数说明。
    if not path or path == "-":
        yield fallback if fallback is not None else sys.stdout
        return
    target = Path(path)
    safe_mkdirs(target.parent)
    with target.open("w", encoding="utf-8", newline="\n") as handle:
        yield handle
