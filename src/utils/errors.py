"""定义转写流程使用的错误类型与分类辅助函数。"""  # 模块说明。
# 导入 errno 以识别常见的 I/O 错误码。
import errno


class PinyinifyError(Exception):
    """项目内所有自定义异常的基类。"""  # 类说明。


# 定义不可重试错误类型，表示应立即放弃的致命故障。
class NonRetryableError(PinyinifyError):
    """表示无需重试的致命错误，例如配置或依赖缺失。"""  # 类说明。


class InputReadError(PinyinifyError):
    """读取输入流失败时抛出，包装底层异常与失败行号。"""  # 类说明。

    def __init__(self, message: str, line_number: int = 0) -> None:
        super().__init__(message)
        self.line_number = line_number  # 读取失败的行号（从 1 开始）。


class SourceUnavailableError(NonRetryableError):
    """音节来源后端无法初始化（通常是依赖库未安装）。"""  # 类说明。


class SchemeError(NonRetryableError):
    """双拼方案文件缺失、格式错误或未通过校验。"""  # 类说明。


# 定义读取异常分类函数，用于在日志中标注失败类型。
def classify_read_error(exc: BaseException) -> str:
    """根据异常类型返回 decode/io/end-of-stream/unknown 标签。"""  # 函数说明。
    # 输入不是合法 UTF-8。
    if isinstance(exc, UnicodeDecodeError):
        return "decode"
    # 对端提前关闭或流已耗尽。
    if isinstance(exc, (EOFError, BrokenPipeError)):
        return "end-of-stream"
    if isinstance(exc, OSError):
        if exc.errno in {errno.EPIPE, errno.ECONNRESET}:
            return "end-of-stream"
        return "io"
    # 无法识别的异常返回 unknown，交由上层决定处理策略。
    return "unknown"
