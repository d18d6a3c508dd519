"""统一异常体系

所有业务异常继承 ClibError，替代散落的 ValueError / RuntimeError。
CLI 层可据此输出友好提示，安装器据此把单个依赖的失败记录到汇总报告。
"""

from __future__ import annotations


class ClibError(Exception):
    """包管理基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(ClibError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(ClibError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ParseError(ClibError):
    """slug 或 package.json 描述文件无法解析"""

    code = "PARSE_ERROR"


class NetworkError(ClibError):
    """HTTP 请求失败或返回非成功状态"""

    code = "NETWORK_ERROR"

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class FilesystemError(ClibError):
    """目录创建或文件写入失败"""

    code = "FILESYSTEM_ERROR"


class ResolutionError(ClibError):
    """slug 远程解析失败，step 标明失败的步骤"""

    code = "RESOLUTION_ERROR"

    def __init__(
        self, message: str, *, step: str, cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.cause = cause


class FetchError(ClibError):
    """单个源文件拉取失败"""

    code = "FETCH_ERROR"

    def __init__(
        self, message: str, *, path: str = "", cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class InstallError(ClibError):
    """包安装过程中的致命错误"""

    code = "INSTALL_ERROR"

    def __init__(
        self, message: str, *, package: str = "", cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.package = package
        self.cause = cause
