"""统一异常体系

所有业务异常继承 CargoCacheError，替代散落的 ValueError / RuntimeError。
服务层在边界处统一捕获并降级为警告，CLI 层据此输出友好提示，
缓存失败永远不会让外层构建失败。
"""

from __future__ import annotations


class CargoCacheError(Exception):
    """cargocache 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(CargoCacheError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ExecutionError(CargoCacheError):
    """子进程执行失败（非零退出码或无法启动）"""

    code = "EXECUTION_ERROR"


class ToolchainError(CargoCacheError):
    """无法确定工具链身份（rustc -vV 缺少必需字段）"""

    code = "TOOLCHAIN_ERROR"


class MetadataError(CargoCacheError):
    """cargo metadata 输出无法解析"""

    code = "METADATA_ERROR"


class FingerprintError(CargoCacheError):
    """内容指纹计算失败（匹配文件不可读）"""

    code = "FINGERPRINT_ERROR"


class StoreError(CargoCacheError):
    """缓存存储读写失败"""

    code = "STORE_ERROR"


class DependencyError(CargoCacheError):
    """依赖版本解析失败"""

    code = "DEPENDENCY_ERROR"


class ValidationError(CargoCacheError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"
