"""cargocache - Cargo 构建 CI 缓存（键指纹 + 缓存裁剪）"""

__version__ = "0.3.0"
