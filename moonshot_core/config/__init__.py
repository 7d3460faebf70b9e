"""配置加载：见 settings 模块。"""

from moonshot_core.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
