"""HTTP トランスポート層。"""

from .app import create_app

__all__ = ["create_app"]
