"""本地口令门：匹配后在本机记住解锁状态，直到显式锁定。

这只是界面层面的便利，并不构成访问控制；需要真正的权限校验时应使用服务端凭证。
"""

from __future__ import annotations

import hmac
import logging
from pathlib import Path
from typing import Optional

from .config import GateConfig

logger = logging.getLogger(__name__)

_UNLOCKED_FLAG = "true"


class SessionGate:
    """共享口令比对与本地解锁标记。"""

    def __init__(self, passphrase: Optional[str], state_path: Path | str) -> None:
        self._passphrase = passphrase or None
        self._state_path = Path(state_path)

    @classmethod
    def from_config(cls, config: GateConfig) -> "SessionGate":
        return cls(config.passphrase, config.state_path)

    @property
    def enabled(self) -> bool:
        return self._passphrase is not None

    def is_unlocked(self) -> bool:
        """未配置口令时始终视为已解锁。"""
        if not self.enabled:
            return True
        try:
            return self._state_path.read_text(encoding="utf-8").strip() == _UNLOCKED_FLAG
        except FileNotFoundError:
            return False

    def unlock(self, candidate: str) -> bool:
        """
        功能说明:
            比对口令，匹配时写入解锁标记。
        参数:
            candidate (str): 用户输入的口令。
        返回:
            bool: 是否解锁成功。
        """
        if not self.enabled:
            return True
        matched = hmac.compare_digest(
            candidate.encode("utf-8"),
            self._passphrase.encode("utf-8"),
        )
        if not matched:
            logger.warning("Incorrect passphrase")
            return False
        self._state_path.parent.mkdir(parents=True, exist_ok=True)
        self._state_path.write_text(_UNLOCKED_FLAG, encoding="utf-8")
        return True

    def lock(self) -> None:
        self._state_path.unlink(missing_ok=True)
