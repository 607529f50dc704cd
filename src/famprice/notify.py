"""ユーザーへの通知（トースト・確認・エラー表示）"""

import sys
from typing import Callable, Optional, Protocol, TextIO


class Notifier(Protocol):
    def toast(self, message: str) -> None:
        """短いメッセージ（約2秒表示）"""
        ...

    def confirm(self, message: str) -> bool:
        ...

    def alert(self, message: str) -> None:
        """詳細なエラー表示"""
        ...


class ConsoleNotifier:
    """端末向けの通知"""

    def __init__(
        self,
        assume_yes: bool = False,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        ask: Callable[[str], str] = input,
    ):
        self.assume_yes = assume_yes
        self.out = out
        self.err = err
        self._ask = ask

    def toast(self, message: str) -> None:
        print(message, file=self.out or sys.stdout)

    def confirm(self, message: str) -> bool:
        print(message, file=self.out or sys.stdout)
        if self.assume_yes:
            return True
        try:
            answer = self._ask("[y/N]: ")
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")

    def alert(self, message: str) -> None:
        print(message, file=self.err or sys.stderr)
