"""
系统时钟适配器 - 实现 ClockPort
"""

import time

from quantdesk.ports.interfaces import ClockPort


class SystemClockAdapter(ClockPort):
    """
    系统时钟适配器

    使用单调时钟，系统时间被调整时缓存过期判断不受影响。
    """

    def now(self) -> float:
        return time.monotonic()
