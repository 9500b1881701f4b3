"""
资源ID生成模块

资源ID格式为 `<kind>-<n>`，n 为雪花算法生成的整数：
- 41位时间戳（毫秒，相对 EPOCH）
- 10位机器ID
- 12位毫秒内序列号

同一进程内同一毫秒生成的ID不会重复。
"""

import threading
import time
from typing import Optional


class SnowflakeGenerator:
    """雪花算法ID生成器"""

    # 2024-01-01 00:00:00 UTC
    EPOCH = 1704067200000

    MACHINE_ID_BITS = 10
    SEQUENCE_BITS = 12

    MAX_MACHINE_ID = (1 << MACHINE_ID_BITS) - 1
    MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1

    MACHINE_ID_SHIFT = SEQUENCE_BITS
    TIMESTAMP_SHIFT = MACHINE_ID_BITS + SEQUENCE_BITS

    def __init__(self, machine_id: int = 1):
        if machine_id < 0 or machine_id > self.MAX_MACHINE_ID:
            raise ValueError(f"machine id must be between 0 and {self.MAX_MACHINE_ID}")

        self.machine_id = machine_id
        self.sequence = 0
        self.last_timestamp = -1
        self.lock = threading.Lock()

    @staticmethod
    def _now_millis() -> int:
        return int(time.time() * 1000)

    def _wait_next_millis(self, last_timestamp: int) -> int:
        timestamp = self._now_millis()
        while timestamp <= last_timestamp:
            timestamp = self._now_millis()
        return timestamp

    def next_id(self) -> int:
        """生成下一个整数ID"""
        with self.lock:
            timestamp = self._now_millis()

            # 时钟回拨时沿用上次时间戳，靠序列号保证唯一
            if timestamp < self.last_timestamp:
                timestamp = self.last_timestamp

            if timestamp == self.last_timestamp:
                self.sequence = (self.sequence + 1) & self.MAX_SEQUENCE
                if self.sequence == 0:
                    timestamp = self._wait_next_millis(self.last_timestamp)
            else:
                self.sequence = 0

            self.last_timestamp = timestamp

            return (
                ((timestamp - self.EPOCH) << self.TIMESTAMP_SHIFT)
                | (self.machine_id << self.MACHINE_ID_SHIFT)
                | self.sequence
            )


_generator: Optional[SnowflakeGenerator] = None


def init_snowflake(machine_id: int = 1):
    """初始化全局生成器，machine_id 范围 0-1023"""
    global _generator
    _generator = SnowflakeGenerator(machine_id)


def generate_resource_id(kind: str) -> str:
    """生成 `<kind>-<n>` 形式的资源ID"""
    if _generator is None:
        init_snowflake()
    return f"{kind}-{_generator.next_id()}"


def generate_user_id() -> str:
    return generate_resource_id("user")


def generate_project_id() -> str:
    return generate_resource_id("project")


def generate_issue_id() -> str:
    return generate_resource_id("issue")


def generate_comment_id() -> str:
    return generate_resource_id("comment")


def generate_sprint_id() -> str:
    return generate_resource_id("sprint")


def generate_epic_id() -> str:
    return generate_resource_id("epic")
