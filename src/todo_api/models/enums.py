"""领域枚举定义。"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态，任意状态之间均可直接切换。"""

    PENDING = "pending"  # 新建任务的初始状态。
    IN_PROGRESS = "in-progress"  # 处理中。
    FAILED = "failed"  # 未能在截止时间前完成。
    COMPLETED = "completed"  # 已完成。
