"""
Stub采样策略
不访问任何后端，返回固定响应，用于本地联调与测试
"""

from typing import Any, Optional

from ..base import BaseSamplingStrategy, SamplingRequest, SamplingResult

STUB_MODEL = "stub-model"
STUB_RESPONSE = "This is a stub response."


class StubStrategy(BaseSamplingStrategy):
    """固定响应策略"""

    def __init__(self, config: Optional[dict[str, Any]] = None):
        super().__init__("stub")
        self.config = config or {}

    async def handle_sampling_request(self, request: SamplingRequest) -> SamplingResult:
        return SamplingResult(model=STUB_MODEL, text=STUB_RESPONSE, stop_reason="endTurn")
