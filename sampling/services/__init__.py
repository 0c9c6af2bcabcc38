"""服务层"""

from .sampling_service import SamplingService

__all__ = ["SamplingService"]
