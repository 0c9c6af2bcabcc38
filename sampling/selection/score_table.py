"""
模型评分表
构造时一次性校验，之后不可变；其 id 集合即允许列表
"""

from dataclasses import asdict
from typing import Any, Iterable, Iterator, Optional

from ..config_models import ModelScoreConfig, validate_config
from ..exceptions import InvalidConfigurationError
from .types import ModelScore


class ModelScoreTable:
    """model id -> ModelScore，保持插入顺序"""

    def __init__(self, entries: Optional[Iterable[Any]] = None):
        scores: dict[str, ModelScore] = {}

        for index, entry in enumerate(entries or ()):
            config = self._validate_entry(entry, index)
            if config.id in scores:
                raise InvalidConfigurationError(
                    f"Duplicate model id in score table: {config.id}",
                    details={"model_id": config.id, "index": index},
                )
            scores[config.id] = ModelScore(
                id=config.id,
                speed_score=config.speed_score,
                intelligence_score=config.intelligence_score,
                cost_score=config.cost_score,
            )

        self._scores = scores

    @staticmethod
    def _validate_entry(entry: Any, index: int) -> ModelScoreConfig:
        if isinstance(entry, ModelScoreConfig):
            return entry
        if isinstance(entry, ModelScore):
            entry = asdict(entry)
        return validate_config(ModelScoreConfig, entry, f"model score #{index}")

    def get(self, model_id: str) -> Optional[ModelScore]:
        return self._scores.get(model_id)

    def ids(self) -> list[str]:
        return list(self._scores)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._scores

    def __iter__(self) -> Iterator[ModelScore]:
        return iter(self._scores.values())

    def __len__(self) -> int:
        return len(self._scores)

    def __repr__(self) -> str:
        return f"ModelScoreTable({self.ids()!r})"
