import pytest

from exam_analysis.analysis.config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_MIN_SAMPLE_SIZE,
    AnalysisConfig,
)


class TestAnalysisConfig:
    def test_defaults(self) -> None:
        """Defaults match the module constants."""
        config = AnalysisConfig()
        assert config.min_sample_size == DEFAULT_MIN_SAMPLE_SIZE
        assert config.confidence_level == DEFAULT_CONFIDENCE_LEVEL
        assert not config.exclude_incomplete_data
        assert config.include_distractor_analysis
        assert config.group_fraction == pytest.approx(0.27)

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"min_sample_size": 0}, "min_sample_size"),
            ({"confidence_level": 1.0}, "confidence_level"),
            ({"confidence_level": 0.0}, "confidence_level"),
            ({"group_fraction": 0.6}, "group_fraction"),
            ({"group_fraction": 0.0}, "group_fraction"),
        ],
    )
    def test_invalid(self, kwargs: dict[str, float], message: str) -> None:
        """Out-of-range settings are rejected at construction."""
        with pytest.raises(ValueError, match=message):
            AnalysisConfig(**kwargs)  # type: ignore[arg-type]
