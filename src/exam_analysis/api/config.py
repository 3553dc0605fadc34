from pydantic_settings import BaseSettings

EXAM_ANALYSIS_ENV_PREFIX = "EXAM_ANALYSIS_"


class ApiSettings(BaseSettings):
    model_config = {"env_prefix": EXAM_ANALYSIS_ENV_PREFIX}

    max_students: int = 5000
    max_questions: int = 500
    max_variants: int = 50
    max_pairs: int = 500_000
    host: str = "127.0.0.1"
    port: int = 8000
