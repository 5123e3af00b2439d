from pydantic import Field
from pydantic_settings import BaseSettings

from commandgate.commands.suggestions import DEFAULT_INPUT_CUTOFF, SuggestionAccuracy


class GateSettings(BaseSettings):
    command_prefix: str = Field(default="!", description="Prefix for text commands")
    environment: str = Field(default="development", description="Environment")
    log_level: str = Field(default="INFO", description="Logging level")

    ignore_bot_authors: bool = Field(default=True, description="Drop messages sent by bots")

    # Command suggestions
    enable_command_suggestions: bool = Field(default=True, description="Suggest near-miss names for unknown commands")
    suggestion_accuracy: SuggestionAccuracy = Field(
        default=SuggestionAccuracy.BALANCED, description="How far a suggestion may be from the input"
    )
    suggestion_max_results: int | None = Field(default=5, description="Maximum number of suggestions")
    suggestion_input_cutoff: int = Field(
        default=DEFAULT_INPUT_CUTOFF, description="Inputs longer than this never get suggestions"
    )

    class Config:
        env_prefix = "GATE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = GateSettings()
