# exactgeo/config.py

"""
Kernel configuration.

Values are read from ``EXACTGEO_*`` environment variables (or a ``.env`` file)
through pydantic-settings. Usage::

    from exactgeo.config import settings

    settings.max_refinement_depth
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class KernelSettings(BaseSettings):
    """Tunables for the oracle engine and the API layer."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EXACTGEO_",
        extra="ignore",
    )

    max_refinement_depth: int = Field(64, ge=0, description="Refinement rounds before a sign is declared indeterminate.")
    initial_precision_bits: int = Field(16, ge=1, description="Bits of precision of a freshly created oracle interval.")
    precision_step_bits: int = Field(2, ge=1, description="Bits of precision added per refinement round.")
    log_level: str = Field("INFO", description="Log level applied by the API entry point.")

    def precision_bits(self, depth: int) -> int:
        return self.initial_precision_bits + depth * self.precision_step_bits


settings = KernelSettings()
