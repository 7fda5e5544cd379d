"""Configuration system for Keel Core.

This module provides Pydantic Settings-based configuration with environment
variable support. The statutory rates in :mod:`keel_core.rates` are the
defaults; every one of them can be overridden per deployment.

Usage:
    from keel_core.config import load_config

    # Load from environment variables and .env file
    config = load_config()
    config.configure_logging()

    calculator = SCorpTaxCalculator(rates=config.rates)
"""

import logging
from decimal import Decimal
from typing import Any

import structlog
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .rates import (
    EMPLOYEE_FICA_RATE,
    EMPLOYER_FICA_RATE,
    FEDERAL_INCOME_RATE,
    HOME_OFFICE_MAX_SQFT,
    HOME_OFFICE_RATE_PER_SQFT,
    MEALS_DEDUCTION_RATE,
    MILEAGE_RATE,
    STATE_INCOME_RATE,
)


class TaxRates(BaseSettings):
    """Tax and deduction rates used by the calculators.

    Environment Variables:
        KEEL_TAX_EMPLOYER_FICA_RATE: Employer share of FICA (default 0.0765)
        KEEL_TAX_EMPLOYEE_FICA_RATE: Employee share of FICA (default 0.0765)
        KEEL_TAX_FEDERAL_INCOME_RATE: Flat federal income rate (default 0.22)
        KEEL_TAX_STATE_INCOME_RATE: Flat state income rate (default 0.0575)
        KEEL_TAX_HOME_OFFICE_RATE_PER_SQFT: Simplified method rate (default 5)
        KEEL_TAX_HOME_OFFICE_MAX_SQFT: Simplified method cap (default 300)
        KEEL_TAX_MILEAGE_RATE: Dollars per business mile (default 0.67)
        KEEL_TAX_MEALS_DEDUCTION_RATE: Deductible share of meals (default 0.5)
    """

    model_config = SettingsConfigDict(
        env_prefix="KEEL_TAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    employer_fica_rate: Decimal = Field(
        default=EMPLOYER_FICA_RATE,
        ge=0,
        le=1,
        description="Employer FICA rate applied to FICA-taxable salary",
    )
    employee_fica_rate: Decimal = Field(
        default=EMPLOYEE_FICA_RATE,
        ge=0,
        le=1,
        description="Employee FICA rate applied to FICA-taxable salary",
    )
    federal_income_rate: Decimal = Field(
        default=FEDERAL_INCOME_RATE,
        ge=0,
        le=1,
        description="Federal income tax rate on taxable income",
    )
    state_income_rate: Decimal = Field(
        default=STATE_INCOME_RATE,
        ge=0,
        le=1,
        description="State income tax rate on taxable income",
    )
    home_office_rate_per_sqft: Decimal = Field(
        default=HOME_OFFICE_RATE_PER_SQFT,
        ge=0,
        description="Home office deduction per square foot",
    )
    home_office_max_sqft: Decimal = Field(
        default=HOME_OFFICE_MAX_SQFT,
        ge=0,
        description="Maximum square footage eligible for the home office deduction",
    )
    mileage_rate: Decimal = Field(
        default=MILEAGE_RATE,
        ge=0,
        description="Deduction per business mile",
    )
    meals_deduction_rate: Decimal = Field(
        default=MEALS_DEDUCTION_RATE,
        ge=0,
        le=1,
        description="Deductible share of business and travel meals",
    )

    @classmethod
    def defaults(cls) -> "TaxRates":
        """Statutory rates, without consulting the environment."""
        return cls.model_construct()


class KeelConfig(BaseSettings):
    """Root configuration for Keel Core.

    Environment Variables:
        KEEL_ENV: Environment name (development, staging, production, test)
        KEEL_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Example:
        config = KeelConfig(rates=TaxRates(state_income_rate="0.05"))
        if config.is_debug:
            print(config.rates.state_income_rate)
    """

    model_config = SettingsConfigDict(
        env_prefix="KEEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    rates: TaxRates = Field(default_factory=TaxRates)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        """Check if calculation steps will be logged."""
        return self.log_level == "DEBUG"

    def configure_logging(self) -> None:
        """Filter structlog output below the configured level."""
        level = logging.getLevelName(self.log_level)
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(level),
        )


def load_config(**overrides: Any) -> KeelConfig:
    """Load configuration from the environment, applying keyword overrides.

    Raises:
        ConfigurationError: If any setting fails validation.
    """
    try:
        return KeelConfig(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        config_key = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            config_key=config_key or None,
            expected=first.get("type"),
            actual=first.get("input"),
            details={"error_count": e.error_count()},
        ) from e


__all__ = [
    "TaxRates",
    "KeelConfig",
    "load_config",
]
