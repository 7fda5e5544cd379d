"""Keel Core - S-Corp tax calculations and what-if scenario projections."""

__version__ = "0.1.0"

from .calculator import SCorpTaxCalculator, build_tax_input, calculate_scorp_taxes
from .comparison import compare_scenarios
from .config import KeelConfig, TaxRates, load_config
from .deductions import calculate_deduction_totals
from .exceptions import ConfigurationError, KeelError, ScenarioConfigError
from .models import ScenarioOverlay, ScenarioResult, TaxCalculationResult
from .overlay import overlay_from_config, resolve_overlay
from .scenario import ScenarioCalculator, calculate_baseline, calculate_scenario

__all__ = [
    "SCorpTaxCalculator",
    "build_tax_input",
    "calculate_scorp_taxes",
    "calculate_deduction_totals",
    "ScenarioCalculator",
    "calculate_scenario",
    "calculate_baseline",
    "compare_scenarios",
    "overlay_from_config",
    "resolve_overlay",
    "ScenarioOverlay",
    "ScenarioResult",
    "TaxCalculationResult",
    "KeelConfig",
    "TaxRates",
    "load_config",
    "KeelError",
    "ConfigurationError",
    "ScenarioConfigError",
]
