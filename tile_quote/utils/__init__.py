from .logger import setup_logging
from .numbers import coerce_number, coerce_optional_number, coerce_flag, finite_or_zero, round2

__all__ = ["setup_logging", "coerce_number", "coerce_optional_number", "coerce_flag",
           "finite_or_zero", "round2"]
