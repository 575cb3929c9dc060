from .formatter import (
    MONTH_NAMES,
    extract_year,
    format_date,
    format_marriage_year,
    infer_century,
)

__all__ = [
    "MONTH_NAMES",
    "extract_year",
    "format_date",
    "format_marriage_year",
    "infer_century",
]
