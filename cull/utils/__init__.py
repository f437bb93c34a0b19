"""
Utilities package for Cull.

Provides:
- formatters: Human-readable formatting for numbers, time, sizes and similarity
- validators: Input validation for scan parameters
- selection: Strategies for marking duplicates for removal
- exporters: Export duplicate results to files
"""

from __future__ import annotations

# Import submodules for convenient access
from . import formatters
from . import validators
from . import selection
from . import exporters

# Export commonly used functions and classes
from .formatters import format_number, format_time_estimate, format_size, format_similarity
from .validators import (
    validate_directory,
    validate_threshold,
    validate_mode,
    validate_scan_params,
)
from .selection import (
    SelectionStrategy,
    apply_selection_strategy,
    choose_keeper,
    select_all_but_keeper,
    toggle_selection,
)
from .exporters import EXPORT_FORMATS, export_results

__all__ = [
    # Submodules
    'formatters',
    'validators',
    'selection',
    'exporters',
    # Formatters
    'format_number',
    'format_time_estimate',
    'format_size',
    'format_similarity',
    # Validators
    'validate_directory',
    'validate_threshold',
    'validate_mode',
    'validate_scan_params',
    # Selection
    'SelectionStrategy',
    'apply_selection_strategy',
    'choose_keeper',
    'select_all_but_keeper',
    'toggle_selection',
    # Exporters
    'EXPORT_FORMATS',
    'export_results',
]
