"""
Top-level package for the dynamic data table engine.

This package exposes the filtering/searching/sorting engine and a thin host.
Most code should import from submodules such as:
    dyn_table.core
    dyn_table.config
    dyn_table.services
    dyn_table.ui
"""

__all__: list[str] = []
