"""
Dash host: renders a TableView and wires user input back into the engine
"""

from .dash_app import create_dash_app

__all__ = ["create_dash_app"]
