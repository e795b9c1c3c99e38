"""asciimap - Terminal point density maps from delimited latitude/longitude files"""

__version__ = "0.1.0"
__description__ = "Two-pass ASCII density map plotter for latitude/longitude data files"

from .main import main

__all__ = ['main']
