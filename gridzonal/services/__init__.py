"""
Services Package - End-to-end pipelines.

Exports:
    extract_gridded: Vector regions + NetCDF variable -> OutputTable (+ CSV)
"""

from .zonal_extraction import extract_gridded

__all__ = ['extract_gridded']
