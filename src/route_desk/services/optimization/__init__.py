"""Optimization service client."""

from .client import OptimizationClient

__all__ = ["OptimizationClient"]
