"""Volta Lab: voltaic pile vs. lithium-ion cell simulation engine."""

__version__ = "0.1.0"
