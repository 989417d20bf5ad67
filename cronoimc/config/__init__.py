"""Configuration helpers for the stopwatch/BMI application."""

from .settings import AppConfig, load_config  # noqa: F401

__all__ = ["AppConfig", "load_config"]
