"""Glossary formatters."""
from .plain_formatter import PlainFormatter
from .emphasized_formatter import EmphasizedFormatter
from .renderer import render

__all__ = ["PlainFormatter", "EmphasizedFormatter", "render"]
