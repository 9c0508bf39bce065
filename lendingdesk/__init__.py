"""Lending back-office building blocks: loan and investment rules, storage, mail and Flask helpers."""

__version__ = "0.1.0"