"""Core domain layer - entities, interfaces, services and exceptions."""

from batchstock.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
