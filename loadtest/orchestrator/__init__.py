"""Orchestrator module."""

from .scheduler import IOrchestrator, Orchestrator, WorkloadFactory

__all__ = ["IOrchestrator", "Orchestrator", "WorkloadFactory"]
