"""Workflow orchestration for indexing, upserting, and campaign dispatch."""

from .service import SyncPipeline, classify, log_summary

__all__ = ["SyncPipeline", "classify", "log_summary"]
