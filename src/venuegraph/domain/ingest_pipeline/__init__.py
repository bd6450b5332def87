"""Venue ingestion pipeline.

The pipeline is an ordered, static list of stages. Each stage is a function
of the run context: it receives an :class:`~.context.IngestionContext` and
returns a new one. The driver in :mod:`.orchestrator` threads the context
through the stages and owns the lifecycle of shared resources; the stage list
itself is assembled in :mod:`.runner`.
"""
