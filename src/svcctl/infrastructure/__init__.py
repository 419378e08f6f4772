"""Infrastructure layer: command execution, health checks, package mapping.

This layer depends on stdlib, httpx and the domain models only.
It must never import from strategies, detectors, services, commands, or output.
"""
