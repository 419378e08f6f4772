"""Service layer: operations returning ServiceResult.

Services may import from domain, infrastructure, strategies, detectors and
dependencies. They must never import from commands or output.
"""
