"""
PayMe connector: wire shapes, status mapping and response resolution.
"""
from infrastructure.external.payments.payme.resolver import PaymeResponseResolver

__all__ = ["PaymeResponseResolver"]
