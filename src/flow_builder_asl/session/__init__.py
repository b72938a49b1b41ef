"""
Session package holding the editable graph of a Flow Builder session.
"""

from .flow_session import ExportStrategy, FlowSession, SessionStatus

__all__ = ["FlowSession", "ExportStrategy", "SessionStatus"]
