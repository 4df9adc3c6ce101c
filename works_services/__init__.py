"""
Works Services - orchestration over the kernel and engines.

The command facade is the only component the presentation layer talks to.
"""

from works_services.command_facade import WorkflowCommandFacade

__all__ = ["WorkflowCommandFacade"]
