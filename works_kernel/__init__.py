"""
Works Kernel - capital-works proposal approval chain.

Routes proposals through the fixed chain of approving roles with:
- A single canonical state machine for approve / reject / forward
- Role-specific queues derived from one submission store
- Verification stamps that are never cleared once set
- Structured, partial-success results for bulk commands
"""

__version__ = "0.1.0"
