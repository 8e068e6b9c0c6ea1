"""
Comptara - Source Package

Offline-first blockchain accounting backend: journal entries and payments
recorded against a hosted data service, anchored on an EVM ledger through
a wallet provider, and audited with a hosted LLM.

DESIGN PRINCIPLES:
1. Writes are never lost: offline or failed writes are queued locally
2. The remote service is authoritative; a refetch is the only reconciliation
3. Session state is explicit and injected, never global
4. Every step is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Comptara Team"
