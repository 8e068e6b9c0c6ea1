"""
Session State

One Session is created per application session and passed by reference
to every component that needs the current identity or wallet. Nothing
in the sync subsystem reads identity from module-level state.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Session:
    """
    Current authenticated identity and connected wallet.

    Attributes:
        user_id: Authenticated principal; writes and reads are scoped to it
        wallet_address: Optional secondary scoping key from a connected wallet
        access_token: Bearer token of the hosted backend session, if any
    """

    user_id: Optional[str] = None
    wallet_address: Optional[str] = None
    access_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def sign_in(self, user_id: str, access_token: Optional[str] = None) -> None:
        self.user_id = user_id
        self.access_token = access_token

    def sign_out(self) -> None:
        self.user_id = None
        self.access_token = None
        self.wallet_address = None

    def connect_wallet(self, address: str) -> None:
        self.wallet_address = address

    def disconnect_wallet(self) -> None:
        self.wallet_address = None
