"""UI package for Crypto Wallet: main window, tabs, and dialogs."""

__all__ = ["WalletApp"]


def __getattr__(name: str):
    """Lazy-load WalletApp so ui.utils can be used without GUI deps."""
    if name == "WalletApp":
        from crypto_wallet.ui.main_window import WalletApp
        return WalletApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
