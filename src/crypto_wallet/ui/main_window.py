"""Main application window for Crypto Wallet: market, portfolio, balance, trade, profile tabs."""

from __future__ import annotations

import logging
import threading
import tkinter as tk
from datetime import datetime
from tkinter import EW, W, messagebox, ttk
from typing import Any, Callable, Dict, List, Optional

import ttkbootstrap as tb
from ttkbootstrap.constants import DANGER, INFO, OUTLINE, PRIMARY, SUCCESS

from crypto_wallet import app as core
from crypto_wallet.models.core import CoinOption, PositionRecord, Profile
from crypto_wallet.services import storage
from crypto_wallet.services.errors import InvalidInputError, NotAuthenticatedError, WalletError
from crypto_wallet.services.forms import (
    build_buy_payload,
    build_sell_payload,
    validate_balance_amount,
)
from crypto_wallet.services.market import (
    coin_options,
    filter_coin_options,
    find_coin,
    holding_amount,
    idr_balance,
)
from crypto_wallet.services.portfolio import (
    REALIZED_LABEL,
    PnlMode,
    PositionsFeed,
    position_view,
    show_realized,
    summary_labels,
)
from crypto_wallet.theming.style import (
    BODY_FONT,
    PADDING,
    SPACING_MEDIUM,
    SUMMARY_LABEL_FONT,
    SUMMARY_VALUE_FONT,
    TEXT_MUTED,
    THEME_NAME,
    TITLE_FONT,
    setup_styles,
)
from crypto_wallet.ui import dialogs
from crypto_wallet.ui.utils import (
    avatar_initial,
    color_for_value,
    display_name,
    format_coin_amount,
    format_idr,
    format_market_cap,
    format_percent,
    format_signed_idr,
    resolve_avatar_url,
)

logger = logging.getLogger(__name__)

POSITION_COLUMNS = ("Symbol", "Amount", "Price", "Value", "P&L", "P&L %", "Avg Entry")
MARKET_COLUMNS = ("#", "Name", "Symbol", "Price", "24h %", "Market Cap")
TRADE_COLUMNS = ("Time", "Side", "Symbol", "Amount", "Price", "Notional")
TRANSACTION_COLUMNS = ("Time", "Type", "Amount", "Balance After")


def _format_timestamp(raw: Any) -> str:
    if not raw:
        return ""
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return str(raw)
    if parsed.tzinfo:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


class WalletApp(tb.Window):
    """Main application window for the wallet client."""

    def __init__(self):
        super().__init__(themename=THEME_NAME)
        self.title("Crypto Wallet")
        self.geometry("1100x760")
        self.minsize(900, 620)

        self.settings = storage.load_settings()
        self.client = core.build_client(self.settings)
        self.pnl_mode = core.selected_mode(self.settings)
        self.feed = PositionsFeed()
        self.coins: List[CoinOption] = []
        self.balances: List[Dict[str, Any]] = []
        self.holdings: List[Dict[str, Any]] = []
        self.profile: Optional[Profile] = None
        self._market_request = 0
        self._login_open = False

        setup_styles(self)
        self.create_menu_bar()
        self.create_widgets()
        self.load_market()

        if self.client.is_authenticated:
            self.refresh_account()
        else:
            self.after(100, self.prompt_login)

        # Periodic market update (every 5 minutes)
        self._market_refresh_interval_ms = 5 * 60 * 1000
        self.after(self._market_refresh_interval_ms, self._schedule_market_refresh)

    # --- Plumbing ---

    def run_in_background(
        self,
        work: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Optional[Callable[[WalletError], None]] = None,
    ) -> None:
        """Run work on a worker thread and hand its result back on the Tk thread."""
        handle_error = on_error or self.show_error

        def target():
            try:
                result = core.run_guarded(work)
            except WalletError as e:
                self.after(0, handle_error, e)
                return
            self.after(0, on_success, result)

        threading.Thread(target=target, daemon=True).start()

    def show_error(self, err: WalletError) -> None:
        if isinstance(err, InvalidInputError):
            dialogs.show_invalid_input(err, parent=self)
            return
        if core.handle_session_error(self.client, err):
            self.prompt_login(err.message)
            return
        messagebox.showerror("Error", err.message, parent=self)

    def prompt_login(self, message: Optional[str] = None) -> None:
        """Open the login dialog unless one is already showing."""
        if self._login_open:
            return
        self._login_open = True
        if message:
            messagebox.showwarning("Not authenticated", message, parent=self)
        dialog = dialogs.login_dialog(self)

        def closed(event):
            if event.widget is dialog:
                self._login_open = False

        dialog.bind("<Destroy>", closed, add="+")

    def _schedule_market_refresh(self):
        """Cron-like periodic refresh of market prices."""
        self.load_market()
        self.after(self._market_refresh_interval_ms, self._schedule_market_refresh)

    def on_authenticated(self) -> None:
        self.refresh_account()

    def refresh_account(self) -> None:
        """Reload everything that needs a token."""
        self.load_positions()
        self.load_balance()
        self.load_trading()
        self.load_profile()

    def logout(self) -> None:
        if not dialogs.confirm_logout(self):
            return
        core.logout(self.client)
        self.profile = None
        self.feed.complete(self.feed.begin(), [])
        self.render_portfolio()
        self.render_profile()
        self.prompt_login()

    # --- Layout ---

    def create_menu_bar(self):
        menubar = tk.Menu(self)
        self.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Log Out", command=self.logout)
        file_menu.add_separator()
        file_menu.add_command(label="Quit", command=self.quit)

        account_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Account", menu=account_menu)
        account_menu.add_command(label="Edit Profile...", command=lambda: dialogs.edit_profile_dialog(self))
        account_menu.add_command(label="Change Password...", command=lambda: dialogs.change_password_dialog(self))
        account_menu.add_command(label="Profile Picture...", command=lambda: dialogs.upload_avatar_dialog(self))

        view_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="View", menu=view_menu)
        view_menu.add_command(label="Refresh", command=self.refresh_all)

        help_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Help", menu=help_menu)
        help_menu.add_command(label="About", command=lambda: dialogs.show_about(self))

    def create_widgets(self):
        self.tab_control = ttk.Notebook(self)
        self.tab_control.pack(fill="both", expand=True, padx=PADDING, pady=PADDING)

        self.market_tab = tb.Frame(self.tab_control, padding=PADDING)
        self.portfolio_tab = tb.Frame(self.tab_control, padding=PADDING)
        self.balance_tab = tb.Frame(self.tab_control, padding=PADDING)
        self.trade_tab = tb.Frame(self.tab_control, padding=PADDING)
        self.profile_tab = tb.Frame(self.tab_control, padding=PADDING)
        self.tab_control.add(self.market_tab, text="Market")
        self.tab_control.add(self.portfolio_tab, text="Portfolio")
        self.tab_control.add(self.balance_tab, text="Balance")
        self.tab_control.add(self.trade_tab, text="Trade")
        self.tab_control.add(self.profile_tab, text="Profile")

        self._create_market_tab()
        self._create_portfolio_tab()
        self._create_balance_tab()
        self._create_trade_tab()
        self._create_profile_tab()

    def refresh_all(self):
        self.load_market()
        if self.client.is_authenticated:
            self.refresh_account()

    @staticmethod
    def _make_tree(parent, columns, height=12, style=None) -> ttk.Treeview:
        container = tb.Frame(parent)
        container.pack(fill="both", expand=True)
        kwargs = {"style": style} if style else {}
        tree = ttk.Treeview(container, columns=columns, show="headings", height=height, **kwargs)
        for col in columns:
            tree.heading(col, text=col)
            tree.column(col, width=110, anchor=tk.CENTER)
        vsb = ttk.Scrollbar(container, orient="vertical", command=tree.yview)
        tree.configure(yscrollcommand=vsb.set)
        tree.pack(side="left", fill="both", expand=True)
        vsb.pack(side="right", fill="y")
        tree.tag_configure("gain", foreground=color_for_value(1))
        tree.tag_configure("loss", foreground=color_for_value(-1))
        return tree

    # --- Market ---

    def _create_market_tab(self):
        header = tb.Frame(self.market_tab)
        header.pack(fill="x", pady=(0, SPACING_MEDIUM))
        tb.Label(header, text="Top Crypto", font=TITLE_FONT).pack(side="left")
        self.market_refresh_btn = tb.Button(
            header, text="Refresh prices", bootstyle=f"{INFO}-{OUTLINE}", command=self.refresh_market_prices
        )
        self.market_refresh_btn.pack(side="right")
        self.market_status = tb.Label(self.market_tab, text="", foreground=TEXT_MUTED, font=SUMMARY_LABEL_FONT)
        self.market_status.pack(anchor=W, pady=(0, SPACING_MEDIUM))
        self.market_tree = self._make_tree(self.market_tab, MARKET_COLUMNS, height=20)

    def load_market(self):
        self._market_request += 1
        request_id = self._market_request

        def done(result):
            if request_id != self._market_request:
                return
            self.coins = coin_options(result["data"])
            self.render_market(result.get("last_updated"))

        def failed(err: WalletError):
            if request_id == self._market_request:
                self.market_status.config(text=err.message)

        self.run_in_background(self.client.top_coins, done, failed)

    def refresh_market_prices(self):
        self.market_refresh_btn.config(state="disabled")

        def done(_):
            self.market_refresh_btn.config(state="normal")
            self.load_market()

        def failed(err: WalletError):
            self.market_refresh_btn.config(state="normal")
            messagebox.showerror("Error", err.message, parent=self)

        self.run_in_background(self.client.refresh_prices, done, failed)

    def render_market(self, last_updated: Optional[str] = None):
        self.market_tree.delete(*self.market_tree.get_children())
        for coin in self.coins:
            change = coin["percent_change_24h"]
            self.market_tree.insert(
                "",
                "end",
                values=(
                    coin["rank"],
                    coin["name"],
                    coin["symbol"],
                    format_idr(coin["price_idr"]),
                    format_percent(change),
                    format_market_cap(coin["market_cap_idr"]),
                ),
                tags=("gain" if change >= 0 else "loss",),
            )
        updated = _format_timestamp(last_updated) if last_updated else "unknown"
        self.market_status.config(text=f"{len(self.coins)} coins, last updated {updated}")
        self.symbol_combo.config(values=[c["symbol"] for c in self.coins])

    # --- Portfolio ---

    def _create_portfolio_tab(self):
        header = tb.Frame(self.portfolio_tab)
        header.pack(fill="x", pady=(0, SPACING_MEDIUM))
        tb.Label(header, text="Portfolio", font=TITLE_FONT).pack(side="left")
        toggle = tb.Frame(header)
        toggle.pack(side="right")
        self.mode_buttons: Dict[PnlMode, tb.Button] = {}
        for mode, label in ((PnlMode.NET, "Net"), (PnlMode.BROKER, "Broker")):
            btn = tb.Button(toggle, text=label, style="Mode.TButton", command=lambda m=mode: self.set_pnl_mode(m))
            btn.pack(side="left", padx=(SPACING_MEDIUM // 2, 0))
            self.mode_buttons[mode] = btn

        card = tb.LabelFrame(self.portfolio_tab, text="Summary")
        card.pack(fill="x", pady=(0, SPACING_MEDIUM))
        inner = tb.Frame(card, padding=PADDING)
        inner.pack(fill="x")
        tb.Label(inner, text="Total value", font=SUMMARY_LABEL_FONT, foreground=TEXT_MUTED).grid(row=0, column=0, sticky=W)
        self.total_value_label = tb.Label(inner, text=format_idr(0), font=SUMMARY_VALUE_FONT)
        self.total_value_label.grid(row=1, column=0, columnspan=2, sticky=W, pady=(0, SPACING_MEDIUM))
        self.base_caption = tb.Label(inner, font=BODY_FONT, foreground=TEXT_MUTED)
        self.base_caption.grid(row=2, column=0, sticky=W)
        self.base_value_label = tb.Label(inner, font=BODY_FONT)
        self.base_value_label.grid(row=2, column=1, sticky="e")
        self.pnl_caption = tb.Label(inner, font=BODY_FONT, foreground=TEXT_MUTED)
        self.pnl_caption.grid(row=3, column=0, sticky=W)
        self.pnl_value_label = tb.Label(inner, font=BODY_FONT)
        self.pnl_value_label.grid(row=3, column=1, sticky="e")
        self.realized_caption = tb.Label(inner, text=REALIZED_LABEL, font=BODY_FONT, foreground=TEXT_MUTED)
        self.realized_value_label = tb.Label(inner, font=BODY_FONT)
        inner.columnconfigure(1, weight=1)

        self.portfolio_status = tb.Label(self.portfolio_tab, text="", font=SUMMARY_LABEL_FONT)
        self.portfolio_status.pack(anchor=W, pady=(0, SPACING_MEDIUM))
        self.positions_tree = self._make_tree(self.portfolio_tab, POSITION_COLUMNS, style="Positions.Treeview")
        self.positions_tree.bind("<<TreeviewSelect>>", self._on_position_selected)
        self.position_detail = tb.Label(self.portfolio_tab, text="", font=BODY_FONT, justify="left")
        self.position_detail.pack(anchor=W, pady=(SPACING_MEDIUM, 0))
        self.render_portfolio()

    def set_pnl_mode(self, mode: PnlMode) -> None:
        self.pnl_mode = PnlMode.coerce(mode)
        try:
            self.settings = storage.update_setting("pnl_mode", self.pnl_mode.value)
        except OSError as e:
            logger.warning("Could not save P&L mode: %s", e)
        self.render_portfolio()

    def load_positions(self):
        self.portfolio_status.config(text="Loading...", foreground=TEXT_MUTED)

        def done(applied: bool):
            if not applied:
                return
            self.render_portfolio()
            failure = self.feed.failure
            if isinstance(failure, NotAuthenticatedError):
                self.show_error(failure)

        def failed(err: WalletError):
            self.portfolio_status.config(text=err.message, foreground=color_for_value(-1))

        self.run_in_background(lambda: self.feed.load(lambda: core.load_positions(self.client)), done, failed)

    def render_portfolio(self):
        mode = self.pnl_mode
        for m, btn in self.mode_buttons.items():
            btn.configure(bootstyle=PRIMARY if m is mode else f"{PRIMARY}-{OUTLINE}")

        self.positions_tree.delete(*self.positions_tree.get_children())
        self.position_detail.config(text="")
        base_label, pnl_label = summary_labels(mode)
        self.base_caption.config(text=base_label)
        self.pnl_caption.config(text=pnl_label)

        error = self.feed.error
        if error:
            self.total_value_label.config(text="-")
            self.base_value_label.config(text="-")
            self.pnl_value_label.config(text="-", foreground=TEXT_MUTED)
            self.realized_caption.grid_remove()
            self.realized_value_label.grid_remove()
            self.portfolio_status.config(text=error, foreground=color_for_value(-1))
            return

        positions = self.feed.positions
        summary = core.portfolio_summary(positions, mode)
        totals = summary["totals"]
        self.total_value_label.config(text=format_idr(totals["total_value"]))
        self.base_value_label.config(text=format_idr(totals["base"]))
        self.pnl_value_label.config(
            text=f"{format_signed_idr(totals['pnl_value'])} ({format_percent(totals['pnl_percent'])})",
            foreground=color_for_value(totals["pnl_value"]),
        )
        if show_realized(mode):
            self.realized_caption.grid(row=4, column=0, sticky=W)
            self.realized_value_label.grid(row=4, column=1, sticky="e")
            self.realized_value_label.config(
                text=format_signed_idr(totals["realized_total"]),
                foreground=color_for_value(totals["realized_total"]),
            )
        else:
            self.realized_caption.grid_remove()
            self.realized_value_label.grid_remove()

        if not positions:
            self.portfolio_status.config(text="You don't have any crypto holdings yet.", foreground=TEXT_MUTED)
        else:
            self.portfolio_status.config(text="")

        for p in positions:
            view = summary["positions"][p["symbol"]]
            avg_entry = view["avg_entry_price"]
            self.positions_tree.insert(
                "",
                "end",
                iid=p["symbol"],
                values=(
                    p["symbol"],
                    format_coin_amount(p["amount"]),
                    format_idr(p["current_price"]),
                    format_idr(p["current_value"]),
                    format_signed_idr(view["pnl_value"]),
                    format_percent(view["pnl_percent"]),
                    format_idr(avg_entry) if avg_entry is not None else "",
                ),
                tags=("gain" if view["sign"] == "+" else "loss",),
            )

    def _on_position_selected(self, _event=None):
        selection = self.positions_tree.selection()
        if not selection:
            return
        symbol = selection[0]
        position = next((p for p in self.feed.positions if p["symbol"] == symbol), None)
        if position is None:
            return
        self.position_detail.config(text=self._position_detail_text(position))

    def _position_detail_text(self, p: PositionRecord) -> str:
        view = position_view(p, self.pnl_mode)
        lines = [f"{p['symbol']}  Current value: {format_idr(p['current_value'])}"]
        if view["avg_entry_price"] is not None:
            lines.append(f"Avg entry ({view['mode_label']}): {format_idr(view['avg_entry_price'])}")
        if self.pnl_mode is PnlMode.NET:
            lines += [
                f"Total buys: {format_idr(p['total_buy'])}",
                f"Total sells: {format_idr(p['total_sell'])}",
                f"Net invested: {format_idr(p['net_invested'])}",
                f"P&L (net): {format_signed_idr(view['pnl_value'])} ({format_percent(view['pnl_percent'])})",
            ]
        else:
            lines += [
                f"Cost basis (open): {format_idr(p['broker_cost_basis'])}",
                f"Realized P&L: {format_signed_idr(p['broker_realized_pnl'])}",
                f"Unrealized P&L: {format_signed_idr(view['pnl_value'])} ({format_percent(view['pnl_percent'])})",
            ]
        return "\n".join(lines)

    # --- Balance ---

    def _create_balance_tab(self):
        tb.Label(self.balance_tab, text="Balance", font=TITLE_FONT).pack(anchor=W)
        self.idr_balance_label = tb.Label(self.balance_tab, text=format_idr(0), font=SUMMARY_VALUE_FONT)
        self.idr_balance_label.pack(anchor=W, pady=(0, SPACING_MEDIUM))
        self.balance_status = tb.Label(self.balance_tab, text="", font=SUMMARY_LABEL_FONT)
        self.balance_status.pack(anchor=W)

        form = tb.Frame(self.balance_tab)
        form.pack(fill="x", pady=SPACING_MEDIUM)
        self.balance_mode_var = tb.StringVar(value="DEPOSIT")
        tb.Radiobutton(form, text="Deposit", value="DEPOSIT", variable=self.balance_mode_var).grid(row=0, column=0, sticky=W)
        tb.Radiobutton(form, text="Withdraw", value="WITHDRAW", variable=self.balance_mode_var).grid(row=0, column=1, sticky=W)
        tb.Label(form, text="Amount (IDR):").grid(row=1, column=0, sticky=W, pady=(SPACING_MEDIUM, 0))
        self.balance_amount_var = tb.StringVar()
        tb.Entry(form, textvariable=self.balance_amount_var, width=24).grid(row=1, column=1, sticky=EW, pady=(SPACING_MEDIUM, 0))
        self.balance_submit_btn = tb.Button(form, text="Submit", bootstyle=SUCCESS, command=self.submit_balance)
        self.balance_submit_btn.grid(row=1, column=2, padx=(SPACING_MEDIUM, 0), pady=(SPACING_MEDIUM, 0))

        tb.Label(self.balance_tab, text="Recent transactions", font=BODY_FONT).pack(anchor=W, pady=(SPACING_MEDIUM, 0))
        self.transactions_tree = self._make_tree(self.balance_tab, TRANSACTION_COLUMNS)

    def load_balance(self):
        def work():
            return self.client.get_balances(), self.client.list_balance_transactions()

        def done(result):
            balances, transactions = result
            self.balance_status.config(text="")
            self.idr_balance_label.config(text=format_idr(idr_balance(balances)))
            self.render_transactions(transactions)

        def failed(err: WalletError):
            self.idr_balance_label.config(text=format_idr(0))
            self.balance_status.config(text=err.message, foreground=color_for_value(-1))
            if isinstance(err, NotAuthenticatedError):
                self.show_error(err)

        self.run_in_background(work, done, failed)

    def render_transactions(self, transactions: List[Dict[str, Any]]):
        self.transactions_tree.delete(*self.transactions_tree.get_children())
        for tx in transactions:
            is_deposit = tx.get("type") == "DEPOSIT"
            amount = format_idr(tx.get("amount"))
            self.transactions_tree.insert(
                "",
                "end",
                values=(
                    _format_timestamp(tx.get("created_at")),
                    "Deposit" if is_deposit else "Withdraw",
                    f"+{amount}" if is_deposit else f"-{amount}",
                    format_idr(tx.get("balance_after")),
                ),
                tags=("gain" if is_deposit else "loss",),
            )

    def submit_balance(self):
        kind = self.balance_mode_var.get()
        try:
            amount = validate_balance_amount(self.balance_amount_var.get(), kind)
        except InvalidInputError as e:
            dialogs.show_invalid_input(e, parent=self)
            return
        action = self.client.deposit if kind == "DEPOSIT" else self.client.withdraw
        self.balance_submit_btn.config(state="disabled")

        def done(new_balance: float):
            self.balance_submit_btn.config(state="normal")
            self.balance_amount_var.set("")
            title = "Deposit successful" if kind == "DEPOSIT" else "Withdrawal successful"
            messagebox.showinfo(title, f"New balance: {format_idr(new_balance)}", parent=self)
            self.load_balance()
            self.load_trading()

        def failed(err: WalletError):
            self.balance_submit_btn.config(state="normal")
            self.show_error(err)

        self.run_in_background(lambda: action(amount), done, failed)

    # --- Trade ---

    def _create_trade_tab(self):
        tb.Label(self.trade_tab, text="Trade", font=TITLE_FONT).pack(anchor=W)
        self.trade_balance_label = tb.Label(self.trade_tab, text="", font=BODY_FONT)
        self.trade_balance_label.pack(anchor=W, pady=(0, SPACING_MEDIUM))

        form = tb.Frame(self.trade_tab)
        form.pack(fill="x")
        tb.Label(form, text="Symbol:").grid(row=0, column=0, sticky=W)
        self.symbol_var = tb.StringVar()
        self.symbol_combo = ttk.Combobox(form, textvariable=self.symbol_var, width=14)
        self.symbol_combo.grid(row=0, column=1, sticky=W)
        self.symbol_combo.bind("<KeyRelease>", self._on_symbol_search)
        self.symbol_combo.bind("<<ComboboxSelected>>", lambda e: self._update_selected_coin())
        self.selected_coin_label = tb.Label(form, text="", foreground=TEXT_MUTED)
        self.selected_coin_label.grid(row=0, column=2, columnspan=3, sticky=W, padx=(SPACING_MEDIUM, 0))

        self.buy_mode_var = tb.StringVar(value="IDR")
        tb.Radiobutton(form, text="Spend IDR", value="IDR", variable=self.buy_mode_var).grid(row=1, column=0, sticky=W, pady=SPACING_MEDIUM)
        tb.Radiobutton(form, text="Coin amount", value="COIN", variable=self.buy_mode_var).grid(row=1, column=1, sticky=W, pady=SPACING_MEDIUM)
        self.spend_var = tb.StringVar()
        self.buy_amount_var = tb.StringVar()
        self.sell_amount_var = tb.StringVar()
        tb.Label(form, text="Spend (IDR):").grid(row=2, column=0, sticky=W)
        tb.Entry(form, textvariable=self.spend_var, width=16).grid(row=2, column=1, sticky=W)
        tb.Label(form, text="Buy amount (coin):").grid(row=2, column=2, sticky=W, padx=(SPACING_MEDIUM, 0))
        tb.Entry(form, textvariable=self.buy_amount_var, width=16).grid(row=2, column=3, sticky=W)
        self.buy_btn = tb.Button(form, text="Buy", bootstyle=SUCCESS, command=self.submit_buy)
        self.buy_btn.grid(row=2, column=4, padx=(SPACING_MEDIUM, 0))
        tb.Label(form, text="Sell amount (coin):").grid(row=3, column=0, sticky=W, pady=(SPACING_MEDIUM, 0))
        tb.Entry(form, textvariable=self.sell_amount_var, width=16).grid(row=3, column=1, sticky=W, pady=(SPACING_MEDIUM, 0))
        self.sell_btn = tb.Button(form, text="Sell", bootstyle=DANGER, command=self.submit_sell)
        self.sell_btn.grid(row=3, column=4, padx=(SPACING_MEDIUM, 0), pady=(SPACING_MEDIUM, 0))

        tb.Label(self.trade_tab, text="Trade history", font=BODY_FONT).pack(anchor=W, pady=(PADDING, 0))
        self.trades_tree = self._make_tree(self.trade_tab, TRADE_COLUMNS)

    def _on_symbol_search(self, _event=None):
        matches = filter_coin_options(self.coins, self.symbol_var.get())
        self.symbol_combo.config(values=[c["symbol"] for c in matches])
        self._update_selected_coin()

    def _update_selected_coin(self):
        symbol = self.symbol_var.get()
        coin = find_coin(self.coins, symbol)
        held = holding_amount(self.holdings, symbol)
        if coin is None:
            self.selected_coin_label.config(text="")
            return
        self.selected_coin_label.config(
            text=f"{coin['name']}  Current price: {format_idr(coin['price_idr'])}  Held: {format_coin_amount(held)}"
        )

    def load_trading(self):
        def work():
            return self.client.get_portfolio(), self.client.list_trades()

        def done(result):
            portfolio, trades = result
            self.balances = portfolio["balances"]
            self.holdings = portfolio["holdings"]
            self.trade_balance_label.config(text=f"IDR balance: {format_idr(idr_balance(self.balances))}")
            self.render_trades(trades)
            self._update_selected_coin()

        def failed(err: WalletError):
            self.trade_balance_label.config(text=err.message)
            if isinstance(err, NotAuthenticatedError):
                self.show_error(err)

        self.run_in_background(work, done, failed)

    def render_trades(self, trades: List[Dict[str, Any]]):
        self.trades_tree.delete(*self.trades_tree.get_children())
        for t in trades:
            side = t.get("side") or ""
            self.trades_tree.insert(
                "",
                "end",
                values=(
                    _format_timestamp(t.get("created_at")),
                    side,
                    t.get("symbol") or "",
                    format_coin_amount(t.get("amount")),
                    format_idr(t.get("price_idr")),
                    format_idr(t.get("notional_idr")),
                ),
                tags=("gain" if side == "BUY" else "loss",),
            )

    def _after_trade(self, verb: str):
        def done(result: Dict[str, Any]):
            self.buy_btn.config(state="normal")
            self.sell_btn.config(state="normal")
            self.spend_var.set("")
            self.buy_amount_var.set("")
            self.sell_amount_var.set("")
            messagebox.showinfo(
                "Trade executed",
                f"{verb} {format_coin_amount(result.get('amount_coin'))} {result.get('symbol', '')} "
                f"at {format_idr(result.get('price_idr'))}",
                parent=self,
            )
            self.load_trading()
            self.load_positions()
            self.load_balance()

        return done

    def _trade_failed(self, err: WalletError):
        self.buy_btn.config(state="normal")
        self.sell_btn.config(state="normal")
        self.show_error(err)

    def submit_buy(self):
        try:
            payload = build_buy_payload(
                self.symbol_var.get(), self.buy_mode_var.get(), self.spend_var.get(), self.buy_amount_var.get()
            )
        except InvalidInputError as e:
            dialogs.show_invalid_input(e, parent=self)
            return
        self.buy_btn.config(state="disabled")
        self.run_in_background(lambda: self.client.buy(**payload), self._after_trade("Bought"), self._trade_failed)

    def submit_sell(self):
        try:
            payload = build_sell_payload(self.symbol_var.get(), self.sell_amount_var.get())
        except InvalidInputError as e:
            dialogs.show_invalid_input(e, parent=self)
            return
        self.sell_btn.config(state="disabled")
        self.run_in_background(lambda: self.client.sell(**payload), self._after_trade("Sold"), self._trade_failed)

    # --- Profile ---

    def _create_profile_tab(self):
        tb.Label(self.profile_tab, text="Profile", font=TITLE_FONT).pack(anchor=W)
        row = tb.Frame(self.profile_tab)
        row.pack(fill="x", pady=SPACING_MEDIUM)
        self.avatar_label = tb.Label(row, text="U", font=SUMMARY_VALUE_FONT, width=3, anchor="center", bootstyle="inverse-secondary")
        self.avatar_label.pack(side="left")
        info = tb.Frame(row, padding=(PADDING, 0))
        info.pack(side="left", fill="x")
        self.profile_name_label = tb.Label(info, text="User", font=BODY_FONT)
        self.profile_name_label.pack(anchor=W)
        self.profile_email_label = tb.Label(info, text="", foreground=TEXT_MUTED)
        self.profile_email_label.pack(anchor=W)
        self.profile_avatar_url_label = tb.Label(info, text="", foreground=TEXT_MUTED, font=SUMMARY_LABEL_FONT)
        self.profile_avatar_url_label.pack(anchor=W)
        self.profile_status = tb.Label(self.profile_tab, text="", font=SUMMARY_LABEL_FONT)
        self.profile_status.pack(anchor=W)

        buttons = tb.Frame(self.profile_tab)
        buttons.pack(anchor=W, pady=PADDING)
        tb.Button(buttons, text="Edit profile", command=lambda: dialogs.edit_profile_dialog(self)).pack(side="left")
        tb.Button(buttons, text="Change password", command=lambda: dialogs.change_password_dialog(self)).pack(side="left", padx=SPACING_MEDIUM)
        tb.Button(buttons, text="Profile picture", command=lambda: dialogs.upload_avatar_dialog(self)).pack(side="left")
        tb.Button(buttons, text="Log out", bootstyle=DANGER, command=self.logout).pack(side="left", padx=SPACING_MEDIUM)

    def load_profile(self):
        def done(profile: Profile):
            self.profile = profile
            self.profile_status.config(text="")
            self.render_profile()

        def failed(err: WalletError):
            self.profile_status.config(text=err.message, foreground=color_for_value(-1))
            if isinstance(err, NotAuthenticatedError):
                self.show_error(err)

        self.run_in_background(self.client.get_profile, done, failed)

    def render_profile(self):
        name = display_name(self.profile)
        self.avatar_label.config(text=avatar_initial(name))
        self.profile_name_label.config(text=name)
        profile = self.profile or {}
        self.profile_email_label.config(text=profile.get("email") or "")
        avatar_url = resolve_avatar_url(profile.get("avatar_url"), self.client.base_url)
        self.profile_avatar_url_label.config(text=f"Avatar: {avatar_url}" if avatar_url else "")
