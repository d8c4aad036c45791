"""Dialog windows for Crypto Wallet: login/register, profile, password, avatar, about."""

from __future__ import annotations

import logging
import tkinter as tk
from tkinter import EW, W, filedialog, messagebox

import ttkbootstrap as tb
from ttkbootstrap.constants import PRIMARY, SECONDARY, SUCCESS

from crypto_wallet import app as core
from crypto_wallet.services.errors import InvalidInputError, WalletError
from crypto_wallet.services.forms import validate_password_change, validate_profile_update
from crypto_wallet.theming.style import SPACING_MEDIUM

logger = logging.getLogger(__name__)


def _modal(app, title: str, geometry: str) -> tk.Toplevel:
    dialog = tk.Toplevel(app)
    dialog.title(title)
    dialog.geometry(geometry)
    dialog.transient(app)
    dialog.grab_set()
    return dialog


def show_invalid_input(err: InvalidInputError, parent=None) -> None:
    messagebox.showwarning(err.title, err.message, parent=parent)


def show_about(app) -> None:
    """Show about dialog."""
    messagebox.showinfo(
        "About",
        "Crypto Wallet\n\nTrade and track crypto in rupiah, with net and\n"
        "broker-style P&L views of your portfolio.",
    )


def login_dialog(app) -> tk.Toplevel:
    """Show the login / register dialog. On success the app reloads every tab."""
    dialog = _modal(app, "Welcome", "360x330")
    frame = tb.Frame(dialog, padding=20)
    frame.pack(fill="both", expand=True)
    frame.columnconfigure(0, weight=1)

    mode_var = tb.StringVar(value="login")
    email_var = tb.StringVar()
    password_var = tb.StringVar()
    confirm_var = tb.StringVar()

    title = tb.Label(frame, text="Log in", font=("Helvetica", 16, "bold"))
    title.grid(row=0, column=0, sticky=W, pady=(0, SPACING_MEDIUM))

    tb.Label(frame, text="Email or username:").grid(row=1, column=0, sticky=W)
    tb.Entry(frame, textvariable=email_var).grid(row=2, column=0, sticky=EW, pady=(0, SPACING_MEDIUM))
    tb.Label(frame, text="Password:").grid(row=3, column=0, sticky=W)
    tb.Entry(frame, textvariable=password_var, show="*").grid(row=4, column=0, sticky=EW, pady=(0, SPACING_MEDIUM))
    confirm_label = tb.Label(frame, text="Confirm password:")
    confirm_entry = tb.Entry(frame, textvariable=confirm_var, show="*")

    submit_btn = tb.Button(frame, text="Log in", bootstyle=PRIMARY)
    submit_btn.grid(row=7, column=0, sticky=EW, pady=(SPACING_MEDIUM, 0))
    switch_btn = tb.Button(frame, text="Create an account", bootstyle=f"{SECONDARY}-link")
    switch_btn.grid(row=8, column=0, pady=(SPACING_MEDIUM, 0))

    def apply_mode():
        registering = mode_var.get() == "register"
        title.config(text="Create account" if registering else "Log in")
        submit_btn.config(text="Register" if registering else "Log in")
        switch_btn.config(text="I already have an account" if registering else "Create an account")
        if registering:
            confirm_label.grid(row=5, column=0, sticky=W)
            confirm_entry.grid(row=6, column=0, sticky=EW)
        else:
            confirm_label.grid_remove()
            confirm_entry.grid_remove()

    def toggle_mode():
        mode_var.set("login" if mode_var.get() == "register" else "register")
        apply_mode()

    def submit():
        email = email_var.get().strip()
        password = password_var.get()
        confirm = confirm_var.get()
        registering = mode_var.get() == "register"
        submit_btn.config(state="disabled")

        def work():
            if registering:
                token = core.register(app.client, email, password, confirm)
                if not token:
                    # Some deployments do not issue a token on registration
                    core.login(app.client, email, password)
            else:
                core.login(app.client, email, password)

        def done(_):
            dialog.destroy()
            app.on_authenticated()

        def failed(err: WalletError):
            logger.info("Authentication failed: %s", err.message)
            submit_btn.config(state="normal")
            if isinstance(err, InvalidInputError):
                show_invalid_input(err, parent=dialog)
            else:
                messagebox.showerror("Error", err.message, parent=dialog)

        app.run_in_background(work, done, failed)

    submit_btn.config(command=submit)
    switch_btn.config(command=toggle_mode)
    dialog.bind("<Return>", lambda e: submit())
    apply_mode()
    return dialog


def change_password_dialog(app) -> None:
    """Show dialog to change the account password."""
    dialog = _modal(app, "Change Password", "360x300")
    frame = tb.Frame(dialog, padding=20)
    frame.pack(fill="both", expand=True)
    frame.columnconfigure(0, weight=1)

    current_var = tb.StringVar()
    new_var = tb.StringVar()
    confirm_var = tb.StringVar()
    for row, (label, var) in enumerate(
        (("Current password:", current_var), ("New password:", new_var), ("Confirm new password:", confirm_var))
    ):
        tb.Label(frame, text=label).grid(row=row * 2, column=0, sticky=W)
        tb.Entry(frame, textvariable=var, show="*").grid(row=row * 2 + 1, column=0, sticky=EW, pady=(0, SPACING_MEDIUM))

    def submit():
        current, new, confirm = current_var.get(), new_var.get(), confirm_var.get()
        try:
            validate_password_change(current, new, confirm)
        except InvalidInputError as e:
            show_invalid_input(e, parent=dialog)
            return

        def done(_):
            messagebox.showinfo("Password updated", "Your password has been changed.", parent=dialog)
            dialog.destroy()

        app.run_in_background(lambda: app.client.change_password(current, new), done)

    tb.Button(frame, text="Update password", bootstyle=SUCCESS, command=submit).grid(
        row=6, column=0, sticky=EW, pady=(SPACING_MEDIUM, 0)
    )


def edit_profile_dialog(app) -> None:
    """Show dialog to edit email and username (current password required)."""
    dialog = _modal(app, "Edit Profile", "360x300")
    frame = tb.Frame(dialog, padding=20)
    frame.pack(fill="both", expand=True)
    frame.columnconfigure(0, weight=1)

    profile = app.profile or {}
    email_var = tb.StringVar(value=profile.get("email") or "")
    username_var = tb.StringVar(value=profile.get("username") or "")
    password_var = tb.StringVar()

    tb.Label(frame, text="Email:").grid(row=0, column=0, sticky=W)
    tb.Entry(frame, textvariable=email_var).grid(row=1, column=0, sticky=EW, pady=(0, SPACING_MEDIUM))
    tb.Label(frame, text="Username (optional):").grid(row=2, column=0, sticky=W)
    tb.Entry(frame, textvariable=username_var).grid(row=3, column=0, sticky=EW, pady=(0, SPACING_MEDIUM))
    tb.Label(frame, text="Current password:").grid(row=4, column=0, sticky=W)
    tb.Entry(frame, textvariable=password_var, show="*").grid(row=5, column=0, sticky=EW, pady=(0, SPACING_MEDIUM))

    def submit():
        try:
            payload = validate_profile_update(email_var.get(), username_var.get(), password_var.get())
        except InvalidInputError as e:
            show_invalid_input(e, parent=dialog)
            return

        def done(_):
            messagebox.showinfo("Profile updated", "Your profile has been updated.", parent=dialog)
            dialog.destroy()
            app.load_profile()

        app.run_in_background(lambda: app.client.update_profile(**payload), done)

    tb.Button(frame, text="Save changes", bootstyle=SUCCESS, command=submit).grid(
        row=6, column=0, sticky=EW, pady=(SPACING_MEDIUM, 0)
    )


def upload_avatar_dialog(app) -> None:
    """Pick a JPEG from disk and upload it as the profile picture."""
    path = filedialog.askopenfilename(
        parent=app,
        title="Choose profile picture",
        filetypes=[("JPEG images", "*.jpg *.jpeg"), ("All files", "*.*")],
    )
    if not path:
        return

    def done(_):
        messagebox.showinfo("Profile picture", "Profile picture updated")
        app.load_profile()

    app.run_in_background(lambda: app.client.upload_avatar(path), done)


def confirm_logout(app) -> bool:
    return messagebox.askyesno("Log out", "Log out of this account?", parent=app)

