"""
PatraKosh Client - Login Dialog Module

Modal dialog for logging in or creating an account.

Author: PatraKosh Project
"""

import tkinter as tk
from tkinter import ttk
import threading
import logging
from typing import Callable, Optional

from exceptions import PatraKoshAPIError
from models import UserProfile
from operations import AuthOperations, LOGIN_FAILED, SIGNUP_FAILED

# Configure logging
logger = logging.getLogger(__name__)


class LoginDialog:
    """
    Login / signup dialog.

    Submits in a background thread; on success the session is stored by
    AuthOperations and on_success is called with the user profile.
    """

    def __init__(self, parent, auth_ops: AuthOperations,
                 on_success: Callable[[Optional[UserProfile]], None]):
        """
        Initialize login dialog.

        Args:
            parent: Parent tkinter window
            auth_ops: AuthOperations used to log in / sign up
            on_success: Called on the GUI thread after a successful login/signup
        """
        self.parent = parent
        self.auth_ops = auth_ops
        self.on_success = on_success
        self.mode = "login"
        self.submitting = False

        self.dialog = tk.Toplevel(parent)
        self.dialog.title("PatraKosh - Login")
        self.dialog.resizable(False, False)

        # Make dialog modal
        self.dialog.transient(parent)
        self.dialog.grab_set()

        self.fields = {
            'username_or_email': tk.StringVar(),
            'username': tk.StringVar(),
            'email': tk.StringVar(),
            'password': tk.StringVar(),
            'confirm_password': tk.StringVar()
        }

        self.create_ui()
        self.show_mode("login")

        # Center dialog on parent window
        self.dialog.update_idletasks()
        x = parent.winfo_x() + (parent.winfo_width() // 2) - (self.dialog.winfo_width() // 2)
        y = parent.winfo_y() + (parent.winfo_height() // 2) - (self.dialog.winfo_height() // 2)
        self.dialog.geometry(f"+{x}+{y}")

        self.dialog.bind("<Return>", lambda e: self.submit())

    def create_ui(self):
        """Create the form for both modes; show_mode() picks the visible rows."""
        self.main_frame = ttk.Frame(self.dialog, padding=20)
        self.main_frame.pack(fill=tk.BOTH, expand=True)

        self.title_label = ttk.Label(self.main_frame, font=("Arial", 14, "bold"))
        self.title_label.grid(row=0, column=0, columnspan=2, sticky=tk.W)

        self.subtitle_label = ttk.Label(self.main_frame, foreground="gray")
        self.subtitle_label.grid(row=1, column=0, columnspan=2, sticky=tk.W, pady=(0, 10))

        self.rows = {}
        labels = [
            ('username_or_email', "Username or Email", False),
            ('username', "Username", False),
            ('email', "Email", False),
            ('password', "Password", True),
            ('confirm_password', "Confirm password", True)
        ]
        for index, (key, text, secret) in enumerate(labels, start=2):
            label = ttk.Label(self.main_frame, text=text)
            entry = ttk.Entry(self.main_frame, textvariable=self.fields[key], width=32,
                              show="*" if secret else "")
            self.rows[key] = (label, entry, index)

        self.error_label = ttk.Label(self.main_frame, foreground="#c0392b", wraplength=320)
        self.error_label.grid(row=10, column=0, columnspan=2, sticky=tk.W, pady=(10, 0))

        self.submit_btn = ttk.Button(self.main_frame, command=self.submit)
        self.submit_btn.grid(row=11, column=0, columnspan=2, sticky=tk.EW, pady=(10, 5))

        self.switch_btn = ttk.Button(self.main_frame, command=self.toggle_mode)
        self.switch_btn.grid(row=12, column=0, columnspan=2, sticky=tk.EW)

    def show_mode(self, mode: str):
        """
        Switch between "login" and "signup" layouts.

        Args:
            mode: "login" or "signup"
        """
        self.mode = mode
        visible = (['username_or_email', 'password'] if mode == "login"
                   else ['username', 'email', 'password', 'confirm_password'])

        for key, (label, entry, row) in self.rows.items():
            if key in visible:
                label.grid(row=row, column=0, sticky=tk.W, padx=(0, 10), pady=3)
                entry.grid(row=row, column=1, sticky=tk.EW, pady=3)
            else:
                label.grid_remove()
                entry.grid_remove()

        if mode == "login":
            self.dialog.title("PatraKosh - Login")
            self.title_label.config(text="Login")
            self.subtitle_label.config(text="Access your secure files")
            self.switch_btn.config(text="Don't have an account? Sign up")
        else:
            self.dialog.title("PatraKosh - Create account")
            self.title_label.config(text="Create account")
            self.subtitle_label.config(text="Start storing files securely")
            self.switch_btn.config(text="Already have an account? Login")

        self.set_error("")
        self.update_submit_button()

    def toggle_mode(self):
        self.show_mode("signup" if self.mode == "login" else "login")

    def set_error(self, message: str):
        self.error_label.config(text=message)

    def update_submit_button(self):
        if self.mode == "login":
            text = "Signing in…" if self.submitting else "Login"
        else:
            text = "Creating…" if self.submitting else "Sign up"
        self.submit_btn.config(text=text, state=tk.DISABLED if self.submitting else tk.NORMAL)

    def submit(self):
        """Send the form for the current mode in a background thread."""
        if self.submitting:
            return

        self.set_error("")
        self.submitting = True
        self.update_submit_button()

        values = {key: var.get() for key, var in self.fields.items()}
        mode = self.mode

        def run_submit():
            try:
                if mode == "login":
                    user = self.auth_ops.login(values['username_or_email'], values['password'])
                else:
                    user = self.auth_ops.signup(values['username'], values['email'],
                                                values['password'], values['confirm_password'])
                self.dialog.after(0, lambda: self._submit_complete(user))
            except PatraKoshAPIError as e:
                message = e.user_message(LOGIN_FAILED if mode == "login" else SIGNUP_FAILED)
                self.dialog.after(0, lambda: self._submit_failed(message))

        threading.Thread(target=run_submit, daemon=True).start()

    def _submit_complete(self, user: Optional[UserProfile]):
        self.submitting = False
        self.dialog.destroy()
        self.on_success(user)

    def _submit_failed(self, message: str):
        self.submitting = False
        self.update_submit_button()
        self.set_error(message)
