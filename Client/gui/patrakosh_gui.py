"""
PatraKosh Client - Main GUI Module

Implements the file manager window and launch function.

Author: PatraKosh Project
"""

import tkinter as tk
from tkinter import ttk, scrolledtext, messagebox, filedialog, simpledialog
import threading
import logging
from pathlib import Path
from typing import Optional, Dict

from managers import ConfigManager, SessionManager
from managers.log_manager import cleanup_old_logs
from models import (
    FileRecord,
    CollectionView,
    OperationState,
    UserProfile,
    format_bytes,
    display_mime_type,
    display_user_name,
    summarize_stats,
    empty_list_text
)
from api import PatraKoshAPI
from operations import SyncController, TransferHelper, AuthOperations, safe_filename
from version import VERSION
from .log_handler import setup_gui_logging
from .login_dialog import LoginDialog

# Configure logging
logger = logging.getLogger(__name__)

EMPTY_ROW_ID = "__empty__"


class FileManagerGUI:
    """
    Main GUI window for the PatraKosh client.

    Layout includes:
    - Header with the signed-in user and a Logout button
    - Stats summary, search box, Search and Upload buttons
    - Inline error message
    - File table (name, type, size) with Download, Rename and Delete
    - Toggleable log panel and status bar

    All network work runs on background threads through the SyncController;
    its change notifications are marshalled back with after().
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize the GUI window and components.

        Args:
            config_file: Optional explicit config.json path
        """
        self.root = tk.Tk()
        self.root.title("PatraKosh")

        # Hide window during initialization to avoid flicker
        self.root.withdraw()

        window_width = 760
        window_height = 480
        self.root.minsize(640, 360)
        self.root.geometry(f"{window_width}x{window_height}")

        # Initialize state
        self.log_panel_visible = False
        self.config_mgr = ConfigManager(config_file)
        self.session = SessionManager()
        self.api: Optional[PatraKoshAPI] = None
        self.auth_ops: Optional[AuthOperations] = None
        self.controller: Optional[SyncController] = None
        self.rows: Dict[str, FileRecord] = {}

        # Build GUI components
        self.create_menu_bar()
        self.create_header()
        self.create_toolbar()
        self.create_file_table()
        self.create_log_panel()
        self.create_status_bar()

        # Setup logging after log panel is created
        self.config_mgr.load_config()
        self.log_file = setup_gui_logging(self.config_mgr, self.log_text, self.root)
        cleanup_old_logs(self.config_mgr, self.log_file)

        if self.config_mgr.get("show_log_on_startup"):
            self.toggle_log_panel()

        self.api = PatraKoshAPI(
            self.config_mgr.get("server_url"),
            self.config_mgr.get("server_port"),
            api_prefix=self.config_mgr.get("api_prefix", "/api"),
            verify_ssl=self.config_mgr.get("verify_ssl", False),
            timeout=self.config_mgr.get("request_timeout", 30),
            download_timeout=self.config_mgr.get("download_timeout", 300),
            token_provider=self.session.get_token
        )
        self.auth_ops = AuthOperations(self.api, self.session)

        # Operations stay disabled until signed in
        self.set_operations_enabled(False)

        # Center window on screen after all components are built
        self.root.update_idletasks()
        x = (self.root.winfo_screenwidth() - window_width) // 2
        y = (self.root.winfo_screenheight() - window_height) // 2
        self.root.geometry(f"+{x}+{y}")

        self.root.deiconify()
        self.root.protocol("WM_DELETE_WINDOW", self.on_exit)

        self.root.after(100, self.startup)

    # ==================== Layout ====================

    def create_menu_bar(self):
        """Create the menu bar."""
        menubar = tk.Menu(self.root)
        self.root.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Login...", command=self.show_login)
        file_menu.add_command(label="Logout", command=self.on_logout)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.on_exit)

        view_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="View", menu=view_menu)
        view_menu.add_command(label="Refresh", command=self.on_search)
        view_menu.add_command(label="Toggle Log Panel", command=self.toggle_log_panel)

        help_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Help", menu=help_menu)
        help_menu.add_command(label="About", command=self.show_about)

    def create_header(self):
        """Create the header with app name, signed-in user and Logout."""
        header = tk.Frame(self.root, bg="#2c3e50", pady=8)
        header.pack(fill=tk.X, padx=10, pady=(10, 5))

        tk.Label(header, text="PatraKosh", font=("Arial", 16, "bold"),
                 bg="#2c3e50", fg="white").pack(side=tk.LEFT, padx=10)

        self.user_label = tk.Label(header, text="Not signed in", font=("Arial", 9),
                                   bg="#2c3e50", fg="#bdc3c7")
        self.user_label.pack(side=tk.LEFT, padx=10)

        self.logout_button = tk.Button(header, text="Logout", command=self.on_logout)
        self.logout_button.pack(side=tk.RIGHT, padx=10)

    def create_toolbar(self):
        """Create the stats summary, search box and Search/Upload buttons."""
        toolbar = tk.Frame(self.root)
        toolbar.pack(fill=tk.X, padx=10, pady=5)

        summary = tk.Frame(toolbar)
        summary.pack(side=tk.LEFT)
        tk.Label(summary, text="Your Files", font=("Arial", 11, "bold")).pack(anchor=tk.W)
        self.stats_label = tk.Label(summary, text="0 files • 0 B used",
                                    font=("Arial", 9), fg="gray")
        self.stats_label.pack(anchor=tk.W)

        self.upload_button = tk.Button(toolbar, text="Upload", width=12, command=self.on_upload)
        self.upload_button.pack(side=tk.RIGHT, padx=(5, 0))

        self.search_button = tk.Button(toolbar, text="Search", width=10, command=self.on_search)
        self.search_button.pack(side=tk.RIGHT, padx=(5, 0))

        self.search_var = tk.StringVar()
        self.search_entry = ttk.Entry(toolbar, textvariable=self.search_var, width=30)
        self.search_entry.pack(side=tk.RIGHT)
        self.search_entry.bind("<Return>", lambda e: self.on_search())

        self.error_label = tk.Label(self.root, text="", fg="#c0392b", anchor=tk.W,
                                    font=("Arial", 9))
        self.error_label.pack(fill=tk.X, padx=10)

    def create_file_table(self):
        """Create the file table and the per-file action buttons."""
        table_frame = tk.Frame(self.root)
        table_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=5)

        columns = ("name", "type", "size")
        self.file_tree = ttk.Treeview(table_frame, columns=columns, show="headings",
                                      selectmode="browse")
        self.file_tree.heading("name", text="Name")
        self.file_tree.heading("type", text="Type")
        self.file_tree.heading("size", text="Size")
        self.file_tree.column("name", width=320)
        self.file_tree.column("type", width=200)
        self.file_tree.column("size", width=100, anchor=tk.E)

        scrollbar = ttk.Scrollbar(table_frame, orient=tk.VERTICAL, command=self.file_tree.yview)
        self.file_tree.configure(yscrollcommand=scrollbar.set)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self.file_tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        actions = tk.Frame(self.root)
        actions.pack(fill=tk.X, padx=10, pady=(0, 5))

        self.download_button = tk.Button(actions, text="Download", width=10, command=self.on_download)
        self.download_button.pack(side=tk.LEFT, padx=(0, 5))
        self.rename_button = tk.Button(actions, text="Rename", width=10, command=self.on_rename)
        self.rename_button.pack(side=tk.LEFT, padx=(0, 5))
        self.delete_button = tk.Button(actions, text="Delete", width=10, fg="#c0392b",
                                       command=self.on_delete)
        self.delete_button.pack(side=tk.LEFT)

    def create_log_panel(self):
        """Create the toggleable log panel (hidden by default)."""
        self.log_frame = tk.Frame(self.root)

        tk.Label(self.log_frame, text="Operation Log:",
                 font=("Arial", 10, "bold")).pack(anchor=tk.W, padx=5, pady=(5, 0))

        self.log_text = scrolledtext.ScrolledText(self.log_frame, height=8,
                                                  font=("Courier", 9),
                                                  wrap=tk.WORD, state=tk.DISABLED)
        self.log_text.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

    def create_status_bar(self):
        """Create the status bar at the bottom."""
        status_frame = tk.Frame(self.root, bd=1, relief=tk.SUNKEN)
        status_frame.pack(side=tk.BOTTOM, fill=tk.X)

        self.status_label = tk.Label(status_frame, text="Ready", font=("Arial", 9), anchor=tk.W)
        self.status_label.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=5, pady=2)

    def toggle_log_panel(self):
        """Toggle the visibility of the log panel."""
        if self.log_panel_visible:
            self.log_frame.pack_forget()
            self.log_panel_visible = False
        else:
            self.log_frame.pack(fill=tk.BOTH, expand=False, padx=10, pady=(0, 5))
            self.log_panel_visible = True

    def update_status_bar(self, message: str):
        self.status_label.config(text=message)

    def set_operations_enabled(self, enabled: bool):
        """Enable or disable every control that needs a session."""
        state = tk.NORMAL if enabled else tk.DISABLED
        for button in (self.search_button, self.upload_button, self.download_button,
                       self.rename_button, self.delete_button, self.logout_button):
            button.config(state=state)

    # ==================== Session ====================

    def startup(self):
        """Resume a stored session, or ask the user to log in."""
        if self.session.is_authed():
            self.start_session(self.session.get_user())
        else:
            self.update_status_bar("Not signed in")
            self.show_login()

    def show_login(self):
        LoginDialog(self.root, self.auth_ops, self.start_session)

    def start_session(self, user: Optional[UserProfile]):
        """
        Build a fresh controller for the signed-in user and load the files.

        Args:
            user: Profile of the signed-in user (may be None)
        """
        name = display_user_name(user)
        self.user_label.config(text=f"Signed in as {name}")
        self.update_status_bar(f"Signed in as {name}")
        logger.info(f"Signed in as {name}")

        self.controller = SyncController(
            self.api,
            transfer_helper=TransferHelper(self.api, self.config_mgr.get_download_dir()),
            on_change=self.on_controller_change
        )
        self.search_var.set("")
        self.set_operations_enabled(True)
        self.render(self.controller.view, self.controller.state)
        self.run_in_background(self.controller.initial_load)

    def on_logout(self):
        """Forget the session and drop the collection view."""
        self.auth_ops.logout()
        self.controller = None
        self.render(CollectionView(), OperationState())
        self.set_operations_enabled(False)
        self.user_label.config(text="Not signed in")
        self.update_status_bar("Logged out")
        self.show_login()

    def on_exit(self):
        if self.api:
            self.api.close()
        self.root.destroy()

    # ==================== Rendering ====================

    def on_controller_change(self, view: CollectionView, state: OperationState):
        """Called from worker threads; hand the snapshot to the GUI thread."""
        controller = self.controller
        self.root.after(0, lambda: self._render_if_current(controller, view, state))

    def _render_if_current(self, controller, view: CollectionView, state: OperationState):
        # Notifications from a controller replaced by logout are dropped
        if controller is self.controller:
            self.render(view, state)

    def render(self, view: CollectionView, state: OperationState):
        """Redraw the table, summary, error and button states from one snapshot."""
        self.file_tree.delete(*self.file_tree.get_children())
        self.rows = {}

        if not view.items:
            self.file_tree.insert("", tk.END, iid=EMPTY_ROW_ID,
                                  values=(empty_list_text(state.loading), "", ""))
        for record in view.items:
            iid = str(record.id)
            self.rows[iid] = record
            self.file_tree.insert("", tk.END, iid=iid, values=(
                record.filename,
                display_mime_type(record),
                format_bytes(record.file_size)
            ))

        self.stats_label.config(text=summarize_stats(view.stats))
        self.error_label.config(text=state.error_message)

        if self.controller is not None:
            self.search_button.config(state=tk.DISABLED if state.loading else tk.NORMAL)
            self.upload_button.config(state=tk.DISABLED if state.uploading else tk.NORMAL,
                                      text="Uploading…" if state.uploading else "Upload")

        if state.loading:
            self.update_status_bar("Loading files...")
        elif state.uploading:
            self.update_status_bar("Uploading...")
        elif state.error_message:
            self.update_status_bar("Last operation failed")
        else:
            self.update_status_bar(f"{len(view.items)} file(s) shown")

    def selected_record(self) -> Optional[FileRecord]:
        selection = self.file_tree.selection()
        if not selection:
            return None
        return self.rows.get(selection[0])

    # ==================== Actions ====================

    def run_in_background(self, target, *args):
        """Run a controller operation on a daemon thread to keep the GUI responsive."""
        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()
        return thread

    def on_search(self):
        if not self.controller:
            return
        self.run_in_background(self.controller.refresh, self.search_var.get())

    def on_upload(self):
        if not self.controller:
            return
        file_path = filedialog.askopenfilename(parent=self.root, title="Upload File")
        if not file_path:
            return
        self.run_in_background(self.controller.upload, file_path)

    def on_delete(self):
        record = self.selected_record()
        if not self.controller or record is None:
            return
        self.run_in_background(self.controller.delete, record.id)

    def on_rename(self):
        """Prompt for a new name on the GUI thread, then rename in the background."""
        record = self.selected_record()
        if not self.controller or record is None:
            return
        new_name = simpledialog.askstring("Rename", "Rename file to:",
                                          initialvalue=record.filename, parent=self.root)
        if new_name is None:
            return
        self.run_in_background(self.controller.rename, record.id, new_name)

    def on_download(self):
        record = self.selected_record()
        if not self.controller or record is None:
            return

        filename = safe_filename(record.filename)
        save_path = filedialog.asksaveasfilename(
            parent=self.root,
            title="Save File",
            initialdir=str(self.controller.transfer.download_dir),
            initialfile=filename
        )
        if not save_path:
            return

        controller = self.controller

        def run_download():
            saved = controller.download(record.id, filename, save_path)
            if saved is not None:
                self.root.after(0, lambda: self.update_status_bar(f"Saved to {saved}"))

        self.run_in_background(run_download)

    def show_about(self):
        """Show the About dialog."""
        about_text = (
            "PatraKosh\n"
            "Personal File Storage Client\n\n"
            f"Version: {VERSION}"
        )
        messagebox.showinfo("About PatraKosh", about_text)

    def run(self):
        """Start the GUI main loop."""
        self.root.mainloop()


def launch_gui(config_file: Optional[Path] = None):
    """Launch the PatraKosh GUI application."""
    app = FileManagerGUI(config_file)
    app.run()
