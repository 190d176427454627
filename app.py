# app.py
# Desktop front end for MagicText (customtkinter, dark theme).
# - Corpus sources: a folder of .txt files, a ZIP of them, or a saved .pen file.
# - Building/loading/saving runs on a worker thread; results come back through after().
# - Render panel (k, length, seed, start position) and a phrase counter.

from __future__ import annotations
import os
import shutil
import tempfile
import threading
import zipfile
from typing import Callable, List, Optional

import customtkinter as ctk
from tkinter import filedialog, messagebox

# Project imports (ensure PYTHONPATH=src, or pip install -e .)
from magictext import Engine, MagicTextError
from magictext.config import MAX_TOKENS, RELEVANT_TOKENS

PEN_FILETYPES = [("Pen files", "*.pen"), ("All files", "*.*")]
JOB_ERRORS = (OSError, ValueError, KeyError, RuntimeError, zipfile.BadZipFile, MagicTextError)


def elide(text: str, width: int = 56) -> str:
    """Cut the middle out of long paths so the source label stays one line."""
    if len(text) <= width:
        return text
    half = (width - 1) // 2
    return f"{text[:half]}…{text[-half:]}"


def unpack_zip(archive: str) -> str:
    """
    Extract a ZIP of corpus files into a new temp dir and return its path.
    Any entry that would land outside that dir aborts the extraction.
    """
    dest = os.path.realpath(tempfile.mkdtemp(prefix="magictext_"))
    try:
        with zipfile.ZipFile(archive) as zf:
            for name in zf.namelist():
                target = os.path.realpath(os.path.join(dest, name))
                if os.path.commonpath([dest, target]) != dest:
                    raise ValueError(f"ZIP entry escapes the archive root: {name!r}")
            zf.extractall(dest)
    except Exception:
        shutil.rmtree(dest, ignore_errors=True)
        raise
    return dest


def read_int(entry: ctk.CTkEntry, default: Optional[int], low: Optional[int] = 0) -> Optional[int]:
    raw = entry.get().strip()
    if not raw:
        return default
    value = int(raw)
    if low is not None and value < low:
        raise ValueError(f"{value} is below {low}")
    return value


class BabblerWindow(ctk.CTk):
    """One window: pick a corpus, then render and count phrases against its pen."""

    def __init__(self) -> None:
        super().__init__()
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")
        self.title("MagicText")
        self.geometry("920x640")
        self.minsize(780, 520)

        self._engine = Engine()
        self._worker: Optional[threading.Thread] = None
        self._unpacked: Optional[str] = None     # temp dir of the current ZIP source

        self.mono = ctk.CTkFont(family="Menlo, Consolas, Courier New", size=13)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._source_panel(row=0)
        self._render_panel(row=1)
        self._count_panel(row=2)
        self._output_panel(row=3)
        self._status_bar(row=4)

        self._enable_pen_actions(False)
        self.protocol("WM_DELETE_WINDOW", self._close)

    # ---- layout ----

    def _panel(self, row: int) -> ctk.CTkFrame:
        frame = ctk.CTkFrame(self, corner_radius=8)
        frame.grid(row=row, column=0, sticky="nsew", padx=10, pady=(10 if row == 0 else 4, 4))
        return frame

    def _source_panel(self, row: int) -> None:
        frame = self._panel(row)
        frame.grid_columnconfigure(6, weight=1)
        actions = [("Folder…", self._open_folder), ("ZIP…", self._open_zip), ("Open pen…", self._open_pen)]
        for col, (text, command) in enumerate(actions):
            ctk.CTkButton(frame, text=text, width=90, command=command).grid(row=0, column=col, padx=(8, 0), pady=8)
        self.save_button = ctk.CTkButton(frame, text="Save pen…", width=90, command=self._save_pen)
        self.save_button.grid(row=0, column=3, padx=(8, 0), pady=8)

        self.tokenizer_menu = ctk.CTkOptionMenu(frame, values=["word", "char"], width=80)
        self.tokenizer_menu.grid(row=0, column=4, padx=(16, 0), pady=8)
        self.ignore_case = ctk.CTkSwitch(frame, text="ignore case")
        self.ignore_case.grid(row=0, column=5, padx=(12, 0), pady=8)

        self.source_label = ctk.CTkLabel(frame, text="no corpus yet", anchor="e")
        self.source_label.grid(row=0, column=6, sticky="ew", padx=8, pady=8)

    def _render_panel(self, row: int) -> None:
        frame = self._panel(row)
        self.k_entry = self._field(frame, 0, "k", str(RELEVANT_TOKENS))
        self.length_entry = self._field(frame, 2, "length", str(MAX_TOKENS))
        self.seed_entry = self._field(frame, 4, "seed", "")
        self.from_entry = self._field(frame, 6, "from", "")
        self.render_button = ctk.CTkButton(frame, text="Render", command=self._render)
        self.render_button.grid(row=0, column=8, padx=12, pady=8)

    def _count_panel(self, row: int) -> None:
        frame = self._panel(row)
        frame.grid_columnconfigure(0, weight=1)
        self.phrase_entry = ctk.CTkEntry(frame, placeholder_text="phrase to count")
        self.phrase_entry.grid(row=0, column=0, sticky="ew", padx=8, pady=8)
        self.phrase_entry.bind("<Return>", lambda _event: self._count())
        self.count_button = ctk.CTkButton(frame, text="Count", width=80, command=self._count)
        self.count_button.grid(row=0, column=1, padx=(0, 8), pady=8)
        self.count_label = ctk.CTkLabel(frame, text="", width=140, anchor="w")
        self.count_label.grid(row=0, column=2, padx=(0, 8), pady=8)

    def _output_panel(self, row: int) -> None:
        frame = self._panel(row)
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_rowconfigure(0, weight=1)
        self.output = ctk.CTkTextbox(frame, wrap="word", font=self.mono, state="disabled")
        self.output.grid(row=0, column=0, sticky="nsew", padx=8, pady=8)

    def _status_bar(self, row: int) -> None:
        frame = ctk.CTkFrame(self, fg_color="transparent")
        frame.grid(row=row, column=0, sticky="ew", padx=10, pady=(0, 8))
        frame.grid_columnconfigure(0, weight=1)
        self.status = ctk.CTkLabel(frame, text="Choose a folder, a ZIP or a pen file.", anchor="w")
        self.status.grid(row=0, column=0, sticky="ew")
        self.spinner = ctk.CTkProgressBar(frame, mode="indeterminate", width=160)
        self.spinner.grid(row=0, column=1, sticky="e")

    def _field(self, parent: ctk.CTkFrame, column: int, label: str, value: str) -> ctk.CTkEntry:
        ctk.CTkLabel(parent, text=label).grid(row=0, column=column, padx=(10, 4), pady=8)
        entry = ctk.CTkEntry(parent, width=72)
        entry.insert(0, value)
        entry.grid(row=0, column=column + 1, pady=8)
        return entry

    # ---- corpus sources (dialogs run here, work runs on the worker) ----

    def _settings(self) -> dict:
        return {
            "tokenizer": self.tokenizer_menu.get(),
            "comparer": "ordinal_ignore_case" if self.ignore_case.get() else "ordinal",
        }

    def _open_folder(self) -> None:
        folder = filedialog.askdirectory(title="Folder of .txt files")
        if folder:
            settings = self._settings()
            self._start("Building pen", f"folder {elide(folder)}",
                        lambda: self._build([folder], settings))

    def _open_zip(self) -> None:
        archive = filedialog.askopenfilename(title="ZIP of .txt files",
                                             filetypes=[("ZIP archives", "*.zip"), ("All files", "*.*")])
        if archive:
            settings = self._settings()
            self._start("Unpacking and building pen", f"zip {elide(archive)}",
                        lambda: self._build_zip(archive, settings))

    def _open_pen(self) -> None:
        path = filedialog.askopenfilename(title="Saved pen", filetypes=PEN_FILETYPES)
        if path:
            tokenizer = self.tokenizer_menu.get()
            self._start("Loading pen", f"pen {elide(path)}", lambda: self._load(path, tokenizer))

    def _save_pen(self) -> None:
        path = filedialog.asksaveasfilename(title="Save pen", defaultextension=".pen", filetypes=PEN_FILETYPES)
        if path:
            self._start("Saving pen", None, lambda: self._save(path))

    # ---- worker jobs (no widget access in here) ----

    def _build(self, roots: List[str], settings: dict) -> str:
        self._engine.build(roots, **settings)
        return f"{len(self._engine.pen):,} tokens"

    def _build_zip(self, archive: str, settings: dict) -> str:
        self._drop_unpacked()
        self._unpacked = unpack_zip(archive)
        return self._build([self._unpacked], settings)

    def _load(self, path: str, tokenizer: str) -> str:
        self._engine.load(path, tokenizer=tokenizer)
        return f"{len(self._engine.pen):,} tokens"

    def _save(self, path: str) -> str:
        self._engine.save(path)
        return f"saved to {elide(path)}"

    def _start(self, busy: str, source: Optional[str], job: Callable[[], str]) -> None:
        if self._worker is not None and self._worker.is_alive():
            messagebox.showinfo("MagicText", "Still busy with the previous job.")
            return
        if source is not None:
            self.source_label.configure(text=source)
        self.status.configure(text=f"{busy}…")
        self.spinner.start()
        self._enable_pen_actions(False)

        def work() -> None:
            try:
                summary = job()
            except JOB_ERRORS as exc:
                self.after(0, lambda e=exc: self._job_failed(e))
            else:
                self.after(0, lambda s=summary: self._job_done(s))

        self._worker = threading.Thread(target=work, daemon=True)
        self._worker.start()

    def _job_done(self, summary: str) -> None:
        self.spinner.stop()
        self.status.configure(text=f"Ready: {summary}")
        self._enable_pen_actions(True)

    def _job_failed(self, exc: Exception) -> None:
        self.spinner.stop()
        self.status.configure(text=f"Failed: {exc}")
        self._enable_pen_actions(self._engine.pen is not None)
        messagebox.showerror("MagicText", str(exc))

    # ---- pen actions ----

    def _render(self) -> None:
        try:
            k = read_int(self.k_entry, RELEVANT_TOKENS)
            length = read_int(self.length_entry, MAX_TOKENS)
            seed = read_int(self.seed_entry, None, low=None)
            start = read_int(self.from_entry, None)
        except ValueError as exc:
            self.status.configure(text=f"Not a valid number: {exc}")
            return
        try:
            text = self._engine.render_text(k, max_tokens=length, seed=seed, from_position=start)
        except (RuntimeError, MagicTextError) as exc:
            self.status.configure(text=f"Render failed: {exc}")
            return
        self._show(text or "(the first pick ended the text)")
        seeded = "" if seed is None else f", seed {seed}"
        self.status.configure(text=f"Rendered with k={k}, at most {length} tokens{seeded}.")

    def _count(self) -> None:
        phrase = self.phrase_entry.get()
        if not phrase.strip() or self._engine.pen is None:
            return
        self.count_label.configure(text=f"{self._engine.count(phrase):,} occurrence(s)")

    def _show(self, text: str) -> None:
        self.output.configure(state="normal")
        self.output.delete("1.0", "end")
        self.output.insert("end", text)
        self.output.configure(state="disabled")

    def _enable_pen_actions(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        for button in (self.render_button, self.count_button, self.save_button):
            button.configure(state=state)

    # ---- teardown ----

    def _drop_unpacked(self) -> None:
        if self._unpacked is not None:
            shutil.rmtree(self._unpacked, ignore_errors=True)
            self._unpacked = None

    def _close(self) -> None:
        self._engine.shutdown()
        self._drop_unpacked()
        self.destroy()


if __name__ == "__main__":
    BabblerWindow().mainloop()
