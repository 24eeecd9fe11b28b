"""Terminal output: colours, status lines and the progress spinner.

Everything goes to stderr so stdout stays clean for the shell wrapper.
"""

import sys
import threading

# --- Colors ---
C_RESET = "\033[0m"
C_RED = "\033[31m"
C_GREEN = "\033[32m"
C_YELLOW = "\033[33m"
C_BLUE = "\033[34m"
C_DIM = "\033[2m"
C_BOLD = "\033[1m"
C_BOLD_GREEN = "\033[1;32m"

if not sys.stderr.isatty():
    C_RESET = C_RED = C_GREEN = C_YELLOW = C_BLUE = C_DIM = C_BOLD = C_BOLD_GREEN = ""


def status(icon, msg):
    print(f"  {icon}  {msg}", file=sys.stderr)


class Spinner:
    """Redraw a one-line progress indicator until the block exits.

    Usage:
        with Spinner("Asking the llm..."):
            result = slow_call()

    The spinner thread only reads the done event; it never sees the result.
    Does nothing when stderr is not a terminal.
    """

    FRAMES = ["|", "/", "-", "\\"]
    INTERVAL = 0.1

    def __init__(self, message, stream=None, enabled=None):
        self.message = message
        self.stream = stream or sys.stderr
        self.enabled = self.stream.isatty() if enabled is None else enabled
        self._done = threading.Event()
        self._thread = None

    def _run(self):
        i = 0
        while not self._done.is_set():
            self.stream.write(f"\r{self.message} {self.FRAMES[i]}")
            self.stream.flush()
            i = (i + 1) % len(self.FRAMES)
            self._done.wait(self.INTERVAL)
        # Clear the spinner line
        self.stream.write("\r" + " " * (len(self.message) + 2) + "\r")
        self.stream.flush()

    def start(self):
        if self.enabled and self._thread is None:
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()
        return self

    def stop(self):
        self._done.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc):
        self.stop()
