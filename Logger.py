"""
================================================================================
Logger Utility Module
================================================================================
Author      : Breno Farias da Silva
Created     : 2026-10-18
Description :
    This module provides a Logger class that writes every message both to the
    terminal and to a log file. ANSI color codes are kept on the terminal
    when it is a TTY and always stripped from the log file, so colored
    messages stay readable in both places.

    Key features include:
        - Simultaneous terminal and file output
        - ANSI escape sequence removal for the log file
        - Thread-safe writes for worker pools
        - Drop-in replacement for sys.stdout / sys.stderr

Usage:
    1. Create a Logger instance:
        logger = Logger("./Logs/main.log", clean=True)
    2. Write messages directly or redirect stdout:
        logger.write("Scraping started")
        sys.stdout = logger
        print("Scraping started")  # one line in the terminal and in the file

Outputs:
    - Log file at the given path (parent directories are created)

Dependencies:
    - Python >= 3.8

Assumptions & Notes:
    - clean=True truncates the log file, clean=False appends to it
    - Blank lines cannot be logged; every write is one message line
"""

import os  # Interact with operating system functionalities
import re  # Perform regular expression operations
import sys  # Access system-specific parameters and functions
import threading  # Serialize writes coming from worker threads


# Execution Constants:
ANSI_ESCAPE_PATTERN = re.compile(r"\x1B\[[0-9;]*[a-zA-Z]")  # Matches ANSI color and cursor sequences


# Classes Definitions:


class Logger:
    """
    Writes messages to the terminal and to a log file at the same time.
    """


    def __init__(self, logfile_path, clean=False):
        """
        Opens the log file, creating its parent directory when needed.

        :param logfile_path: Path to the log file
        :param clean: If True, truncate the log file instead of appending
        :return: None
        """

        self.logfile_path = logfile_path  # Store the log file path
        parent_directory = os.path.dirname(logfile_path)  # Directory holding the log file
        if parent_directory:  # Only create a directory when the path has one
            os.makedirs(parent_directory, exist_ok=True)

        self.logfile = open(logfile_path, "w" if clean else "a", encoding="utf-8")  # Open the log file in the requested mode
        self.is_tty = sys.__stdout__ is not None and sys.__stdout__.isatty()  # Keep colors only on a real terminal
        self.lock = threading.Lock()  # Serialize writes from worker threads


    def write(self, message):
        """
        Writes a message to the terminal and to the log file.
        A trailing newline is added when the message has none. Whitespace-only
        messages are dropped, so print() through a redirected stdout does not
        add a blank line after each message.

        :param message: Message to write
        :return: None
        """

        if message is None:  # Nothing to write
            return

        out = str(message)  # Coerce the message to text
        if not out.strip():  # print() sends its line ending as a separate write; blank writes are dropped
            return

        if not out.endswith("\n"):  # Each message ends a line
            out += "\n"

        clean_out = ANSI_ESCAPE_PATTERN.sub("", out)  # Colorless copy for the file

        with self.lock:  # One message at a time
            self.logfile.write(clean_out)  # Write the colorless message to the file
            self.logfile.flush()  # Keep the file current while the run is going

            terminal = sys.__stdout__  # Write to the real terminal, not a redirected stdout
            if terminal is not None:  # Detached processes have no terminal
                terminal.write(out if self.is_tty else clean_out)
                terminal.flush()


    def flush(self):
        """
        Flushes the log file.

        :return: None
        """

        with self.lock:  # Avoid flushing during a write
            if not self.logfile.closed:  # Closed files cannot be flushed
                self.logfile.flush()


    def close(self):
        """
        Closes the log file.

        :return: None
        """

        with self.lock:  # Avoid closing during a write
            if not self.logfile.closed:  # Closing twice is a no-op
                self.logfile.close()
