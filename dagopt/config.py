"""Global configuration for dagopt."""

import os

# ---------- Instruction vocabulary ----------
COPY_OP = "="
# Operators folded at optimization time when both operands are literals.
FOLDABLE_OPS = ("+", "-", "*", "/")
# Fresh names for values whose every alias was rebound: <prefix>0, <prefix>1, ...
TEMP_PREFIX = os.environ.get("DAGOPT_TEMP_PREFIX", "_t")

# ---------- Input / output files ----------
# Directory mode picks up files matching this glob (sorted by name).
INPUT_GLOB = os.environ.get("DAGOPT_INPUT_GLOB", "*.txt")
# Per-input output file: <stem><OUTPUT_SUFFIX>
OUTPUT_SUFFIX = os.environ.get("DAGOPT_OUTPUT_SUFFIX", ".opt.txt")
# Consulted when nothing was typed on stdin.
DEFAULT_SAMPLE_FILE = os.environ.get("DAGOPT_SAMPLE_FILE", "test/test1.txt")

# ---------- Diagnostics ----------
LOG_LEVEL = os.environ.get("DAGOPT_LOG_LEVEL", "WARNING")

# ---------- Service (used by the demo client) ----------
SERVICE_URL = os.environ.get("DAGOPT_SERVICE_URL", "http://localhost:8000")

# ---------- Built-in sample block (last-resort input) ----------
SAMPLE_BLOCK = [
    "(*, A, B, T1)",
    "(/, 6, 2, T2)",
    "(-, T1, T2, T3)",
    "(=, T3, , X)",
    "(=, 5, , C)",
    "(*, A, B, T4)",
    "(=, 2, , C)",
    "(+, 18, C, T5)",
    "(*, T4, T5, T6)",
    "(=, T6, , Y)",
]
