"""Console logging for the interpreter and its front-end.

Diagnostics can come from two places: plain host code (ROM loading, the
front-end loop) and traced JAX code (handlers running under ``jax.jit``).
The latter cannot print directly, so :func:`report_if` routes the message
through ``jax.debug.callback`` and only when its predicate holds.
"""

import sys
import time

import jax
import jax.numpy as jnp


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConsoleLogger:
    """Console logger with level filtering, colours and elapsed-time stamps."""

    def __init__(
        self,
        name: str = "chipjax",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.stream = stream
        self.log_level = log_level.upper()
        out = stream or sys.stderr
        self.use_colors = use_colors and hasattr(out, "isatty") and out.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        palette = {
            "DEBUG": "\033[36m",
            "INFO": "\033[32m",
            "WARNING": "\033[33m",
            "ERROR": "\033[31m",
            "CRITICAL": "\033[35m",
        }
        self.colors = palette if self.use_colors else {}

    def set_level(self, log_level: str):
        log_level = log_level.upper()
        if log_level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.log_level = log_level

    def is_enabled_for(self, level: str) -> bool:
        return LEVELS.index(level.upper()) >= LEVELS.index(self.log_level)

    def _format_message(self, level: str, message: str) -> str:
        timestamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        level_str = f"[{level:>8s}]"
        color = self.colors.get(level)
        if color:
            level_str = f"{color}{level_str}\033[0m"
        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        level = level.upper()
        if self.is_enabled_for(level):
            print(self._format_message(level, message), file=self.stream or sys.stderr, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


logger = ConsoleLogger()


def set_log_level(log_level: str):
    """Set the level of the package logger."""
    logger.set_level(log_level)


def report_if(pred, level: str, message: str, *args):
    """Log ``message.format(*args)`` from traced code when ``pred`` is true.

    ``args`` may be traced values; they are converted to Python ints on the
    host before formatting.
    """
    def _emit(*values):
        logger.log(level, message.format(*(int(v) for v in values)))

    jax.lax.cond(
        pred,
        lambda: jax.debug.callback(_emit, *args),
        lambda: None,
    )


def format_registers(state) -> str:
    """Multi-line dump of the CPU registers, four V registers per line."""
    V = [int(v) for v in jnp.asarray(state.V)]
    lines = [
        f"PC=0x{int(state.pc):03X} I=0x{int(state.I):03X} SP={int(state.stack.pointer)} "
        f"DT={int(state.delay_timer)} ST={int(state.sound_timer)}"
        + (f" WAIT->V{int(state.paused_register):X}" if bool(state.paused) else "")
    ]
    for base in range(0, len(V), 4):
        lines.append(" ".join(f"V{i:X}={V[i]:02X}" for i in range(base, base + 4)))
    return "\n".join(lines)
