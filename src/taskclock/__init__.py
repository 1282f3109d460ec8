"""taskclock: a task tracker with crash-resilient countdown timers."""

__version__ = "0.1.0"
