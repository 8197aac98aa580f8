"""Weight projection, goal analytics and logging streaks."""

__version__ = "0.1.0"
