"""Top-level package for the mail_to_calendar project.

Turns booking confirmation and cancellation emails into calendar changes,
suppressing duplicates and resolving cancellations by similarity. The
public run() helper is re-exported so callers can do
`python -m mail_to_calendar` or `from mail_to_calendar import run; run()`.
"""

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version("mail-to-calendar")
except _metadata.PackageNotFoundError:  # pragma: no cover – running from source
    __version__ = "0.0.0"

from .workflows.event_pipeline import run, run_forever  # convenience re-export

__all__ = ["run", "run_forever", "__version__"]
