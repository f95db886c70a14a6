"""Run options shared by every cmsfixup workflow.

The options are passed explicitly to each workflow call instead of living in
module-level state, so two runs with different settings never interfere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_SITE_HOST = "www.nlm.nih.gov"


@dataclass(frozen=True)
class RunOptions:
    """Configuration for one batch run.

    Defaults describe a real (non dry-run), unbounded, quiet run.
    """

    # Emit DEBUG-level decisions ("no need for changes", per-link detail)
    verbose: bool = False

    # Report intended changes without writing anything
    dry_run: bool = False

    # Visit at most this many records in "all records" mode (None = no bound)
    max_count: int | None = None

    # Hostname whose absolute links are collapsed to host-relative paths
    site_host: str = DEFAULT_SITE_HOST

    @classmethod
    def from_cli(
        cls,
        *,
        verbose: bool = False,
        dry_run: bool = False,
        max_count: int | None = None,
        site_host: str = DEFAULT_SITE_HOST,
    ) -> RunOptions:
        """Build RunOptions from CLI argument values.

        Raises:
            ValueError: If max_count is negative or site_host is blank
        """
        if max_count is not None and max_count < 0:
            raise ValueError(f"max count must be a non-negative integer, got {max_count}")

        host = (site_host or "").strip()
        if not host:
            raise ValueError("site host must not be empty")

        return cls(verbose=verbose, dry_run=dry_run, max_count=max_count, site_host=host)

    def allows(self, visited: int) -> bool:
        """Whether another record may be visited after ``visited`` records."""
        return self.max_count is None or visited < self.max_count

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization/logging."""
        return {
            "verbose": self.verbose,
            "dry_run": self.dry_run,
            "max_count": self.max_count,
            "site_host": self.site_host,
        }


__all__ = ["DEFAULT_SITE_HOST", "RunOptions"]
