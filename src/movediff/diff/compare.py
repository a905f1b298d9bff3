"""Full package comparison: structural diff plus per-module source diffs.

Orchestrates both differs for one pair of package versions and stamps the
result with comparison metadata.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone

from movediff.config.models import DiffConfig, MoveDiffConfig
from movediff.core.logging import clear_comparison_id, get_logger, set_comparison_id
from movediff.diff.models import (
    ComparisonMetadata,
    DiffOptions,
    ModuleInterface,
    PackageComparison,
    SourceDiff,
)
from movediff.diff.source import SourceDiffer
from movediff.diff.structural import StructuralDiffer

log = get_logger(__name__)


def options_from_config(config: DiffConfig) -> DiffOptions:
    return DiffOptions(
        context_lines=config.context_lines,
        ignore_whitespace=config.ignore_whitespace,
        modules=frozenset(config.modules) if config.modules is not None else None,
    )


def compare_package(
    before_modules: Mapping[str, ModuleInterface],
    after_modules: Mapping[str, ModuleInterface],
    *,
    from_version: int,
    to_version: int,
    from_package_id: str,
    to_package_id: str,
    before_sources: Mapping[str, str] | None = None,
    after_sources: Mapping[str, str] | None = None,
    network: str = "mainnet",
    options: DiffOptions | None = None,
    config: MoveDiffConfig | None = None,
) -> PackageComparison:
    """Compare two versions of a package.

    Source diffs are computed only when at least one source snapshot is
    given.  Explicit ``options`` win over ``config.diff``.
    """
    if options is None:
        options = options_from_config((config or MoveDiffConfig()).diff)

    set_comparison_id()
    try:
        log.info(
            "package_comparison_started",
            from_package_id=from_package_id,
            to_package_id=to_package_id,
            from_version=from_version,
            to_version=to_version,
        )

        structural = StructuralDiffer().compare_packages(
            before_modules,
            after_modules,
            from_version,
            to_version,
            from_package_id,
            to_package_id,
        )

        sources: dict[str, SourceDiff] = {}
        if before_sources is not None or after_sources is not None:
            sources = SourceDiffer(options).diff_package(
                before_sources or {},
                after_sources or {},
                from_version,
                to_version,
            )

        log.info(
            "package_comparison_complete",
            total_changes=structural.summary.total_changes,
            breaking=structural.summary.breaking_changes,
            source_modules=len(sources),
        )

        return PackageComparison(
            structural=structural,
            sources=sources,
            metadata=ComparisonMetadata(
                from_package_id=from_package_id,
                to_package_id=to_package_id,
                from_version=from_version,
                to_version=to_version,
                network=network,
                compared_at=datetime.now(timezone.utc).isoformat(),
            ),
        )
    finally:
        clear_comparison_id()
