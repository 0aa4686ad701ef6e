"""Zipcollector: collect documentation contents from zip archives.

Fetches zip bundles referenced by documentation sources, caching downloads
across runs with ETag revalidation, and merges their members into content
buckets before classification or into the content catalog after it:
  - Version discovery from gradle.properties or pom.xml (worktree or commit)
  - Ordered candidate locations filtered by version type
  - Conditional GET cache with per-include sidecar records
  - Snapshot bucket dropping on missing archives
  - 60-day cache retention sweeping
"""

__version__ = "0.1.0"
__description__ = "Collect documentation contents from zip archives"

from zipcollector.core.collector import ZipContentsCollector
from zipcollector.core.pipeline import PipelineDriver
from zipcollector.cli.app import app as cli

__all__ = ["ZipContentsCollector", "PipelineDriver", "cli", "__version__"]
