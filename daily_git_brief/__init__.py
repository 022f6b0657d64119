"""
Daily Git Brief
Daily trending-repository collection, enrichment and language trend API
"""

__version__ = "1.0.0"
__author__ = "Daily Git Brief Team"

# NOTE:
# Avoid importing heavy modules (like configuration) at package import time to
# keep "import daily_git_brief" lightweight and side-effect free, particularly
# for unit tests that only need single subpackages such as the aggregation math.

__all__ = []
