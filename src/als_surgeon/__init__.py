"""
ALS Surgeon - streaming structural editor for Ableton Live Sets

Removes element subtrees from .als projects and extracts plugin metadata
with a single-pass event filter instead of an in-memory tree.
"""

__version__ = "0.3.0"

from .errors import (
    SurgeonError, IoError, DecompressionError, MalformedXmlError,
    AttributeDecodeError, ErrorCategory,
)
from .events import iter_events
from .tag_filter import TagFilter, FilterStats, filter_tags
from .tag_extractor import (
    CapturedElement, PluginSchema, KNOWN_SCHEMAS,
    find_subtrees, lookup_attribute, list_plugin_names, list_all_plugins,
)
from .project_io import load_als, save_als, decompress, compress, write_output
from .pipeline import SurgeryJob, JobResult, run_job
