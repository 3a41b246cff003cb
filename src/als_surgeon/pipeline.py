"""
Surgery Pipeline

Runs one job against one Live Set: read and decompress it, optionally strip
subtrees and write the result, optionally list plugins or extract attribute
values. Every step runs to completion in memory before anything is written,
so a failing job leaves no output file behind.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import MalformedXmlError
from .project_io import load_als, save_als, write_output
from .tag_extractor import (
    Group, PluginSchema, find_subtrees, list_all_plugins, lookup_attribute,
)
from .tag_filter import FilterStats, TagFilter

logger = logging.getLogger(__name__)


@dataclass
class SurgeryJob:
    """What to do with one Live Set."""
    source: Path
    delete_tags: List[str] = field(default_factory=list)
    output: Optional[Path] = None
    compress: bool = False

    # Plugin listing
    plugin_schemas: List[PluginSchema] = field(default_factory=list)

    # Free-form extraction: groups under `extract_root`, optionally narrowed
    # to one attribute of one element per group
    extract_root: Optional[str] = None
    extract_element: Optional[str] = None
    extract_key: Optional[str] = None

    def __post_init__(self):
        self.source = Path(self.source)
        if self.output is not None:
            self.output = Path(self.output)
        if (self.extract_element is None) != (self.extract_key is None):
            raise ValueError("extract_element and extract_key must be given together")

    @property
    def strips(self) -> bool:
        return bool(self.delete_tags) or self.output is not None


@dataclass
class JobResult:
    """Outcome of a SurgeryJob."""
    source: str
    output_path: Optional[str] = None
    bytes_read: int = 0
    bytes_written: int = 0
    filter_stats: Optional[FilterStats] = None
    plugins: Dict[str, List[str]] = field(default_factory=dict)
    groups: List[Group] = field(default_factory=list)
    values: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'source': self.source,
            'output_path': self.output_path,
            'bytes_read': self.bytes_read,
            'bytes_written': self.bytes_written,
            'filter_stats': self.filter_stats.to_dict() if self.filter_stats else None,
            'plugins': self.plugins,
            'groups': [[element.to_dict() for element in group] for group in self.groups],
            'values': self.values,
        }


def default_output_path(source: Path, suffix: str = '.stripped',
                        compress: bool = False) -> Path:
    """`song.als` -> `song.stripped.xml` (or `song.stripped.als`)."""
    extension = '.als' if compress else '.xml'
    return source.with_name(f"{source.stem}{suffix}{extension}")


def run_job(job: SurgeryJob) -> JobResult:
    """Execute `job` and report what it did."""
    logger.info(f"Processing {job.source}")
    xml_data = load_als(job.source)
    result = JobResult(source=str(job.source), bytes_read=len(xml_data))

    try:
        if job.plugin_schemas:
            result.plugins = list_all_plugins(xml_data, job.plugin_schemas)

        if job.extract_root:
            result.groups = find_subtrees(xml_data, job.extract_root)
            if job.extract_element:
                for group in result.groups:
                    value = lookup_attribute(group, job.extract_element, job.extract_key)
                    if value is not None:
                        result.values.append(value)

        if job.strips:
            tag_filter = TagFilter(job.delete_tags)
            stripped = tag_filter.filter(xml_data)
            result.filter_stats = tag_filter.stats
    except MalformedXmlError as e:
        if e.path is None:
            e.path = str(job.source)
        raise

    if job.strips:
        output = job.output or default_output_path(job.source, compress=job.compress)
        if job.compress:
            save_als(stripped, output)
        else:
            write_output(stripped, output)
        result.output_path = str(output)
        result.bytes_written = output.stat().st_size

    return result
