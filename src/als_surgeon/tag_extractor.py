"""
Tag Extractor

Pulls plugin and device metadata out of a Live Set without parsing it into a
tree. Extraction happens in two stages:

1. find_subtrees(): for each element named `search_name`, collect the
   self-closing elements found inside it into a group.
2. lookup_attribute(): read one attribute of one element within a group.

In a Live Set, a VST plugin reference looks like:

    <VstPluginInfo Id="0">
        <WinPosX Value="43" />
        <Path Value="C:/VstPlugins/ValhallaRoom.dll" />
        <PlugName Value="ValhallaRoom" />
        <Preset>
            <VstPreset Id="1">
                <ParameterSettings />
            </VstPreset>
        </Preset>
    </VstPluginInfo>

so list_plugin_names(doc, 'VstPluginInfo', 'PlugName', 'Value') returns
['ValhallaRoom'].

Note: every self-closing element inside the search root is captured, however
deeply nested (in the example above <ParameterSettings /> lands in the same
group as <PlugName />). Lookups are first-match, so a nested element only
matters if it shares a name with the one being looked up before it.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .events import Attributes, EmptyElement, EndOfStream, first_attribute, iter_events
from .scanner import ScanPosition, SubtreeScanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapturedElement:
    """A self-closing element captured inside a search root."""
    name: str
    attributes: Attributes

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return first_attribute(self.attributes, key, default)

    def to_dict(self) -> Dict:
        return {'name': self.name, 'attributes': [list(pair) for pair in self.attributes]}


Group = List[CapturedElement]


@dataclass(frozen=True)
class PluginSchema:
    """Where one plugin format stores its display name."""
    key: str              # short id used on the command line and in config
    container: str        # element that wraps one plugin reference
    name_element: str     # self-closing element holding the name
    name_attribute: str   # attribute of name_element carrying the value
    description: str = ""


# Older Live Sets only know VstPluginInfo; Live 11+ adds Vst3PluginInfo.
KNOWN_SCHEMAS: Dict[str, PluginSchema] = {
    'vst2': PluginSchema('vst2', 'VstPluginInfo', 'PlugName', 'Value', "VST2 plugin"),
    'vst3': PluginSchema('vst3', 'Vst3PluginInfo', 'Name', 'Value', "VST3 plugin"),
    'au': PluginSchema('au', 'AuPluginInfo', 'Name', 'Value', "Audio Unit plugin"),
}


def find_subtrees(document: bytes, search_name: str) -> List[Group]:
    """Group the self-closing elements inside each `search_name` element.

    Returns one group per top-level occurrence of `search_name`, in document
    order, including empty groups. A self-closing `<search_name/>` has no
    content and yields no group.
    """
    scanner = SubtreeScanner.for_names([search_name])
    groups: List[Group] = []
    current: Group = []

    for event in iter_events(document):
        if isinstance(event, EndOfStream):
            break

        position = scanner.feed(event)
        if position is ScanPosition.ENTER:
            current = []
        elif position is ScanPosition.INSIDE and isinstance(event, EmptyElement):
            current.append(CapturedElement(event.name, event.attributes))
        elif position is ScanPosition.EXIT:
            groups.append(current)
            current = []

    logger.debug(f"Found {len(groups)} <{search_name}> subtree(s)")
    return groups


def lookup_attribute(group: Iterable[CapturedElement], element_name: str,
                     attribute_key: str) -> Optional[str]:
    """Value of `attribute_key` on the first `element_name` in `group`.

    Returns None when the group has no such element, or when the first such
    element lacks the attribute. Later elements with the same name are not
    consulted.
    """
    for element in group:
        if element.name == element_name:
            return element.get(attribute_key)
    return None


def list_plugin_names(document: bytes, container_name: str,
                      name_element: str, name_key: str) -> List[str]:
    """Display names of every plugin reference of one format.

    Plugin references without the name element or attribute are skipped.
    """
    names = []
    for group in find_subtrees(document, container_name):
        value = lookup_attribute(group, name_element, name_key)
        if value is not None:
            names.append(value)
    return names


def list_schema_plugins(document: bytes, schema: PluginSchema) -> List[str]:
    return list_plugin_names(document, schema.container,
                             schema.name_element, schema.name_attribute)


def list_all_plugins(document: bytes,
                     schemas: Optional[Iterable[PluginSchema]] = None) -> Dict[str, List[str]]:
    """Plugin names for each schema, keyed by schema key.

    Each schema is a separate pass over the document.
    """
    if schemas is None:
        schemas = KNOWN_SCHEMAS.values()

    results: Dict[str, List[str]] = {}
    for schema in schemas:
        results[schema.key] = list_schema_plugins(document, schema)
        logger.info(f"{schema.key}: {len(results[schema.key])} plugin(s)")
    return results


def resolve_schemas(keys: Iterable[str],
                    table: Optional[Dict[str, PluginSchema]] = None) -> List[PluginSchema]:
    """Look up schemas by key, raising KeyError with the known keys."""
    table = KNOWN_SCHEMAS if table is None else table
    schemas = []
    for key in keys:
        if key not in table:
            raise KeyError(f"Unknown plugin schema '{key}' (known: {', '.join(sorted(table))})")
        schemas.append(table[key])
    return schemas
