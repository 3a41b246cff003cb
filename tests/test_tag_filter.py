"""
Tests for the tag filter.

Tests subtree removal, synthetic indentation, text handling, statistics and
failure on malformed input.
"""

import pytest
from pathlib import Path
import sys

# Add the src directory to path for direct import
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from als_surgeon.errors import MalformedXmlError
from als_surgeon.events import EmptyElement, StartElement, Text, iter_events
from als_surgeon.tag_filter import INDENT_UNIT, Indentation, TagFilter, filter_tags


def _element_names(document: bytes):
    return {event.name for event in iter_events(document)
            if isinstance(event, (StartElement, EmptyElement))}


class TestSubtreeRemoval:
    """Tests for removing marked subtrees."""

    def test_sidechain_scenario(self):
        """SideChain and its child X are removed; A and B stay."""
        output = filter_tags(b'<A><SideChain><X/></SideChain><B/></A>', {'SideChain'})

        assert output == b'<A>\n    <B/>\n</A>\n'

    def test_nested_same_name(self):
        """A marked element nested in a marked subtree is removed with it."""
        output = filter_tags(b'<A><S><S><X/></S></S><B/></A>', {'S'})
        assert output == b'<A>\n    <B/>\n</A>\n'

    def test_self_closing_marked_element(self):
        """A self-closing marked element is dropped without entering a subtree."""
        tag_filter = TagFilter({'S'})
        output = tag_filter.filter(b'<A><S/><B/></A>')

        assert output == b'<A>\n    <B/>\n</A>\n'
        assert tag_filter.stats.empty_elements_removed == 1
        assert tag_filter.stats.subtrees_removed == 0

    def test_multiple_names(self):
        doc = b'<A><SideChain><X/></SideChain><Buffer><Y/></Buffer><B/></A>'
        output = filter_tags(doc, {'SideChain', 'Buffer'})
        assert output == b'<A>\n    <B/>\n</A>\n'

    def test_names_in_deleted_subtree_ignored(self):
        """Names inside a deleted subtree do not matter, marked or not."""
        output = filter_tags(b'<A><S><Keep/><T/></S></A>', {'S', 'Keep'})
        assert output == b'<A>\n</A>\n'

    def test_single_name_as_string(self):
        assert filter_tags(b'<A><S/></A>', 'S') == b'<A>\n</A>\n'

    def test_root_removed(self):
        """Removing the root element leaves only what is outside it."""
        output = filter_tags(b'<?xml version="1.0"?><S><X/></S>', {'S'})
        assert output == b'<?xml version="1.0"?>\n'


class TestReformatting:
    """Tests for synthetic indentation."""

    def test_empty_set_reformats(self):
        output = filter_tags(b'<A><B><C/></B></A>', set())
        assert output == b'<A>\n    <B>\n        <C/>\n    </B>\n</A>\n'

    def test_input_whitespace_is_discarded(self):
        """Differently indented inputs produce the same output."""
        compact = b'<A><B><C/></B></A>'
        spread = b'<A>\n\t<B>\n\t\t\t<C/>\n  </B>\n\n</A>\n'

        assert filter_tags(spread, set()) == filter_tags(compact, set())

    def test_declaration_first_line(self):
        doc = b'<?xml version="1.0" encoding="UTF-8"?>\n<Ableton MajorVersion="5"><SideChain/></Ableton>'
        output = filter_tags(doc, {'SideChain'})

        assert output == (b'<?xml version="1.0" encoding="UTF-8"?>\n'
                          b'<Ableton MajorVersion="5">\n'
                          b'</Ableton>\n')

    def test_tags_copied_byte_for_byte(self):
        """Attribute order, quoting and spacing inside tags are unchanged."""
        output = filter_tags(b"<A  b='1'   a=\"2\"><B x='&amp;'/></A>", set())
        assert output == b"<A  b='1'   a=\"2\">\n    <B x='&amp;'/>\n</A>\n"

    def test_comments_are_indented(self):
        output = filter_tags(b'<A><!-- keep --><B/></A>', set())
        assert output == b'<A>\n    <!-- keep -->\n    <B/>\n</A>\n'

    def test_indent_uses_four_spaces(self):
        assert INDENT_UNIT == "    "

    def test_indentation_never_negative(self):
        """Shrinking an empty indent is a no-op."""
        indent = Indentation()
        indent.pop()
        indent.pop()
        assert str(indent) == ""

        indent.push()
        indent.push()
        indent.pop()
        assert str(indent) == INDENT_UNIT
        assert len(str(indent)) % len(INDENT_UNIT) == 0


class TestText:
    """Tests for text pass-through."""

    def test_text_passed_through(self):
        """Tags next to text are written flush against it."""
        output = filter_tags(b'<A><B>hello world</B></A>', set())
        assert output == b'<A>\n    <B>hello world</B>\n</A>\n'

    def test_text_keeps_own_whitespace(self):
        output = filter_tags(b'<A>  hi  </A>', set())
        assert output == b'<A>  hi  </A>\n'

    def test_mixed_content(self):
        output = filter_tags(b'<R><A>pre<B/>post</A><C/></R>', set())
        assert output == b'<R>\n    <A>pre<B/>post</A>\n    <C/>\n</R>\n'

    def test_text_unchanged_by_repeated_filtering(self):
        """Running the filter over its own output leaves text runs alone."""
        doc = b'<A>\n\t<B>hello</B>\n\t<C> two words <D/>\n</C><S>gone</S></A>'
        once = filter_tags(doc, {'S'})
        twice = filter_tags(once, {'S'})

        assert twice == once
        assert filter_tags(twice, {'S'}) == once
        texts = [event.content for event in iter_events(once) if isinstance(event, Text)
                 and not event.is_whitespace]
        assert texts == [b'hello', b' two words ']

    def test_text_in_deleted_subtree_dropped(self):
        output = filter_tags(b'<A><S>secret</S></A>', {'S'})
        assert output == b'<A>\n</A>\n'
        assert b'secret' not in output


class TestLiveSet:
    """Tests against a realistic Live Set document."""

    def test_sidechain_removed(self, live_set):
        output = filter_tags(live_set, {'SideChain'})

        assert b'SideChain' not in output
        names = _element_names(output)
        # Only found under SideChain in the input
        for descendant in ('OnOff', 'RoutedInput', 'Routable', 'Target'):
            assert descendant not in names
        # Also found outside SideChain
        assert 'Manual' in names
        assert b'<PlugName Value="ValhallaRoom" />' in output
        assert output.startswith(b'<?xml version="1.0" encoding="UTF-8"?>\n<Ableton ')

    def test_retained_elements_unchanged(self, live_set):
        """Everything not under a removed root is still there."""
        before = _element_names(live_set)
        after = _element_names(filter_tags(live_set, {'SideChain'}))
        assert after == before - {'SideChain', 'OnOff', 'RoutedInput', 'Routable', 'Target'}

    def test_idempotent(self, live_set):
        """Filtering the output again changes nothing."""
        once = filter_tags(live_set, {'SideChain', 'Buffer'})

        assert filter_tags(once, {'SideChain', 'Buffer'}) == once
        assert filter_tags(once, set()) == once

    def test_idempotent_with_retained_text(self, live_set):
        """The <Data> text under Buffer survives repeated passes intact."""
        once = filter_tags(live_set, {'SideChain'})

        assert b'<Data>0A1B2C3D</Data>' in once
        assert filter_tags(once, {'SideChain'}) == once

    def test_stats(self, live_set):
        tag_filter = TagFilter(['SideChain', 'Buffer'])
        output = tag_filter.filter(live_set)
        stats = tag_filter.stats

        assert stats.subtrees_removed == 2
        assert stats.empty_elements_removed == 0
        assert stats.bytes_in == len(live_set)
        assert stats.bytes_out == len(output)
        assert stats.to_dict()['subtrees_removed'] == 2

    def test_stats_reset_between_runs(self):
        tag_filter = TagFilter({'S'})
        tag_filter.filter(b'<A><S/><S/></A>')
        tag_filter.filter(b'<A><S/></A>')
        assert tag_filter.stats.empty_elements_removed == 1

    def test_suppressed_event_count(self):
        tag_filter = TagFilter({'SideChain'})
        tag_filter.filter(b'<A><SideChain><X/></SideChain><B/></A>')

        assert tag_filter.stats.events_suppressed == 3
        assert tag_filter.stats.elements_emitted == 2


class TestMalformed:
    """Malformed documents fail without output."""

    def test_unmatched_end_tag(self):
        with pytest.raises(MalformedXmlError):
            filter_tags(b'<A></B>', set())

    def test_unmatched_end_inside_deleted_subtree(self):
        with pytest.raises(MalformedXmlError):
            filter_tags(b'<A><S></A>', {'S'})

    def test_stray_end_tag(self):
        with pytest.raises(MalformedXmlError):
            filter_tags(b'<A/></A>', {'A'})


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
